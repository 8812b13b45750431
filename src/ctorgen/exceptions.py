"""Error taxonomy for ctorgen.

Every failure is terminal for a generation run: callers either receive a
complete unit or one of these exceptions.
"""

from __future__ import annotations


class CtorgenError(Exception):
    """Base class for all ctorgen failures."""

    def __init__(
        self,
        message: str,
        *,
        type_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.type_name = type_name
        self.field_name = field_name


class TypeNotFound(CtorgenError):
    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"type {type_name!r} is not declared in the package",
            type_name=type_name,
        )


class TypeNotRecord(CtorgenError):
    def __init__(self, type_name: str, kind: str) -> None:
        super().__init__(
            f"{type_name!r} is declared as {kind}, not as a record class",
            type_name=type_name,
        )
        self.kind = kind


class DuplicateFieldName(CtorgenError):
    def __init__(self, type_name: str, field_name: str) -> None:
        super().__init__(
            f"{type_name!r} has more than one field named {field_name!r} "
            "after embedded-name synthesis",
            type_name=type_name,
            field_name=field_name,
        )


class InvalidDirective(CtorgenError):
    def __init__(
        self,
        reason: str,
        *,
        type_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        location = ""
        if type_name and field_name:
            location = f" on {type_name}.{field_name}"
        elif field_name:
            location = f" on field {field_name!r}"
        super().__init__(
            f"invalid directive{location}: {reason}",
            type_name=type_name,
            field_name=field_name,
        )
        self.reason = reason


class UnknownConstructorType(CtorgenError):
    def __init__(self, given: str, known: tuple[str, ...]) -> None:
        super().__init__(
            f"unexpected constructor type has come [given={given}]; "
            f"expected one of {', '.join(known)}"
        )
        self.given = given


class SourceLoadFailure(CtorgenError):
    """Wraps errors raised while reading or parsing the source package."""


class EmitFailure(CtorgenError):
    """Raised when rendered output is not valid Python source."""
