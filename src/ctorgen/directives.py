"""Per-field directive parsing.

A directive is the text following the configured prefix in a member's
trailing comment::

    age: int = 0  # ctor: only-builder, required
    total: int = 0  # ctor: init=compute_total, assign

Parsing happens once, at collection time; downstream code only sees the
resulting ``Directives`` value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ctorgen.exceptions import InvalidDirective
from ctorgen.model import (
    ALL_CONSTRUCTOR_TYPES,
    ConstructorType,
    InitCall,
    ReturnPolicy,
)

DEFAULT_DIRECTIVE_PREFIX = "ctor:"


class Directive(StrEnum):
    EXCLUDE = "exclude"
    ONLY_ALL_ARGS = "only-all-args"
    ONLY_BUILDER = "only-builder"
    REQUIRED = "required"
    INIT = "init"
    ASSIGN = "assign"


_ALIASES: dict[str, Directive] = {"-": Directive.EXCLUDE}


@dataclass(frozen=True)
class Directives:
    exclude: bool = False
    strategies: frozenset[ConstructorType] = ALL_CONSTRUCTOR_TYPES
    required: bool = False
    init_call: InitCall | None = None


NO_DIRECTIVES = Directives()


def extract_directive(comment: str | None, prefix: str = DEFAULT_DIRECTIVE_PREFIX) -> str:
    """Return the directive text of a ``# ...`` comment, or ``""``."""
    if not comment:
        return ""
    body = comment.lstrip("#").strip()
    if not body.startswith(prefix):
        return ""
    return body[len(prefix):].strip()


def parse_directives(text: str, *, field_name: str | None = None) -> Directives:
    if not text or not text.strip():
        return NO_DIRECTIVES
    seen: set[Directive] = set()
    init_method: str | None = None
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        key, sep, value = token.partition("=")
        key = key.strip()
        directive = _ALIASES.get(key)
        if directive is None:
            try:
                directive = Directive(key)
            except ValueError:
                raise InvalidDirective(
                    f"unknown token {token!r}", field_name=field_name
                ) from None
        if directive is Directive.INIT:
            init_method = value.strip()
            if not sep or not init_method.isidentifier():
                raise InvalidDirective(
                    "init= needs a method name", field_name=field_name
                )
        elif sep:
            raise InvalidDirective(
                f"{directive.value} takes no value", field_name=field_name
            )
        seen.add(directive)

    if Directive.EXCLUDE in seen:
        return Directives(exclude=True)
    if Directive.ASSIGN in seen and init_method is None:
        raise InvalidDirective("assign is only valid with init=", field_name=field_name)
    if {Directive.ONLY_ALL_ARGS, Directive.ONLY_BUILDER} <= seen:
        raise InvalidDirective(
            "only-all-args and only-builder are mutually exclusive",
            field_name=field_name,
        )
    required = Directive.REQUIRED in seen
    if required and init_method is not None:
        raise InvalidDirective(
            "a required field cannot also be populated by init=",
            field_name=field_name,
        )
    if required and Directive.ONLY_ALL_ARGS in seen:
        raise InvalidDirective(
            "required only applies to builder fields", field_name=field_name
        )

    strategies = ALL_CONSTRUCTOR_TYPES
    if Directive.ONLY_ALL_ARGS in seen:
        strategies = frozenset({ConstructorType.ALL_ARGS})
    elif Directive.ONLY_BUILDER in seen:
        strategies = frozenset({ConstructorType.BUILDER})

    init_call = None
    if init_method is not None:
        policy = ReturnPolicy.ASSIGN if Directive.ASSIGN in seen else ReturnPolicy.DISCARD
        init_call = InitCall(method=init_method, policy=policy)

    return Directives(
        strategies=strategies,
        required=required,
        init_call=init_call,
    )
