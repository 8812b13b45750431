from __future__ import annotations

import libcst as cst

from ctorgen.directives import parse_directives
from ctorgen.exceptions import (
    CtorgenError,
    DuplicateFieldName,
    InvalidDirective,
    TypeNotFound,
    TypeNotRecord,
)
from ctorgen.ingest.adapter_contract import DeclKind, MemberDecl, PackageDeclarations
from ctorgen.model import Field
from ctorgen.naming import builder_class_name, parameter_name, to_snake

# Wrappers that decorate a type without changing which type is embedded.
_TRANSPARENT_WRAPPERS = frozenset(
    {"Optional", "Annotated", "Final", "Required", "NotRequired", "ReadOnly"}
)


def _head_name(expr: cst.BaseExpression) -> str | None:
    if isinstance(expr, cst.Name):
        return expr.value
    if isinstance(expr, cst.Attribute):
        return expr.attr.value
    return None


def _is_none(expr: cst.BaseExpression) -> bool:
    return isinstance(expr, cst.Name) and expr.value == "None"


def _embedded_type(expr: cst.BaseExpression) -> str | None:
    if isinstance(expr, cst.SimpleString):
        try:
            return _embedded_type(cst.parse_expression(expr.evaluated_value))
        except cst.ParserSyntaxError:
            return None
    if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
        if _is_none(expr.right):
            return _embedded_type(expr.left)
        if _is_none(expr.left):
            return _embedded_type(expr.right)
        return None
    if isinstance(expr, cst.Subscript):
        head = _head_name(expr.value)
        if head in _TRANSPARENT_WRAPPERS and expr.slice:
            inner = expr.slice[0].slice
            if isinstance(inner, cst.Index):
                return _embedded_type(inner.value)
            return None
        return head
    return _head_name(expr)


def embedded_type_name(annotation: str) -> str | None:
    """Bare type name of an anonymous member: ``Optional["models.Address"]`` -> ``Address``."""
    try:
        expr = cst.parse_expression(annotation)
    except cst.ParserSyntaxError:
        return None
    return _embedded_type(expr)


def _attribute_name(type_name: str, member: MemberDecl) -> str:
    if member.name is not None:
        return member.name
    embedded = embedded_type_name(member.annotation)
    if not embedded:
        raise CtorgenError(
            f"cannot derive a field name for the anonymous member of {type_name!r} "
            f"annotated {member.annotation!r}",
            type_name=type_name,
        )
    return to_snake(embedded)


def collect_members(
    type_name: str, package: PackageDeclarations
) -> tuple[tuple[Field, ...], tuple[Field, ...]]:
    """Constructible fields of ``type_name`` and its excluded members.

    Members keep their declaration order, anonymous members are named after
    their type, and excluded members are set aside before uniqueness of the
    constructor-facing names is checked. An excluded member whose attribute
    is also declared by a constructible field is dropped.
    """
    decl = package.lookup(type_name)
    if decl is None:
        raise TypeNotFound(type_name)
    if decl.kind is not DeclKind.RECORD:
        raise TypeNotRecord(type_name, decl.kind.value)

    reserved = (type_name, builder_class_name(type_name))
    fields: list[Field] = []
    excluded: list[Field] = []
    seen: set[str] = set()
    for member in decl.members:
        name = _attribute_name(type_name, member)
        try:
            directives = parse_directives(member.directive, field_name=name)
        except InvalidDirective as exc:
            raise InvalidDirective(
                exc.reason, type_name=type_name, field_name=name
            ) from exc
        param = parameter_name(name, reserved)
        field = Field(
            name=name,
            param=param,
            annotation=member.annotation,
            is_embedded=member.is_anonymous,
            strategies=frozenset() if directives.exclude else directives.strategies,
            required=directives.required,
            init_call=directives.init_call,
            default=member.default,
        )
        if directives.exclude:
            excluded.append(field)
            continue
        if param in seen:
            raise DuplicateFieldName(type_name, param)
        seen.add(param)
        fields.append(field)

    taken = {f.name for f in fields}
    unset: list[Field] = []
    for field in excluded:
        if field.name not in taken:
            taken.add(field.name)
            unset.append(field)
    return tuple(fields), tuple(unset)


def collect(type_name: str, package: PackageDeclarations) -> tuple[Field, ...]:
    """Ordered constructible fields of ``type_name``; excluded members never appear."""
    fields, _ = collect_members(type_name, package)
    return fields
