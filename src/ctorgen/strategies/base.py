from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence

import libcst as cst

from ctorgen.model import ConstructorType, Field, InitCall, ReturnPolicy

_ZERO_VALUES: dict[str, str] = {
    "int": "0",
    "float": "0.0",
    "complex": "0j",
    "str": '""',
    "bytes": 'b""',
    "bytearray": "bytearray()",
    "bool": "False",
    "list": "[]",
    "List": "[]",
    "dict": "{}",
    "Dict": "{}",
    "set": "set()",
    "Set": "set()",
    "frozenset": "frozenset()",
    "FrozenSet": "frozenset()",
    "tuple": "()",
    "Tuple": "()",
}
_WRAPPERS = frozenset({"Annotated", "Final"})


class ConstructorGenerator(Protocol):
    kind: ConstructorType

    def generate(
        self,
        type_name: str,
        fields: Sequence[Field],
        excluded: Sequence[Field] = (),
    ) -> tuple[cst.BaseStatement, ...]: ...


def _zero_for(expr: cst.BaseExpression) -> str:
    if isinstance(expr, cst.SimpleString):
        try:
            return _zero_for(cst.parse_expression(expr.evaluated_value))
        except cst.ParserSyntaxError:
            return "None"
    if isinstance(expr, cst.BinaryOperation):
        # X | None and other unions have no single zero value.
        return "None"
    head = expr.value if isinstance(expr, cst.Subscript) else expr
    if isinstance(head, cst.Attribute):
        name = head.attr.value
    elif isinstance(head, cst.Name):
        name = head.value
    else:
        return "None"
    if name in _WRAPPERS and isinstance(expr, cst.Subscript) and expr.slice:
        inner = expr.slice[0].slice
        if isinstance(inner, cst.Index):
            return _zero_for(inner.value)
    return _ZERO_VALUES.get(name, "None")


def zero_value(type_text: str) -> str:
    """Source text of the zero value for an annotation, ``None`` when unknown."""
    try:
        return _zero_for(cst.parse_expression(type_text))
    except cst.ParserSyntaxError:
        return "None"


def seed_value(field: Field) -> cst.BaseExpression:
    """Value of an attribute nobody supplied: its declared default, else zero."""
    return cst.parse_expression(field.default or zero_value(field.annotation))

def routed_fields(fields: Iterable[Field], kind: ConstructorType) -> list[Field]:
    return [f for f in fields if f.routed_to(kind)]


def choose_local_name(existing: Iterable[str], candidate: str = "instance") -> str:
    taken = set(existing)
    if candidate not in taken:
        return candidate
    idx = 1
    while f"{candidate}_{idx}" in taken:
        idx += 1
    return f"{candidate}_{idx}"


def annotation(text: str) -> cst.Annotation:
    return cst.Annotation(cst.parse_expression(text))


def parameters(params: Sequence[cst.Param]) -> cst.Parameters:
    return cst.Parameters(params=list(params))


def typed_param(name: str, type_text: str) -> cst.Param:
    return cst.Param(name=cst.Name(name), annotation=annotation(type_text))


def attribute_assign(
    receiver: str, attr: str, value: cst.BaseExpression
) -> cst.SimpleStatementLine:
    return cst.SimpleStatementLine(
        [
            cst.Assign(
                targets=[
                    cst.AssignTarget(
                        cst.Attribute(value=cst.Name(receiver), attr=cst.Name(attr))
                    )
                ],
                value=value,
            )
        ]
    )


def init_call_statement(
    receiver: str, field: Field, init_call: InitCall
) -> cst.SimpleStatementLine:
    call = f"{receiver}.{init_call.method}()"
    if init_call.policy is ReturnPolicy.ASSIGN:
        return cst.parse_statement(f"{receiver}.{field.name} = {call}")
    return cst.parse_statement(call)


def assemble_instance(
    type_name: str,
    receiver: str,
    kind: ConstructorType,
    values: Mapping[str, cst.BaseExpression],
    fields: Sequence[Field],
    excluded: Sequence[Field] = (),
) -> list[cst.BaseStatement]:
    """Statements that create, populate and return a ``type_name`` instance.

    ``__init__`` is bypassed, as with a record literal, so every declared
    attribute is assigned onto the bare instance: the value ``values`` holds
    for it, or else its declared default or zero value. Initializer calls of
    fields routed to ``kind`` then run in field order.
    """
    body: list[cst.BaseStatement] = [
        cst.parse_statement(f"{receiver} = {type_name}.__new__({type_name})")
    ]
    for field in (*fields, *excluded):
        value = values.get(field.name)
        body.append(
            attribute_assign(
                receiver, field.name, value if value is not None else seed_value(field)
            )
        )
    for field in fields:
        if field.init_call is not None and field.routed_to(kind):
            body.append(init_call_statement(receiver, field, field.init_call))
    body.append(cst.parse_statement(f"return {receiver}"))
    return body
