from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import libcst as cst

from ctorgen.model import ConstructorType, Field
from ctorgen.naming import (
    builder_class_name,
    builder_entry_name,
    setter_name,
    staged_attribute,
)
from ctorgen.strategies.base import (
    annotation,
    assemble_instance,
    attribute_assign,
    choose_local_name,
    parameters,
    routed_fields,
    seed_value,
    typed_param,
)

_BUILT_FLAG = "__built"


def _initial_value(field: Field) -> cst.BaseExpression:
    if field.required:
        return cst.Name(field.param)
    return seed_value(field)


def _method(
    name: str,
    params: Sequence[cst.Param],
    returns: str | None,
    body: Sequence[cst.BaseStatement],
) -> cst.FunctionDef:
    return cst.FunctionDef(
        name=cst.Name(name),
        leading_lines=[] if name == "__init__" else [cst.EmptyLine()],
        params=parameters([cst.Param(name=cst.Name("self")), *params]),
        returns=annotation(returns) if returns else None,
        body=cst.IndentedBlock(body=list(body)),
    )


@dataclass(frozen=True)
class BuilderGenerator:
    """Emits ``<Type>Builder`` and its ``new_<type>_builder`` entry point.

    Required fields are entry-point parameters; every other staged field is
    seeded with its declared default or the zero value of its annotation and
    gets one fluent ``with_<field>`` setter. ``build()`` may run once per
    builder.
    """

    kind: ConstructorType = ConstructorType.BUILDER

    def generate(
        self,
        type_name: str,
        fields: Sequence[Field],
        excluded: Sequence[Field] = (),
    ) -> tuple[cst.BaseStatement, ...]:
        staged = [f for f in routed_fields(fields, self.kind) if f.is_parameter]
        required = [f for f in staged if f.required]
        optional = [f for f in staged if not f.required]
        builder_name = builder_class_name(type_name)

        init = _method(
            "__init__",
            [typed_param(f.param, f.annotation) for f in required],
            "None",
            [
                *(
                    attribute_assign("self", staged_attribute(f.param), _initial_value(f))
                    for f in staged
                ),
                cst.parse_statement(f"self.{_BUILT_FLAG} = False"),
            ],
        )
        setters = [
            _method(
                setter_name(f.param),
                [typed_param(f.param, f.annotation)],
                builder_name,
                [
                    attribute_assign("self", staged_attribute(f.param), cst.Name(f.param)),
                    cst.parse_statement("return self"),
                ],
            )
            for f in optional
        ]
        guard = cst.parse_statement(
            f"if self.{_BUILT_FLAG}:\n"
            f"    raise RuntimeError(\"{builder_name}.build() was already called; "
            f"start a new builder\")\n"
        )
        build = _method(
            "build",
            [],
            type_name,
            [
                guard,
                cst.parse_statement(f"self.{_BUILT_FLAG} = True"),
                *assemble_instance(
                    type_name,
                    choose_local_name([type_name]),
                    self.kind,
                    {
                        f.name: cst.Attribute(
                            value=cst.Name("self"),
                            attr=cst.Name(staged_attribute(f.param)),
                        )
                        for f in staged
                    },
                    fields,
                    excluded,
                ),
            ],
        )
        class_def = cst.ClassDef(
            name=cst.Name(builder_name),
            body=cst.IndentedBlock(body=[init, *setters, build]),
        )
        entry = cst.FunctionDef(
            name=cst.Name(builder_entry_name(type_name)),
            params=parameters([typed_param(f.param, f.annotation) for f in required]),
            returns=annotation(builder_name),
            body=cst.IndentedBlock(
                body=[
                    cst.parse_statement(
                        f"return {builder_name}({', '.join(f.param for f in required)})"
                    )
                ]
            ),
        )
        return (class_def, entry)
