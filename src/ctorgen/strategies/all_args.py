from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import libcst as cst

from ctorgen.model import ConstructorType, Field
from ctorgen.naming import constructor_name
from ctorgen.strategies.base import (
    annotation,
    assemble_instance,
    choose_local_name,
    parameters,
    routed_fields,
    typed_param,
)


@dataclass(frozen=True)
class AllArgsConstructorGenerator:
    """Emits ``new_<type>(...)`` taking one parameter per eligible field."""

    kind: ConstructorType = ConstructorType.ALL_ARGS

    def generate(
        self,
        type_name: str,
        fields: Sequence[Field],
        excluded: Sequence[Field] = (),
    ) -> tuple[cst.BaseStatement, ...]:
        params = [f for f in routed_fields(fields, self.kind) if f.is_parameter]
        receiver = choose_local_name([type_name, *(f.param for f in params)])
        body = assemble_instance(
            type_name,
            receiver,
            self.kind,
            {f.name: cst.Name(f.param) for f in params},
            fields,
            excluded,
        )
        function = cst.FunctionDef(
            name=cst.Name(constructor_name(type_name)),
            params=parameters([typed_param(f.param, f.annotation) for f in params]),
            returns=annotation(type_name),
            body=cst.IndentedBlock(body=body),
        )
        return (function,)
