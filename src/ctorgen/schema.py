from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel

from ctorgen.model import Field


class InitCallDTO(BaseModel):
    method: str
    policy: str


class FieldDTO(BaseModel):
    name: str
    param: str
    annotation: str
    is_embedded: bool = False
    constructor_types: List[str]
    required: bool = False
    init_call: Optional[InitCallDTO] = None
    default: Optional[str] = None


class FieldsResponseDTO(BaseModel):
    package: str
    type_name: str
    fields: List[FieldDTO]


def field_dto(field: Field) -> FieldDTO:
    init_call = None
    if field.init_call is not None:
        init_call = InitCallDTO(
            method=field.init_call.method,
            policy=field.init_call.policy.value,
        )
    return FieldDTO(
        name=field.name,
        param=field.param,
        annotation=field.annotation,
        is_embedded=field.is_embedded,
        constructor_types=sorted(kind.value for kind in field.strategies),
        required=field.required,
        init_call=init_call,
        default=field.default,
    )


def fields_response(
    package: str, type_name: str, fields: Sequence[Field]
) -> FieldsResponseDTO:
    return FieldsResponseDTO(
        package=package,
        type_name=type_name,
        fields=[field_dto(f) for f in fields],
    )
