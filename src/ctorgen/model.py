from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Sequence

import libcst as cst

from ctorgen.exceptions import UnknownConstructorType

GENERATED_HEADER_PREFIX = "Code generated by ctorgen"


class ConstructorType(StrEnum):
    ALL_ARGS = "all-args"
    BUILDER = "builder"


ALL_CONSTRUCTOR_TYPES: frozenset[ConstructorType] = frozenset(ConstructorType)
DEFAULT_CONSTRUCTOR_TYPES: tuple[ConstructorType, ...] = (ConstructorType.ALL_ARGS,)


class ReturnPolicy(StrEnum):
    DISCARD = "discard"
    ASSIGN = "assign"


@dataclass(frozen=True)
class InitCall:
    method: str
    policy: ReturnPolicy = ReturnPolicy.DISCARD


@dataclass(frozen=True)
class Field:
    name: str
    param: str
    annotation: str
    is_embedded: bool = False
    strategies: frozenset[ConstructorType] = ALL_CONSTRUCTOR_TYPES
    required: bool = False
    init_call: InitCall | None = None
    default: str | None = None

    def routed_to(self, kind: ConstructorType) -> bool:
        return kind in self.strategies

    @property
    def is_parameter(self) -> bool:
        return self.init_call is None


def normalize_constructor_types(
    names: Sequence[str] | str,
) -> tuple[ConstructorType, ...]:
    """Validate constructor type names, keeping first-seen order.

    Accepts a comma-separated string or a sequence of names; raises
    ``UnknownConstructorType`` on the first name outside the closed set.
    """
    if isinstance(names, str):
        names = names.split(",")
    known = tuple(kind.value for kind in ConstructorType)
    kinds: list[ConstructorType] = []
    for raw in names:
        name = str(raw).strip()
        if not name:
            continue
        if name not in known:
            raise UnknownConstructorType(name, known)
        kind = ConstructorType(name)
        if kind not in kinds:
            kinds.append(kind)
    return tuple(kinds)


@dataclass(frozen=True)
class GenerationRequest:
    type_name: str
    constructor_types: tuple[ConstructorType, ...] = DEFAULT_CONSTRUCTOR_TYPES
    invocation: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        type_name = (self.type_name or "").strip()
        if not type_name:
            raise ValueError("type name is required")
        kinds = normalize_constructor_types(self.constructor_types)
        if not kinds:
            raise ValueError("at least one constructor type is required")
        object.__setattr__(self, "type_name", type_name)
        object.__setattr__(self, "constructor_types", kinds)
        object.__setattr__(self, "invocation", tuple(self.invocation))


@dataclass(frozen=True)
class GeneratedUnit:
    package: str
    module: str
    type_name: str
    header: str
    declarations: tuple[cst.BaseStatement, ...] = field(default_factory=tuple)
