"""Constructor strategies, one generator per ``ConstructorType``."""

from ctorgen.model import ConstructorType
from ctorgen.strategies.all_args import AllArgsConstructorGenerator
from ctorgen.strategies.base import ConstructorGenerator
from ctorgen.strategies.builder import BuilderGenerator

GENERATORS: dict[ConstructorType, type[ConstructorGenerator]] = {
    ConstructorType.ALL_ARGS: AllArgsConstructorGenerator,
    ConstructorType.BUILDER: BuilderGenerator,
}


def generator_for(kind: ConstructorType) -> ConstructorGenerator:
    return GENERATORS[kind]()


__all__ = [
    "AllArgsConstructorGenerator",
    "BuilderGenerator",
    "ConstructorGenerator",
    "GENERATORS",
    "generator_for",
]
