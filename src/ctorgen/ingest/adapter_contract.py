from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Mapping, Protocol, Sequence, runtime_checkable


class DeclKind(StrEnum):
    RECORD = "record"
    CLASS = "non-record class"
    FUNCTION = "function"
    ALIAS = "alias"


@dataclass(frozen=True)
class MemberDecl:
    """One annotated class-body member; ``name`` is ``None`` when anonymous."""

    name: str | None
    annotation: str
    default: str | None = None
    directive: str = ""

    @property
    def is_anonymous(self) -> bool:
        return self.name is None


@dataclass(frozen=True)
class TypeDecl:
    name: str
    kind: DeclKind
    module: str
    members: tuple[MemberDecl, ...] = ()


@dataclass(frozen=True)
class PackageDeclarations:
    name: str
    directory: Path
    is_package: bool
    files: tuple[Path, ...] = ()
    declarations: Mapping[str, TypeDecl] = field(default_factory=dict)
    module_names: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def lookup(self, type_name: str) -> TypeDecl | None:
        return self.declarations.get(type_name)


@runtime_checkable
class SourceLoader(Protocol):
    language_id: str
    file_extensions: tuple[str, ...]

    def discover_files(self, paths: Sequence[Path]) -> list[Path]: ...

    def load(self, paths: Sequence[Path]) -> PackageDeclarations: ...
