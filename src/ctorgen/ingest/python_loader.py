from __future__ import annotations

from pathlib import Path
from typing import Sequence

import libcst as cst

from ctorgen.directives import DEFAULT_DIRECTIVE_PREFIX, extract_directive
from ctorgen.exceptions import SourceLoadFailure
from ctorgen.ingest.adapter_contract import (
    DeclKind,
    MemberDecl,
    PackageDeclarations,
    SourceLoader,
    TypeDecl,
)
from ctorgen.model import GENERATED_HEADER_PREFIX

_NON_RECORD_BASES = frozenset(
    {
        "Enum",
        "IntEnum",
        "StrEnum",
        "Flag",
        "IntFlag",
        "Protocol",
        "NamedTuple",
        "TypedDict",
    }
)
_FIELD_FACTORIES = frozenset({"field", "dataclasses.field"})


def _is_test_file(path: Path) -> bool:
    return path.name.startswith("test_") or path.name.endswith("_test.py")


def _is_generated(source: str) -> bool:
    first_line = source.lstrip().split("\n", 1)[0]
    return first_line.lstrip("#").strip().startswith(GENERATED_HEADER_PREFIX)


def _base_name(module: cst.Module, arg: cst.Arg) -> str:
    text = module.code_for_node(arg.value)
    return text.split("[", 1)[0].rsplit(".", 1)[-1].strip()


def _bound_import_names(node: cst.Import | cst.ImportFrom) -> set[str]:
    names: set[str] = set()
    if isinstance(node.names, cst.ImportStar):
        return names
    for alias in node.names:
        if alias.asname is not None:
            names.add(alias.evaluated_alias or "")
        else:
            names.add(alias.evaluated_name.split(".", 1)[0])
    names.discard("")
    return names


def _declared_default(module: cst.Module, value: cst.BaseExpression | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, cst.Call) and module.code_for_node(value.func) in _FIELD_FACTORIES:
        for arg in value.args:
            if arg.keyword is None:
                continue
            if arg.keyword.value == "default":
                return module.code_for_node(arg.value)
            if arg.keyword.value == "default_factory":
                factory = module.code_for_node(arg.value)
                if not isinstance(arg.value, (cst.Name, cst.Attribute)):
                    factory = f"({factory})"
                return f"{factory}()"
        return None
    return module.code_for_node(value)


def _is_class_var(annotation: str) -> bool:
    head = annotation.strip().split("[", 1)[0]
    return head.rsplit(".", 1)[-1] == "ClassVar"


class PythonSourceLoader(SourceLoader):
    language_id = "python"
    file_extensions = (".py",)

    def __init__(self, directive_prefix: str = DEFAULT_DIRECTIVE_PREFIX) -> None:
        self.directive_prefix = directive_prefix

    def discover_files(self, paths: Sequence[Path]) -> list[Path]:
        """Resolve CLI-style path arguments to the files of one package."""
        candidates = [Path(p) for p in paths] or [Path(".")]
        if len(candidates) == 1 and candidates[0].is_dir():
            directory = candidates[0]
            files = sorted(
                p
                for p in directory.iterdir()
                if p.is_file() and p.suffix in self.file_extensions and not _is_test_file(p)
            )
            if not files:
                raise SourceLoadFailure(f"no Python files found in {directory}")
            return files
        for path in candidates:
            if not path.is_file():
                raise SourceLoadFailure(f"{path} is not a file")
        directories = {path.resolve().parent for path in candidates}
        if len(directories) > 1:
            raise SourceLoadFailure(
                "source files must belong to one package directory: "
                + ", ".join(sorted(str(d) for d in directories))
            )
        return candidates

    def load(self, paths: Sequence[Path]) -> PackageDeclarations:
        files = self.discover_files(paths)
        directory = files[0].resolve().parent
        declarations: dict[str, TypeDecl] = {}
        module_names: dict[str, frozenset[str]] = {}
        parsed_files: list[Path] = []
        for path in files:
            try:
                source = path.read_text(encoding="utf-8")
            except OSError as exc:
                raise SourceLoadFailure(f"failed to read {path}: {exc}") from exc
            if _is_generated(source):
                continue
            try:
                module = cst.parse_module(source)
            except cst.ParserSyntaxError as exc:
                raise SourceLoadFailure(f"failed to parse {path}: {exc}") from exc
            module_name = path.stem
            bound: set[str] = set()
            for decl in self._declarations(module, module_name, bound):
                declarations.setdefault(decl.name, decl)
            module_names[module_name] = frozenset(bound)
            parsed_files.append(path)
        return PackageDeclarations(
            name=directory.name,
            directory=directory,
            is_package=(directory / "__init__.py").is_file(),
            files=tuple(parsed_files),
            declarations=declarations,
            module_names=module_names,
        )

    def _declarations(
        self, module: cst.Module, module_name: str, bound: set[str]
    ) -> list[TypeDecl]:
        out: list[TypeDecl] = []
        for stmt in module.body:
            if isinstance(stmt, cst.ClassDef):
                bound.add(stmt.name.value)
                out.append(self._class_decl(module, module_name, stmt))
            elif isinstance(stmt, cst.FunctionDef):
                bound.add(stmt.name.value)
                out.append(TypeDecl(stmt.name.value, DeclKind.FUNCTION, module_name))
            elif isinstance(stmt, cst.SimpleStatementLine):
                for small in stmt.body:
                    if isinstance(small, (cst.Import, cst.ImportFrom)):
                        bound.update(_bound_import_names(small))
                    elif isinstance(small, cst.Assign):
                        for target in small.targets:
                            if isinstance(target.target, cst.Name):
                                name = target.target.value
                                bound.add(name)
                                out.append(TypeDecl(name, DeclKind.ALIAS, module_name))
                    elif isinstance(small, cst.AnnAssign) and isinstance(small.target, cst.Name):
                        name = small.target.value
                        bound.add(name)
                        out.append(TypeDecl(name, DeclKind.ALIAS, module_name))
                    elif isinstance(small, cst.TypeAlias):
                        name = small.name.value
                        bound.add(name)
                        out.append(TypeDecl(name, DeclKind.ALIAS, module_name))
        return out

    def _class_decl(
        self, module: cst.Module, module_name: str, node: cst.ClassDef
    ) -> TypeDecl:
        bases = {_base_name(module, arg) for arg in node.bases if arg.keyword is None}
        kind = DeclKind.CLASS if bases & _NON_RECORD_BASES else DeclKind.RECORD
        members: list[MemberDecl] = []
        if isinstance(node.body, cst.IndentedBlock):
            lines = [
                (line, line.trailing_whitespace.comment)
                for line in node.body.body
                if isinstance(line, cst.SimpleStatementLine)
            ]
        else:
            lines = [(node.body, node.body.trailing_whitespace.comment)]
        for line, comment in lines:
            directive = extract_directive(
                comment.value if comment is not None else None,
                self.directive_prefix,
            )
            for small in line.body:
                member = self._member(module, small, directive)
                if member is not None:
                    members.append(member)
        return TypeDecl(node.name.value, kind, module_name, tuple(members))

    def _member(
        self, module: cst.Module, small: cst.BaseSmallStatement, directive: str
    ) -> MemberDecl | None:
        if not isinstance(small, cst.AnnAssign) or not isinstance(small.target, cst.Name):
            return None
        annotation = module.code_for_node(small.annotation.annotation)
        if _is_class_var(annotation):
            return None
        name = small.target.value
        return MemberDecl(
            name=None if name == "_" else name,
            annotation=annotation,
            default=_declared_default(module, small.value),
            directive=directive,
        )


def load_package(
    paths: Sequence[Path],
    *,
    directive_prefix: str = DEFAULT_DIRECTIVE_PREFIX,
) -> PackageDeclarations:
    return PythonSourceLoader(directive_prefix=directive_prefix).load(paths)
