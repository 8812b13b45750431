from __future__ import annotations

from pathlib import Path
from typing import Sequence

import libcst as cst

from ctorgen.exceptions import EmitFailure
from ctorgen.ingest.adapter_contract import PackageDeclarations
from ctorgen.model import GeneratedUnit
from ctorgen.naming import output_file_name


class _ReferencedNames(cst.CSTVisitor):
    """Free names used by generated declarations.

    Attribute members, parameter names and names bound inside the generated
    code are not references to the declaring module.
    """

    def __init__(self) -> None:
        self.used: set[str] = set()
        self.bound: set[str] = set()

    def visit_Name(self, node: cst.Name) -> None:
        self.used.add(node.value)

    def visit_Attribute(self, node: cst.Attribute) -> bool:
        node.value.visit(self)
        return False

    def visit_Param(self, node: cst.Param) -> bool:
        self.bound.add(node.name.value)
        if node.annotation is not None:
            node.annotation.visit(self)
        if node.default is not None:
            node.default.visit(self)
        return False

    def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
        self.bound.add(node.name.value)
        node.params.visit(self)
        if node.returns is not None:
            node.returns.visit(self)
        node.body.visit(self)
        return False

    def visit_ClassDef(self, node: cst.ClassDef) -> bool:
        self.bound.add(node.name.value)
        node.body.visit(self)
        return False

    def visit_AssignTarget(self, node: cst.AssignTarget) -> bool:
        if isinstance(node.target, cst.Name):
            self.bound.add(node.target.value)
            return False
        return True

    @property
    def free(self) -> set[str]:
        return self.used - self.bound


def imported_names(unit: GeneratedUnit, package: PackageDeclarations) -> list[str]:
    collector = _ReferencedNames()
    for decl in unit.declarations:
        decl.visit(collector)
    available = package.module_names.get(unit.module, frozenset())
    names = (collector.free & available) | {unit.type_name}
    return sorted(names)


def render_unit(unit: GeneratedUnit, package: PackageDeclarations) -> str:
    """Format ``unit`` as a Python module importing from the declaring module."""
    source = f".{unit.module}" if package.is_package else unit.module
    future = cst.parse_statement("from __future__ import annotations")
    import_stmt = cst.parse_statement(
        f"from {source} import {', '.join(imported_names(unit, package))}"
    ).with_changes(leading_lines=[cst.EmptyLine()])
    spaced = [
        decl.with_changes(leading_lines=[cst.EmptyLine(), cst.EmptyLine()])
        for decl in unit.declarations
    ]
    module = cst.Module(
        header=[
            cst.EmptyLine(comment=cst.Comment(f"# {unit.header}")),
            cst.EmptyLine(),
        ],
        body=[future, import_stmt, *spaced],
    )
    code = module.code
    try:
        cst.parse_module(code)
    except cst.ParserSyntaxError as exc:
        raise EmitFailure(
            f"generated code for {unit.type_name!r} is not valid Python: {exc}",
            type_name=unit.type_name,
        ) from exc
    return code


def default_output_path(
    paths: Sequence[Path], type_name: str, suffix: str = "_gen"
) -> Path:
    candidates = [Path(p) for p in paths] or [Path(".")]
    if len(candidates) == 1 and candidates[0].is_dir():
        directory = candidates[0]
    else:
        directory = candidates[0].parent
    return directory / output_file_name(type_name, suffix)


def write_unit(text: str, target: Path) -> None:
    try:
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise EmitFailure(f"failed to write {target}: {exc}") from exc
