from __future__ import annotations

from pathlib import Path
import sys

import pytest


def _load():
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root / "src"))
    from ctorgen.exceptions import SourceLoadFailure
    from ctorgen.ingest import DeclKind, PythonSourceLoader, load_package

    return DeclKind, PythonSourceLoader, load_package, SourceLoadFailure


def test_loader_keeps_member_order_and_directives(write_package) -> None:
    DeclKind, _, load_package, _ = _load()
    package_dir = write_package(
        {
            "user.py": """
            from dataclasses import dataclass, field
            from typing import ClassVar


            @dataclass
            class User:
                registry: ClassVar[dict] = {}
                name: str
                age: int = 0  # ctor: exclude
                _: "Address"
                tags: list[str] = field(default_factory=list)
                scores: list[int] = field(default_factory=lambda: [1])
                nickname: str = field(default="anon")

                def greet(self) -> str:
                    return self.name
            """,
        }
    )
    package = load_package([package_dir])
    decl = package.lookup("User")
    assert decl is not None
    assert decl.kind is DeclKind.RECORD
    assert decl.module == "user"
    assert [m.name for m in decl.members] == [
        "name",
        "age",
        None,
        "tags",
        "scores",
        "nickname",
    ]
    members = {m.name: m for m in decl.members}
    assert members["age"].directive == "exclude"
    assert members["age"].default == "0"
    assert members[None].annotation == '"Address"'
    assert members["tags"].default == "list()"
    assert members["scores"].default == "(lambda: [1])()"
    assert members["nickname"].default == '"anon"'
    assert members["name"].default is None


def test_loader_classifies_non_record_declarations(write_package) -> None:
    DeclKind, _, load_package, _ = _load()
    package_dir = write_package(
        {
            "kinds.py": """
            import enum
            from typing import Protocol


            class Color(enum.Enum):
                RED = 1


            class Greeter(Protocol):
                name: str


            def make() -> None:
                return None


            Alias = dict
            """,
        }
    )
    package = load_package([package_dir])
    assert package.lookup("Color").kind is DeclKind.CLASS
    assert package.lookup("Greeter").kind is DeclKind.CLASS
    assert package.lookup("make").kind is DeclKind.FUNCTION
    assert package.lookup("Alias").kind is DeclKind.ALIAS
    assert {"enum", "Protocol", "Color", "Greeter", "make", "Alias"} <= package.module_names["kinds"]


def test_loader_skips_generated_and_test_files(write_package) -> None:
    _, _, load_package, _ = _load()
    package_dir = write_package(
        {
            "user.py": "class User:\n    name: str\n",
            "user_gen.py": "# Code generated by ctorgen; DO NOT EDIT.\nclass User:\n    other: int\n",
            "test_user.py": "class User:\n    broken: int\n",
        }
    )
    package = load_package([package_dir])
    assert [m.name for m in package.lookup("User").members] == ["name"]
    assert package.is_package
    assert package.name == package_dir.name
    assert all(path.name != "user_gen.py" for path in package.files)


def test_loader_uses_custom_directive_prefix(write_package) -> None:
    _, PythonSourceLoader, _, _ = _load()
    package_dir = write_package({"user.py": "class User:\n    age: int  # gen: exclude\n"})
    package = PythonSourceLoader(directive_prefix="gen:").load([package_dir])
    assert package.lookup("User").members[0].directive == "exclude"


def test_loader_accepts_explicit_files(write_package) -> None:
    _, _, load_package, _ = _load()
    package_dir = write_package(
        {
            "a.py": "class A:\n    x: int\n",
            "b.py": "class B:\n    y: int\n",
        },
        is_package=False,
    )
    package = load_package([package_dir / "b.py"])
    assert package.lookup("A") is None
    assert package.lookup("B") is not None
    assert not package.is_package


def test_loader_failures_are_source_load_failures(write_package, tmp_path: Path) -> None:
    _, _, load_package, SourceLoadFailure = _load()
    broken = write_package({"broken.py": "class User(:\n"})
    with pytest.raises(SourceLoadFailure):
        load_package([broken])

    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(SourceLoadFailure):
        load_package([empty])

    with pytest.raises(SourceLoadFailure):
        load_package([tmp_path / "missing.py"])

    first = write_package({"a.py": "class A:\n    x: int\n"})
    second = write_package({"b.py": "class B:\n    y: int\n"})
    with pytest.raises(SourceLoadFailure):
        load_package([first / "a.py", second / "b.py"])
