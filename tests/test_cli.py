from __future__ import annotations

import json
from pathlib import Path
import sys

from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from ctorgen import __version__, cli
from ctorgen.ingest import PythonSourceLoader

USER_SOURCE = """
class Address:
    city: str


class User:
    name: str
    age: int  # ctor: only-all-args
    _: Address
"""


def _recording_factory(calls: list[str]):
    def _factory(prefix: str):
        calls.append(prefix)
        return PythonSourceLoader(directive_prefix=prefix)

    return _factory


def test_generate_writes_default_output(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        ["generate", "--type", "User", "--constructor-types", "all-args,builder", str(package_dir)],
    )
    assert result.exit_code == 0, result.output
    target = package_dir / "user_gen.py"
    assert f"Wrote {target}" in result.output
    text = target.read_text(encoding="utf-8")
    assert text.startswith(
        "# Code generated by ctorgen generate --type User "
        f"--constructor-types all-args,builder {package_dir}; DO NOT EDIT."
    )
    assert "def new_user(name: str, age: int, address: Address) -> User:" in text
    assert "class UserBuilder:" in text
    assert "def with_age" not in text


def test_generate_is_idempotent(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    runner = CliRunner()
    args = ["generate", "--type", "User", "--constructor-types", "builder", str(package_dir)]
    assert runner.invoke(cli.app, args).exit_code == 0
    first = (package_dir / "user_gen.py").read_text(encoding="utf-8")
    assert runner.invoke(cli.app, args).exit_code == 0
    assert (package_dir / "user_gen.py").read_text(encoding="utf-8") == first


def test_generate_to_stdout(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    runner = CliRunner()
    result = runner.invoke(
        cli.app, ["generate", "--type", "User", "--output", "-", str(package_dir)]
    )
    assert result.exit_code == 0
    assert "def new_user(" in result.output
    assert not (package_dir / "user_gen.py").exists()


def test_unknown_constructor_type_exits_before_loading(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    calls: list[str] = []
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        ["generate", "--type", "User", "--constructor-types", "buildr", str(package_dir)],
        obj={"loader_factory": _recording_factory(calls)},
    )
    assert result.exit_code == 2
    assert "unexpected constructor type has come [given=buildr]" in result.output
    assert calls == []


def test_collection_errors_exit_with_one(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    runner = CliRunner()
    result = runner.invoke(cli.app, ["generate", "--type", "Missing", str(package_dir)])
    assert result.exit_code == 1
    assert "[error]" in result.output
    assert "Missing" in result.output


def test_generate_reads_config_defaults(write_package, tmp_path: Path) -> None:
    package_dir = write_package(
        {
            "user.py": """
            class User:
                name: str
                age: int  # gen: exclude
            """,
        }
    )
    config_path = tmp_path / "ctorgen.toml"
    config_path.write_text(
        '[generate]\nconstructor_types = "builder"\ndirective_prefix = "gen:"\n'
        'output_suffix = "_ctor"\n'
    )
    calls: list[str] = []
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        ["generate", "--type", "User", "--config", str(config_path), str(package_dir)],
        obj={"loader_factory": _recording_factory(calls)},
    )
    assert result.exit_code == 0, result.output
    assert calls == ["gen:"]
    text = (package_dir / "user_ctor.py").read_text(encoding="utf-8")
    assert "class UserBuilder:" in text
    assert "with_age" not in text
    assert "def new_user(" not in text


def test_command_line_options_override_config(write_package, tmp_path: Path) -> None:
    package_dir = write_package(
        {
            "user.py": """
            class User:
                name: str
                age: int  # ctor: exclude
            """,
        }
    )
    config_path = tmp_path / "ctorgen.toml"
    config_path.write_text(
        '[generate]\nconstructor_types = "builder"\ndirective_prefix = "gen:"\n'
        'output_suffix = "_ctor"\n'
    )
    calls: list[str] = []
    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        [
            "generate",
            "--type",
            "User",
            "--constructor-types",
            "all-args",
            "--directive-prefix",
            "ctor:",
            "--output-suffix",
            "_made",
            "--config",
            str(config_path),
            str(package_dir),
        ],
        obj={"loader_factory": _recording_factory(calls)},
    )
    assert result.exit_code == 0, result.output
    assert calls == ["ctor:"]
    assert not (package_dir / "user_ctor.py").exists()
    text = (package_dir / "user_made.py").read_text(encoding="utf-8")
    assert "def new_user(name: str) -> User:" in text
    assert "class UserBuilder:" not in text


def test_fields_command_honors_directive_prefix_option(write_package) -> None:
    package_dir = write_package(
        {
            "user.py": """
            class User:
                name: str
                age: int  # gen: exclude
            """,
        }
    )
    runner = CliRunner()
    result = runner.invoke(
        cli.app, ["fields", "--type", "User", "--directive-prefix", "gen:", str(package_dir)]
    )
    assert result.exit_code == 0, result.output
    assert [f["param"] for f in json.loads(result.output)["fields"]] == ["name"]


def test_fields_command_prints_json(write_package) -> None:
    package_dir = write_package({"user.py": USER_SOURCE})
    runner = CliRunner()
    result = runner.invoke(cli.app, ["fields", "--type", "User", str(package_dir)])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["type_name"] == "User"
    assert payload["package"] == package_dir.name
    assert [f["param"] for f in payload["fields"]] == ["name", "age", "address"]
    assert payload["fields"][1]["constructor_types"] == ["all-args"]
    assert payload["fields"][2]["is_embedded"] is True


def test_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
