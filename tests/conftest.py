from __future__ import annotations

import importlib
import sys
import textwrap
import uuid
from pathlib import Path
from types import ModuleType
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        files: dict[str, str],
        *,
        name: str | None = None,
        is_package: bool = True,
    ) -> Path:
        package_dir = tmp_path / (name or f"ctorgen_pkg_{uuid.uuid4().hex[:12]}")
        package_dir.mkdir()
        if is_package:
            (package_dir / "__init__.py").write_text("", encoding="utf-8")
        for filename, source in files.items():
            (package_dir / filename).write_text(
                textwrap.dedent(source).lstrip(),
                encoding="utf-8",
            )
        return package_dir

    return _write


@pytest.fixture
def import_generated(monkeypatch: pytest.MonkeyPatch) -> Callable[[Path, str], ModuleType]:
    def _import(package_dir: Path, module: str) -> ModuleType:
        monkeypatch.syspath_prepend(str(package_dir.parent))
        return importlib.import_module(f"{package_dir.name}.{module}")

    return _import
