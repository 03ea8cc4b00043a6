from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cleanlint.rules.registry import ActiveRules, default_registry


@pytest.fixture()
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A temporary JavaScript project used as the working directory."""

    (tmp_path / "package.json").write_text('{"name": "sample"}\n', encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def write_js(project_dir: Path) -> Callable[[str, str], Path]:
    def _write(relpath: str, content: str) -> Path:
        path = project_dir / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def default_rules() -> ActiveRules:
    return default_registry().snapshot()
