from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def _no_types_root(monkeypatch) -> None:
    monkeypatch.delenv("TYPES_ROOT", raising=False)


@pytest.fixture
def write_pallet(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Write ``pallets/<name>/types.json`` under tmp_path and return its path."""

    def _write(name: str, types: Any) -> Path:
        path = tmp_path / "pallets" / name / "types.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        text = types if isinstance(types, str) else json.dumps(types)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
