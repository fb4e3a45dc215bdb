from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def write_db(tmp_path: Path):
    """Return a helper that writes CSV lines to a database file in tmp_path."""

    def _write(*lines: str, name: str = "load.csv") -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write
