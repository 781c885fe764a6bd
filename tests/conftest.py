"""Shared pytest fixtures.

Settings are cached process-wide, so every test starts from a clean cache and
an environment without DSPLIT_* variables or a stray .env file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from dump_splitter.config.settings import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for key in list(os.environ):
        if key.upper().startswith("DSPLIT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_dump(tmp_path: Path) -> Callable[..., Path]:
    """Write dump text to a file and return its path."""

    def _write(text: str, name: str = "dump.sql", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path

    return _write
