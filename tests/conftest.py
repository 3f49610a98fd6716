"""Test configuration ensuring the project source tree is importable."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

# Import the project package eagerly so subsequent imports reuse it
importlib.import_module("tsunami")

from tsunami.config import ENV_HEXDUMP_BYTES, ENV_OUT_DIR, reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Point output at a temporary directory and reload configuration per test."""

    monkeypatch.setenv(ENV_OUT_DIR, str(tmp_path / "out"))
    monkeypatch.delenv(ENV_HEXDUMP_BYTES, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "out"
