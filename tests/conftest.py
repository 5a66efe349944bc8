"""Shared fixtures for the JsonToCSV test suite."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest


@pytest.fixture
def read_csv():
    """Return a reader that loads a written table as a list of rows (header first)."""

    def _read(path: Path) -> list[list[str]]:
        with open(path, newline="", encoding="utf-8") as f:
            return list(csv.reader(f))

    return _read


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """An existing, empty output directory."""
    path = tmp_path / "out"
    path.mkdir()
    return path
