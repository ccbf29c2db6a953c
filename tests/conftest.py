"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the .org fixture files."""
    return FIXTURES_DIR


@pytest.fixture
def read_fixture():
    """
    Return a reader for .org fixtures in tests/fixtures.

    Files are read without newline translation so the round-trip tests see
    exactly the bytes on disk.

    Example:
        def test_something(read_fixture):
            text = read_fixture("indented_list")
    """

    def _read(name: str) -> str:
        with (FIXTURES_DIR / f"{name}.org").open(encoding="utf-8", newline="") as f:
            return f.read()

    return _read
