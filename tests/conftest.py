"""Pytest configuration for the tsais test suite."""

import sys
from pathlib import Path

import pytest

# Repository root on the path so `tsais` imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def write_tree(tmp_path: Path):
    """Write {relative path: text} under tmp_path; returns the root."""

    def write(files: dict[str, str]) -> Path:
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return tmp_path

    return write
