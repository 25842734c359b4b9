"""
Pytest configuration and fixtures.
"""

from pathlib import Path

import pytest


def write_tree(root: Path, files: dict[str, str]) -> dict[str, Path]:
    """Create *files* (relative path -> content) under *root*."""
    paths = {}
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        paths[name] = path
    return paths


def read_tree(root: Path) -> dict[str, str]:
    """Every file under *root*, keyed by posix path relative to *root*."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes().decode("utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def tree(tmp_path):
    """Return a function that writes a source tree into ``tmp_path``."""

    def _make(files: dict[str, str]) -> dict[str, Path]:
        return write_tree(tmp_path, files)

    return _make
