"""Shared fixtures for building route trees on disk."""

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from perch.config import ManifestConfig


def _write_tree(root: Path, files: Iterable[str]) -> Path:
    for rel in files:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"<!-- {rel} -->\n", encoding="utf-8")
    return root


@pytest.fixture
def write_tree() -> Callable[[Path, Iterable[str]], Path]:
    """Create each ``/``-separated file under a root with placeholder content."""
    return _write_tree


@pytest.fixture
def routes(tmp_path: Path) -> Callable[[Iterable[str]], Path]:
    """Build files under ``<tmp_path>/src/routes`` and return that directory."""

    def build(files: Iterable[str]) -> Path:
        root = tmp_path / "src" / "routes"
        root.mkdir(parents=True, exist_ok=True)
        return _write_tree(root, files)

    return build


@pytest.fixture
def config(tmp_path: Path) -> ManifestConfig:
    return ManifestConfig(cwd=tmp_path)
