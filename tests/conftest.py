"""Pytest fixtures for repackage tests."""

from __future__ import annotations

import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest
from crate_helpers import Entry, crate_bytes, foo_entries, read_entries


@pytest.fixture
def make_crate(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a .crate file into a temporary directory."""

    def _make(file_name: str, entries: list[Entry], tar_format: int = tarfile.GNU_FORMAT) -> Path:
        path = tmp_path / file_name
        path.write_bytes(crate_bytes(entries, tar_format))
        return path

    return _make


@pytest.fixture
def foo_crate(make_crate: Callable[..., Path]) -> Path:
    """The foo-0.1.0.crate fixture crate on disk."""
    return make_crate("foo-0.1.0.crate", foo_entries())


@pytest.fixture
def read_crate() -> Callable[[Path], dict[str, bytes | None]]:
    """Read a .crate file from disk into a path -> content mapping."""

    def _read(path: Path) -> dict[str, bytes | None]:
        return dict(read_entries(path.read_bytes()))

    return _read
