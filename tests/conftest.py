from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Callable
from typing import Iterator

import pytest

NOW = 1_700_000_000.0
MAX_AGE = timedelta(weeks=3)
OLD = NOW - MAX_AGE.total_seconds() - 3600
FRESH = NOW - 3600
DEEP_LEVELS = 1100

MakeFile = Callable[..., Path]


@pytest.fixture
def make_file(tmp_path: Path) -> MakeFile:
    """Create a file below tmp_path with the given access and modification times."""

    def _make_file(
        relpath: str,
        mtime: float = OLD,
        atime: float | None = None,
    ) -> Path:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(relpath)
        os.utime(path, (mtime if atime is None else atime, mtime))
        return path

    return _make_file


@pytest.fixture
def scenario(tmp_path: Path, make_file: MakeFile) -> Path:
    """foo/ has a fresh file, bar/ is entirely old, fileD.txt is an old root file."""
    make_file("foo/fileA.txt", OLD)
    make_file("foo/fileB.txt", FRESH)
    make_file("bar/fileC.txt", OLD)
    make_file("fileD.txt", OLD)
    return tmp_path


@pytest.fixture
def deep_tree(tmp_path: Path) -> Iterator[Path]:
    """A chain of DEEP_LEVELS nested directories with an old file at the bottom."""
    directories = [tmp_path / "deep"]
    directories[0].mkdir()
    for _ in range(DEEP_LEVELS - 1):
        directories.append(directories[-1] / "d")
        directories[-1].mkdir()

    old_file = directories[-1] / "old.txt"
    old_file.write_text("old")
    os.utime(old_file, (OLD, OLD))

    yield tmp_path

    # Leave nothing deep behind for the tmp_path cleanup
    old_file.unlink(missing_ok=True)
    for directory in reversed(directories):
        if directory.exists():
            directory.rmdir()
