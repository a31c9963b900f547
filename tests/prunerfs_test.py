from __future__ import annotations

import errno
import os
from pathlib import Path

import pytest

from tmp_pruner.prunerfs import LocalFilesystem
from tmp_pruner.prunerfs import error_kind
from tmp_pruner.prunermodel import ErrorKind
from tmp_pruner.prunermodel import FilesystemError
from tmp_pruner.prunermodel import Kind


@pytest.fixture
def filesystem() -> LocalFilesystem:
    return LocalFilesystem()


@pytest.mark.parametrize(
    "code, expected",
    [
        (errno.ENOENT, ErrorKind.NOT_FOUND),
        (errno.EACCES, ErrorKind.PERMISSION_DENIED),
        (errno.EPERM, ErrorKind.PERMISSION_DENIED),
        (errno.ENOTEMPTY, ErrorKind.NOT_EMPTY),
        (errno.EIO, ErrorKind.OTHER),
    ],
)
def test_error_kind(code: int, expected: ErrorKind) -> None:
    assert error_kind(OSError(code, os.strerror(code))) is expected


def test_stat_file(filesystem: LocalFilesystem, tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_text("x")
    os.utime(path, (1000, 2000))

    result = filesystem.stat(str(path))

    assert result.kind is Kind.FILE
    assert result.atime == 1000
    assert result.mtime == 2000


def test_stat_directory(filesystem: LocalFilesystem, tmp_path: Path) -> None:
    assert filesystem.stat(str(tmp_path)).kind is Kind.DIRECTORY


def test_stat_does_not_follow_links(
    filesystem: LocalFilesystem,
    tmp_path: Path,
) -> None:
    target = tmp_path / "target"
    target.mkdir()
    link = tmp_path / "link"
    link.symlink_to(target)

    assert filesystem.stat(str(link)).kind is Kind.FILE


def test_stat_missing_raises_not_found(
    filesystem: LocalFilesystem,
    tmp_path: Path,
) -> None:
    with pytest.raises(FilesystemError) as error:
        filesystem.stat(str(tmp_path / "missing"))

    assert error.value.kind is ErrorKind.NOT_FOUND
    assert error.value.path == str(tmp_path / "missing")


def test_list_dir_sorted_full_paths(
    filesystem: LocalFilesystem,
    tmp_path: Path,
) -> None:
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a").mkdir()
    (tmp_path / "c.txt").write_text("c")

    result = filesystem.list_dir(str(tmp_path))

    assert result == [
        str(tmp_path / "a"),
        str(tmp_path / "b.txt"),
        str(tmp_path / "c.txt"),
    ]


def test_list_dir_missing_raises(filesystem: LocalFilesystem, tmp_path: Path) -> None:
    with pytest.raises(FilesystemError):
        filesystem.list_dir(str(tmp_path / "missing"))


def test_remove_file(filesystem: LocalFilesystem, tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_text("x")

    filesystem.remove_file(str(path))

    assert not path.exists()


def test_remove_dir_not_empty_raises(
    filesystem: LocalFilesystem,
    tmp_path: Path,
) -> None:
    directory = tmp_path / "full"
    directory.mkdir()
    (directory / "file.txt").write_text("x")

    with pytest.raises(FilesystemError) as error:
        filesystem.remove_dir(str(directory))

    assert error.value.kind is ErrorKind.NOT_EMPTY
    assert directory.exists()


def test_remove_dir_empty(filesystem: LocalFilesystem, tmp_path: Path) -> None:
    directory = tmp_path / "empty"
    directory.mkdir()

    filesystem.remove_dir(str(directory))

    assert not directory.exists()
