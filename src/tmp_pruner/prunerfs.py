from __future__ import annotations

import errno
import logging
import os
import stat
from typing import Protocol

from .prunermodel import ErrorKind
from .prunermodel import FilesystemError
from .prunermodel import Kind
from .prunermodel import Stat


class Filesystem(Protocol):
    """The filesystem primitives consumed by the evaluator and the pruner."""

    def stat(self, path: str) -> Stat:
        ...

    def list_dir(self, path: str) -> list[str]:
        ...

    def remove_file(self, path: str) -> None:
        ...

    def remove_dir(self, path: str) -> None:
        ...


def error_kind(error: OSError) -> ErrorKind:
    """Map an OSError to the kind reported by the primitives."""
    if error.errno == errno.ENOENT:
        return ErrorKind.NOT_FOUND

    if error.errno in (errno.EACCES, errno.EPERM):
        return ErrorKind.PERMISSION_DENIED

    # Some platforms report EEXIST for rmdir on a non-empty directory
    if error.errno in (errno.ENOTEMPTY, errno.EEXIST):
        return ErrorKind.NOT_EMPTY

    return ErrorKind.OTHER


class LocalFilesystem:
    """Filesystem primitives backed by the os module. Links are never followed."""

    logger = logging.getLogger(__name__)

    def stat(self, path: str) -> Stat:
        """
        Return the kind, mtime and atime of the entry itself.

        Raises:
            FilesystemError
        """
        try:
            result = os.lstat(path)

        except OSError as error:
            raise self._wrap(path, error) from error

        kind = Kind.DIRECTORY if stat.S_ISDIR(result.st_mode) else Kind.FILE
        return Stat(kind=kind, mtime=result.st_mtime, atime=result.st_atime)

    def list_dir(self, path: str) -> list[str]:
        """
        Return the full paths of the immediate children, sorted by name.

        Raises:
            FilesystemError
        """
        try:
            with os.scandir(path) as entries:
                names = sorted(entry.name for entry in entries)

        except OSError as error:
            raise self._wrap(path, error) from error

        return [os.path.join(path, name) for name in names]

    def remove_file(self, path: str) -> None:
        """
        Remove a file or symbolic link.

        Raises:
            FilesystemError
        """
        try:
            os.unlink(path)

        except OSError as error:
            raise self._wrap(path, error) from error

        self.logger.debug("Removed file '%s'", path)

    def remove_dir(self, path: str) -> None:
        """
        Remove an empty directory.

        Raises:
            FilesystemError
        """
        try:
            os.rmdir(path)

        except OSError as error:
            raise self._wrap(path, error) from error

        self.logger.debug("Removed directory '%s'", path)

    @staticmethod
    def _wrap(path: str, error: OSError) -> FilesystemError:
        return FilesystemError(path, error_kind(error), error.strerror or str(error))
