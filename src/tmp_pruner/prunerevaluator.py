from __future__ import annotations

import logging
import os
import re
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from .prunerfs import Filesystem
from .prunerfs import LocalFilesystem
from .prunergate import is_expired
from .prunermodel import ErrorStage
from .prunermodel import EvaluationResult
from .prunermodel import FilesystemError
from .prunermodel import InvalidRootError
from .prunermodel import Kind
from .prunermodel import Node
from .prunermodel import PathError
from .prunermodel import Stat


def compile_pattern(pattern: str | None) -> re.Pattern[str] | None:
    """Compile an exclusion pattern, raising ValueError if it is malformed."""
    if not pattern:
        return None

    try:
        return re.compile(pattern)

    except re.error as error:
        raise ValueError(f"Invalid exclude pattern '{pattern}': {error}") from error


class TreeEvaluator:
    """Classify every entry below a root directory as delete or keep."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        filesystem: Filesystem | None = None,
        *,
        workers: int = 1,
        exclude_file_pattern: str | None = None,
        exclude_directory_pattern: str | None = None,
    ) -> None:
        """
        Initialize a new TreeEvaluator.

        Args:
            filesystem: The primitives used to probe and list entries. Defaults
                to the local filesystem.

        Keyword Args:
            workers: Number of root-child subtrees evaluated in parallel. A
                value of 1 evaluates everything on the calling thread.
            exclude_file_pattern: Regular expression matched against entry
                names. Matching entries are always kept.
            exclude_directory_pattern: Regular expression matched against full
                directory paths. Matching directories are kept and not walked.

        Raises:
            ValueError: An exclusion pattern is not a valid regular expression.
        """
        self._filesystem = filesystem or LocalFilesystem()
        self._workers = max(1, workers)
        self._exclude_file_pattern = compile_pattern(exclude_file_pattern)
        self._exclude_directory_pattern = compile_pattern(exclude_directory_pattern)

    def evaluate(
        self,
        root_path: str,
        max_age: timedelta | float,
        now: float | None = None,
    ) -> EvaluationResult:
        """
        Walk the tree below root_path and attach verdicts to every node.

        Args:
            root_path: The configured root directory. Never deleted.
            max_age: Entries older than this are expired.
            now: Evaluation time as a POSIX timestamp. Defaults to time.time().

        Raises:
            InvalidRootError: root_path is missing or not a directory.
        """
        now = time.time() if now is None else now
        root_path = os.path.abspath(root_path)
        root_stat = self._check_root(root_path)

        errors: list[PathError] = []
        children: list[Node] = []
        errored = False

        try:
            child_paths = self._filesystem.list_dir(root_path)

        except FilesystemError as error:
            self.logger.warning("Could not list root '%s': %s", root_path, error)
            errors.append(PathError.from_error(error, ErrorStage.LIST))
            child_paths = []
            errored = True

        for child, child_errors in self._evaluate_root_children(
            child_paths, now, max_age
        ):
            children.append(child)
            errors.extend(child_errors)

        root = Node(
            path=root_path,
            kind=Kind.DIRECTORY,
            mtime=root_stat.mtime,
            atime=root_stat.atime,
            children=children,
            expired=not errored and all(child.expired for child in children),
            errored=errored or any(child.errored for child in children),
        )

        self._assign_verdicts(root)

        return EvaluationResult(root=root, errors=errors)

    def _check_root(self, root_path: str) -> Stat:
        """Return the root's metadata, raising if it is not a usable directory."""
        try:
            root_stat = self._filesystem.stat(root_path)

        except FilesystemError as error:
            message = f"Root '{root_path}' is not accessible: {error}"
            raise InvalidRootError(message) from error

        if root_stat.kind is not Kind.DIRECTORY:
            raise InvalidRootError(f"Root '{root_path}' is not a directory")

        return root_stat

    def _evaluate_root_children(
        self,
        child_paths: list[str],
        now: float,
        max_age: timedelta | float,
    ) -> list[tuple[Node, list[PathError]]]:
        """Evaluate each root child as an independent subtree, in path order."""
        if self._workers == 1 or len(child_paths) < 2:
            return [
                self._evaluate_node(path, now, max_age, is_root_child=True)
                for path in child_paths
            ]

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            futures = [
                executor.submit(
                    self._evaluate_node, path, now, max_age, is_root_child=True
                )
                for path in child_paths
            ]
            # Every subtree must finish before the root is assembled
            return [future.result() for future in futures]

    def _evaluate_node(
        self,
        path: str,
        now: float,
        max_age: timedelta | float,
        *,
        is_root_child: bool = False,
    ) -> tuple[Node, list[PathError]]:
        """
        Evaluate one entry and everything beneath it, children first.

        The walk keeps its own stack of open directories so the depth of the
        tree is not bound by the interpreter's recursion limit.
        """
        errors: list[PathError] = []
        node, child_paths = self._visit(path, now, max_age, errors, is_root_child)
        if child_paths is None:
            return node, errors

        stack = [(node, iter(child_paths))]
        while stack:
            directory, pending = stack[-1]
            child_path = next(pending, None)

            if child_path is None:
                # Every child is evaluated, the directory can be aggregated
                stack.pop()
                self._aggregate(directory)
                continue

            child, grandchild_paths = self._visit(child_path, now, max_age, errors)
            directory.children.append(child)

            if grandchild_paths is not None:
                stack.append((child, iter(grandchild_paths)))

        return node, errors

    def _visit(
        self,
        path: str,
        now: float,
        max_age: timedelta | float,
        errors: list[PathError],
        is_root_child: bool = False,
    ) -> tuple[Node, list[str] | None]:
        """
        Build the node for one entry.

        Returns:
            The node and the child paths still to evaluate, or None when the
            node is a leaf whose verdict is already final.
        """
        try:
            stat = self._filesystem.stat(path)

        except FilesystemError as error:
            self.logger.warning("Could not probe '%s': %s", path, error)
            errors.append(PathError.from_error(error, ErrorStage.PROBE))
            failed = Node(path=path, kind=Kind.FILE, is_root_child=is_root_child)
            failed.errored = True
            return failed, None

        node = Node(path, stat.kind, stat.mtime, stat.atime, is_root_child)

        if self._is_excluded(path, stat.kind):
            self.logger.debug("Ignoring '%s'", path)
            return node, None

        if stat.kind is Kind.FILE:
            node.expired = is_expired(stat.mtime, now, max_age) and is_expired(
                stat.atime, now, max_age
            )
            return node, None

        try:
            child_paths = self._filesystem.list_dir(path)

        except FilesystemError as error:
            self.logger.warning("Could not list '%s': %s", path, error)
            errors.append(PathError.from_error(error, ErrorStage.LIST))
            node.errored = True
            return node, None

        return node, child_paths

    @staticmethod
    def _aggregate(directory: Node) -> None:
        """Derive a directory's verdict from its evaluated children."""
        directory.errored = any(child.errored for child in directory.children)
        # An empty directory is vacuously all-expired
        directory.expired = not directory.errored and all(
            child.expired for child in directory.children
        )

    def _assign_verdicts(self, root: Node) -> None:
        """
        Root is kept; each root child decides for its whole subtree.

        A root-child directory's verdict takes precedence over the aggregate
        verdict of any directory nested below it: a fully expired nested
        directory is kept while its root-child directory is kept.
        """
        root.delete = False

        for child in root.children:
            verdict = child.expired and not child.errored

            if verdict:
                self.logger.debug("'%s' can be removed", child.path)
            else:
                self.logger.debug("Must keep '%s'", child.path)

            for node in child.walk():
                node.delete = verdict

    def _is_excluded(self, path: str, kind: Kind) -> bool:
        """True if the entry matches an exclusion pattern."""
        file_ptn = self._exclude_file_pattern
        if file_ptn and file_ptn.search(os.path.basename(path)):
            return True

        dir_ptn = self._exclude_directory_pattern
        if kind is Kind.DIRECTORY and dir_ptn and dir_ptn.search(path):
            return True

        return False
