from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator

from .prunerfs import Filesystem
from .prunerfs import LocalFilesystem
from .prunermodel import ErrorKind
from .prunermodel import ErrorStage
from .prunermodel import FilesystemError
from .prunermodel import Node
from .prunermodel import PathError
from .prunermodel import PruneResult


@dataclasses.dataclass
class _PruneFrame:
    """A directory whose children are still being removed."""

    node: Node
    pending: Iterator[Node]
    children_gone: bool = True


class Pruner:
    """Remove evaluated nodes marked for deletion, children before parents."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        filesystem: Filesystem | None = None,
        *,
        workers: int = 1,
    ) -> None:
        """
        Initialize a new Pruner.

        Args:
            filesystem: The primitives used to remove entries. Defaults to the
                local filesystem.

        Keyword Args:
            workers: Number of root-child subtrees pruned in parallel.
        """
        self._filesystem = filesystem or LocalFilesystem()
        self._workers = max(1, workers)

    @staticmethod
    def planned_deletions(root: Node) -> list[str]:
        """Return the topmost paths that apply() would remove."""
        return [child.path for child in root.children if child.delete]

    def apply(self, root: Node) -> PruneResult:
        """
        Remove every node marked for deletion below root.

        Failures are recorded per path and never stop sibling subtrees. The
        root itself is never removed.
        """
        targets = [child for child in root.children if child.delete]
        deleted: list[str] = []
        failed: list[PathError] = []

        if self._workers == 1 or len(targets) < 2:
            results = [self._prune(node) for node in targets]

        else:
            with ThreadPoolExecutor(max_workers=self._workers) as executor:
                results = list(executor.map(self._prune, targets))

        for _, subtree_deleted, subtree_failed in results:
            deleted.extend(subtree_deleted)
            failed.extend(subtree_failed)

        return PruneResult(deleted=deleted, failed=failed)

    def _prune(self, node: Node) -> tuple[bool, list[str], list[PathError]]:
        """
        Remove node and its subtree, deepest first.

        Open directories are kept on an explicit stack so the depth of the tree
        is not bound by the interpreter's recursion limit.

        Returns:
            A tuple of whether the node is gone, the removed paths and the
            failures.
        """
        deleted: list[str] = []
        failed: list[PathError] = []

        if not node.delete:
            return False, deleted, failed

        gone = False
        stack = [_PruneFrame(node, iter(node.children))]
        while stack:
            frame = stack[-1]
            child = next(frame.pending, None)

            if child is not None:
                if child.delete:
                    stack.append(_PruneFrame(child, iter(child.children)))
                else:
                    frame.children_gone = False
                continue

            stack.pop()
            gone = self._remove(frame.node, frame.children_gone, deleted, failed)
            if stack:
                stack[-1].children_gone = stack[-1].children_gone and gone

        return gone, deleted, failed

    def _remove(
        self,
        node: Node,
        children_gone: bool,
        deleted: list[str],
        failed: list[PathError],
    ) -> bool:
        """Remove a single entry whose children were already handled."""
        if not children_gone:
            self.logger.warning(
                "Not removing '%s', a child could not be removed", node.path
            )
            return False

        try:
            if node.is_directory:
                self._filesystem.remove_dir(node.path)
            else:
                self._filesystem.remove_file(node.path)

        except FilesystemError as error:
            if error.kind is ErrorKind.NOT_FOUND:
                self.logger.debug("'%s' already removed", node.path)
                return True

            stage = ErrorStage.REMOVE
            if node.is_directory and error.kind is ErrorKind.NOT_EMPTY:
                # Something was added after the tree was evaluated
                stage = ErrorStage.RACE

            self.logger.warning("Could not remove '%s': %s", node.path, error)
            failed.append(PathError.from_error(error, stage))
            return False

        self.logger.info("Deleted '%s'", node.path)
        deleted.append(node.path)
        return True
