from __future__ import annotations

import logging
import time

from .pruner import Pruner
from .prunerconfig import PrunerConfig
from .prunerevaluator import TreeEvaluator
from .prunerfs import Filesystem
from .prunerfs import LocalFilesystem
from .prunermodel import RunResult
from .prunerreport import PrunerReport


class TmpPruner:
    """Remove stale files and fully stale directories below a root directory."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        config: PrunerConfig,
        filesystem: Filesystem | None = None,
    ) -> None:
        """
        Initialize a new TmpPruner.

        Args:
            config: The configuration to use for this pruner.
            filesystem: The primitives used for every filesystem access.
                Defaults to the local filesystem.
        """
        self._config = config
        filesystem = filesystem or LocalFilesystem()
        self._evaluator = TreeEvaluator(
            filesystem,
            workers=config.workers,
            exclude_file_pattern=config.exclude_file_pattern,
            exclude_directory_pattern=config.exclude_directory_pattern,
        )
        self._pruner = Pruner(filesystem, workers=config.workers)
        self._report = PrunerReport(config)

    def run_once(self, *, dry_run: bool = False, now: float | None = None) -> RunResult:
        """
        Evaluate the root directory, prune it and emit the report.

        Keyword Args:
            dry_run: Only report what would be removed.
            now: Evaluation time as a POSIX timestamp. Defaults to the current
                time.

        Raises:
            InvalidRootError: The configured root is missing or not a directory.
        """
        root_directory = self._config.root_directory
        max_age = self._config.max_age

        self.logger.info("Evaluating '%s' (max age %s)...", root_directory, max_age)
        tic = time.perf_counter()

        evaluation = self._evaluator.evaluate(root_directory, max_age, now)

        toc = time.perf_counter()
        self.logger.info("Evaluation finished in %s seconds", toc - tic)

        for error in evaluation.errors:
            self._report.add_error(error)

        if dry_run:
            planned = self._pruner.planned_deletions(evaluation.root)
            for path in planned:
                self.logger.info("Would delete '%s'", path)
                self._report.add_planned(path)

            self._report.emit()
            return RunResult(errors=evaluation.errors, planned=planned)

        self.logger.info("Pruning...")
        tic = time.perf_counter()

        pruned = self._pruner.apply(evaluation.root)

        toc = time.perf_counter()
        self.logger.info("Pruning finished in %s seconds", toc - tic)
        self.logger.info(
            "Deleted %s entries, %s failures", len(pruned.deleted), len(pruned.failed)
        )

        for path in pruned.deleted:
            self._report.add_deleted(path)

        for failure in pruned.failed:
            self._report.add_failed(failure)

        self._report.emit()

        return RunResult(
            errors=evaluation.errors,
            deleted=pruned.deleted,
            failed=pruned.failed,
        )
