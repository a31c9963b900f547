from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import TYPE_CHECKING

from .prunermodel import PathError

if TYPE_CHECKING:
    from typing import Protocol

    class _PrunerConfig(Protocol):
        @property
        def report_name(self) -> str:
            ...

        @property
        def report_stdout(self) -> bool:
            ...

        @property
        def report_file(self) -> bool:
            ...


class PrunerReport:
    """Collect the outcome of a run and write it to the configured targets."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: _PrunerConfig) -> None:
        """Initialize the report."""
        self._config = config
        self._lines: deque[str] = deque()

    def add_deleted(self, path: str) -> None:
        self._lines.append(f"deleted {path}")

    def add_planned(self, path: str) -> None:
        self._lines.append(f"planned {path}")

    def add_failed(self, error: PathError) -> None:
        self._lines.append(f"failed {error}")

    def add_error(self, error: PathError) -> None:
        self._lines.append(f"error {error}")

    def emit(self, *, batch_size: int = 500) -> None:
        """
        Write all collected lines to the configured targets. Empties the report.

        Keyword Args:
            batch_size: The number of lines to write at a time. Defaults to 500.
        """
        count = 0
        while self._lines:
            lines = self._get_lines(batch_size)

            self.to_stdout(lines)
            self.to_file(lines)

            count += len(lines)

        self.logger.info("Reported %d lines.", count)

    def _get_lines(self, max_lines: int) -> list[str]:
        """Take up to max_lines lines off the report."""
        lines: list[str] = []
        while self._lines and len(lines) < max_lines:
            lines.append(self._lines.popleft())

        return lines

    def to_file(self, lines: list[str]) -> None:
        """
        Append report lines to a file.

        Args:
            lines: A list of lines to write.

        Output:
            A file named <report_name>_<date>_report.txt
        """
        if not self._config.report_file or not lines:
            return
        date = datetime.now().strftime("%Y%m%d")
        filename = f"{self._config.report_name}_{date}_report.txt"

        with open(filename, "a") as file_out:
            file_out.write("\n".join(lines) + "\n")

        self.logger.debug("Reported %d lines to %s", len(lines), filename)

    def to_stdout(self, lines: list[str]) -> None:
        """
        Print report lines to stdout.

        Args:
            lines: A list of lines to write.
        """
        if not self._config.report_stdout or not lines:
            return

        print("\n".join(lines))

        self.logger.debug("Reported %d lines to stdout", len(lines))
