from __future__ import annotations

import logging
import os
from configparser import ConfigParser
from datetime import timedelta

from .prunergate import parse_duration

DEFAULT_MAX_AGE = "3weeks"

NEW_CONFIG = """\
[pruner]
# The directory to prune. The directory itself is never removed.
root_directory = ~/tmp

# Entries whose modification AND access times are older than this are expired.
# Examples: 36h, 10days, 3weeks, 2months, 1year
max_age = 3weeks

# Number of top level entries evaluated and pruned in parallel.
workers = 1

# Exclude directories and files from being pruned.
# The following are regular expressions. Directories are matched against the
# full path, files against the file name.
# Multiline values are combined into a single regular expression.
exclude_directories =
exclude_files =

[report]
# Write the list of deleted and failed paths to the following destinations.
report_name = {filename}
stdout = true
file = false

    """


class PrunerConfig:
    """Configuration for the TmpPruner."""

    logger = logging.getLogger("tmp_pruner.PrunerConfig")

    def __init__(self, filepath: str) -> None:
        """Load the configuration from the given file."""
        self._config = ConfigParser()
        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def root_directory(self) -> str:
        """Return the resolved root directory to prune. Will raise if not set."""
        root = self._config.get("pruner", "root_directory")
        return os.path.realpath(os.path.expanduser(root))

    @property
    def max_age(self) -> timedelta:
        """Return the age threshold. Will raise ValueError if malformed."""
        value = self._config.get("pruner", "max_age", fallback=DEFAULT_MAX_AGE)
        return parse_duration(value)

    @property
    def workers(self) -> int:
        """Return the number of parallel workers, at least 1."""
        return max(1, self._config.getint("pruner", "workers", fallback=1))

    @property
    def exclude_directory_pattern(self) -> str | None:
        """Return the pattern to exclude directories from pruning."""
        config_line = self._config.get("pruner", "exclude_directories", fallback="")
        lines = [line.strip() for line in config_line.splitlines() if line.strip()]
        return "|".join(lines) or None

    @property
    def exclude_file_pattern(self) -> str | None:
        """Return the pattern to exclude files from pruning."""
        config_line = self._config.get("pruner", "exclude_files", fallback="")
        lines = [line.strip() for line in config_line.splitlines() if line.strip()]
        return "|".join(lines) or None

    @property
    def report_name(self) -> str:
        """Return the prefix of the report file."""
        return self._config.get("report", "report_name", fallback="tmp_pruner")

    @property
    def report_stdout(self) -> bool:
        """Return whether to print the report to stdout."""
        return self._config.getboolean("report", "stdout", fallback=False)

    @property
    def report_file(self) -> bool:
        """Return whether to append the report to a file."""
        return self._config.getboolean("report", "file", fallback=False)

    def override(self, *, root_directory: str | None, max_age: str | None) -> None:
        """Replace config values with those given on the command line."""
        if not self._config.has_section("pruner"):
            self._config.add_section("pruner")

        if root_directory is not None:
            self._config.set("pruner", "root_directory", root_directory)

        if max_age is not None:
            self._config.set("pruner", "max_age", max_age)


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    report_name = os.path.splitext(os.path.basename(filename))[0]
    config = NEW_CONFIG.format(filename=report_name)

    with open(filename, "w") as config_file:
        config_file.write(config)
