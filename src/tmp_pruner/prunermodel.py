from __future__ import annotations

import dataclasses
import enum


class Kind(enum.Enum):
    """Kind of a filesystem entry. Symbolic links are files."""

    FILE = "file"
    DIRECTORY = "directory"


class ErrorKind(enum.Enum):
    """Reason a filesystem primitive failed."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    NOT_EMPTY = "not_empty"
    OTHER = "other"


class ErrorStage(enum.Enum):
    """Where in the pipeline a path failed."""

    PROBE = "probe"
    LIST = "list"
    REMOVE = "remove"
    RACE = "race"


class FilesystemError(Exception):
    """Raised by the filesystem primitives."""

    def __init__(self, path: str, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or f"{kind.value}: {path}")
        self.path = path
        self.kind = kind
        self.message = message or kind.value


class InvalidRootError(ValueError):
    """The configured root does not exist or is not a directory."""


@dataclasses.dataclass(frozen=True)
class Stat:
    """Metadata of a single entry."""

    kind: Kind
    mtime: float
    atime: float


@dataclasses.dataclass(frozen=True)
class PathError:
    """A failure recorded against a path."""

    path: str
    kind: ErrorKind
    stage: ErrorStage
    message: str = ""

    def __str__(self) -> str:
        return f"{self.stage.value} {self.path}: {self.message or self.kind.value}"

    @classmethod
    def from_error(cls, error: FilesystemError, stage: ErrorStage) -> PathError:
        return cls(error.path, error.kind, stage, error.message)


@dataclasses.dataclass
class Node:
    """
    One entry of the evaluated tree.

    `expired` is the expiration verdict: Expired for files, AllExpired for
    directories. `errored` is set when a probe or listing failed at this node
    or anywhere beneath it. `delete` is the final deletion verdict and is
    assigned once, after the whole tree has been evaluated.
    """

    path: str
    kind: Kind
    mtime: float | None = None
    atime: float | None = None
    is_root_child: bool = False
    children: list[Node] = dataclasses.field(default_factory=list)
    expired: bool = False
    errored: bool = False
    delete: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind is Kind.DIRECTORY

    @property
    def is_root_child_file(self) -> bool:
        """True for files whose parent is the root directory."""
        return self.is_root_child and self.kind is Kind.FILE

    def walk(self) -> list[Node]:
        """Return this node and every descendant, parents before children."""
        nodes: list[Node] = []
        stack = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes


@dataclasses.dataclass(frozen=True)
class EvaluationResult:
    """Evaluated tree and the probe/list errors found while walking it."""

    root: Node
    errors: list[PathError]


@dataclasses.dataclass(frozen=True)
class PruneResult:
    """Paths removed and paths that could not be removed."""

    deleted: list[str]
    failed: list[PathError]


@dataclasses.dataclass(frozen=True)
class RunResult:
    """Outcome of one evaluate-and-prune run."""

    errors: list[PathError]
    deleted: list[str] = dataclasses.field(default_factory=list)
    failed: list[PathError] = dataclasses.field(default_factory=list)
    planned: list[str] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when nothing failed during evaluation or pruning."""
        return not self.errors and not self.failed
