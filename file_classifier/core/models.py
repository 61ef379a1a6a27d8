"""Core data models for the File Classifier."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict

UNKNOWN_CATEGORY = "unknown"


def category_of(file_name: str) -> str:
    """Derive the category label from a file name.

    The category is whatever follows the last dot. Names without a dot, or
    ending in one, fall into ``UNKNOWN_CATEGORY``. No case folding is done
    here; callers decide the case policy.
    """
    dot_index = file_name.rfind(".")
    if dot_index != -1 and dot_index < len(file_name) - 1:
        return file_name[dot_index + 1:]
    return UNKNOWN_CATEGORY


def normalize_category(file_name: str) -> str:
    """Category of ``file_name`` folded to lower case."""
    return category_of(file_name).lower()


class CollisionPolicy(Enum):
    """What to do when the destination file already exists."""
    OVERWRITE = "overwrite"
    RENAME = "rename"


class CategoryCounter:
    """Thread-safe tally of files observed per category."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: Dict[str, int] = {}

    def increment(self, category: str, amount: int = 1) -> None:
        with self._lock:
            self._counts[category] = self._counts.get(category, 0) + amount

    def merge(self, other: Dict[str, int]) -> None:
        with self._lock:
            for category, count in other.items():
                self._counts[category] = self._counts.get(category, 0) + count

    def snapshot(self) -> Dict[str, int]:
        """Return a copy of the current counts."""
        with self._lock:
            return dict(self._counts)

    def __len__(self):
        with self._lock:
            return len(self._counts)


@dataclass
class ScanOptions:
    """Options for directory scanning operations."""
    include_hidden: bool = True
    verbose: bool = False


@dataclass
class ScanResult:
    """Result of a directory scan operation."""
    root: Path
    files: List[Path]
    category_counts: Dict[str, int]
    errors: List[str]
    duration: float

    @property
    def total_files(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class MoveFailure:
    """A file that could not be relocated; it stays at ``path``."""
    path: Path
    destination: Path
    cause: str


@dataclass(frozen=True)
class RelocationOutcome:
    """Per-file result of a relocation task."""
    category: str
    source: Path
    destination: Path
    error: Optional[str] = None
    note: str = ""  # e.g. "same location", "exists, renamed", "dry run"

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_failure(self) -> MoveFailure:
        return MoveFailure(self.source, self.destination, self.error or "")


@dataclass
class RelocationReport:
    """Merged outcomes of every relocation task in a run."""
    outcomes: Dict[str, List[RelocationOutcome]] = field(default_factory=dict)
    incomplete_categories: List[str] = field(default_factory=list)
    dry_run: bool = False

    def add(self, category: str, outcomes: List[RelocationOutcome]) -> None:
        self.outcomes.setdefault(category, []).extend(outcomes)

    @property
    def moved_files(self) -> int:
        return sum(1 for items in self.outcomes.values() for o in items if o.succeeded)

    @property
    def failures(self) -> List[MoveFailure]:
        return [o.to_failure() for items in self.outcomes.values() for o in items if not o.succeeded]


@dataclass
class PruneResult:
    """Result of an empty-directory pruning pass."""
    removed: List[Path] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RunSummary:
    """Statistics of one classification run, handed to front ends."""
    root: Path
    total_files: int
    elapsed_ms: int
    category_counts: Dict[str, int]
    failures: List[MoveFailure]
    moved_files: int = 0
    removed_directories: int = 0
    prune_failures: List[str] = field(default_factory=list)
    incomplete_categories: List[str] = field(default_factory=list)
    completed: bool = True
    dry_run: bool = False

    @property
    def failed_files(self) -> int:
        return len(self.failures)

    @property
    def success_rate(self) -> float:
        """Calculate the share of scanned files that were relocated."""
        if self.total_files == 0:
            return 1.0
        return self.moved_files / self.total_files
