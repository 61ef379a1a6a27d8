"""Core engine for file classification and relocation."""

from .models import (
    UNKNOWN_CATEGORY, category_of, CollisionPolicy, MoveFailure, RelocationOutcome,
    RelocationReport, PruneResult, RunSummary, ScanOptions, ScanResult
)
from .scanner import TreeScanner, validate_root
from .classifier import classify
from .relocator import RelocationWorkerPool
from .pruner import prune_empty_directories
from .orchestrator import ClassificationRunner, run_classification

__all__ = [
    "UNKNOWN_CATEGORY",
    "category_of",
    "CollisionPolicy",
    "MoveFailure",
    "RelocationOutcome",
    "RelocationReport",
    "PruneResult",
    "RunSummary",
    "ScanOptions",
    "ScanResult",
    "TreeScanner",
    "validate_root",
    "classify",
    "RelocationWorkerPool",
    "prune_empty_directories",
    "ClassificationRunner",
    "run_classification",
]
