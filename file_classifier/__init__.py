"""File Classifier - sorts a directory tree into per-extension folders."""

__version__ = "0.1.0"
__author__ = "File Classifier Team"
__description__ = "Sorts files into per-extension folders using a concurrent worker pool"

# Import main components for programmatic access
from .core.models import category_of, RunSummary, MoveFailure
from .core.scanner import validate_root
from .core.orchestrator import run_classification
from .cli.main import cli

__all__ = [
    "category_of",
    "RunSummary",
    "MoveFailure",
    "validate_root",
    "run_classification",
    "cli"
]
