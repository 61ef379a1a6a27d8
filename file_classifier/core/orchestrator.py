"""Sequences a classification run and assembles its summary."""

import time
import logging
from pathlib import Path
from typing import Callable, Optional, Union

from .classifier import classify
from .config import AppConfig
from .exceptions import RelocationTimeoutError
from .models import (
    PruneResult, RelocationOutcome, RelocationReport, RunSummary, ScanOptions, ScanResult
)
from .pruner import prune_empty_directories
from .relocator import RelocationWorkerPool
from .scanner import TreeScanner, validate_root


logger = logging.getLogger(__name__)


class ClassificationRunner:
    """Runs scan, classify, relocate and prune over one root directory."""

    def __init__(self, config: Optional[AppConfig] = None, dry_run: bool = False,
                 scan_progress: Optional[Callable[[int, int], None]] = None,
                 outcome_callback: Optional[Callable[[RelocationOutcome], None]] = None):
        """
        Args:
            config: Application configuration; defaults if omitted
            dry_run: Plan destinations only; nothing is moved or pruned
            scan_progress: Forwarded to the TreeScanner
            outcome_callback: Forwarded to the RelocationWorkerPool
        """
        self.config = config or AppConfig()
        self.config.validate()
        self.dry_run = dry_run
        self.scanner = TreeScanner(
            ScanOptions(include_hidden=self.config.scan.include_hidden),
            progress_callback=scan_progress,
        )
        self.pool = RelocationWorkerPool.from_config(
            self.config.relocation,
            dry_run=dry_run,
            outcome_callback=outcome_callback,
        )

    def run(self, root: Union[str, Path], exclude: Optional[Union[str, Path]] = None) -> RunSummary:
        """
        Classify and relocate every file under ``root``.

        Raises:
            InvalidRootError: Root missing or not a directory; nothing was touched
            ScanError: Root unreadable
            RelocationTimeoutError: The pool did not finish in time. Its
                ``summary`` holds the partial RunSummary.
        """
        start_time = time.perf_counter()
        root = validate_root(root)

        scan_result = self.scanner.scan(root, exclude)
        buckets = classify(scan_result.files)
        logger.info(f"Classified {scan_result.total_files} file(s) into {len(buckets)} categories")

        try:
            report = self.pool.relocate(buckets, root)
        except RelocationTimeoutError as e:
            e.summary = self._summarize(root, scan_result, e.report, PruneResult(), start_time, completed=False)
            raise

        if self.dry_run or not self.config.prune.enabled:
            prune_result = PruneResult()
        else:
            prune_result = prune_empty_directories(root)

        summary = self._summarize(root, scan_result, report, prune_result, start_time)
        logger.info(
            f"Run complete: {summary.moved_files}/{summary.total_files} file(s) relocated, "
            f"{summary.failed_files} failed, {summary.removed_directories} directories pruned "
            f"in {summary.elapsed_ms} ms"
        )
        return summary

    def _summarize(self, root: Path, scan_result: ScanResult, report: Optional[RelocationReport],
                   prune_result: PruneResult, start_time: float, completed: bool = True) -> RunSummary:
        report = report or RelocationReport(dry_run=self.dry_run)
        return RunSummary(
            root=root,
            total_files=scan_result.total_files,
            elapsed_ms=int((time.perf_counter() - start_time) * 1000),
            category_counts=dict(scan_result.category_counts),
            failures=report.failures,
            moved_files=report.moved_files,
            removed_directories=len(prune_result.removed),
            prune_failures=list(prune_result.errors),
            incomplete_categories=list(report.incomplete_categories),
            completed=completed,
            dry_run=self.dry_run,
        )


def run_classification(root: Union[str, Path], exclude: Optional[Union[str, Path]] = None,
                       config: Optional[AppConfig] = None, **kwargs) -> RunSummary:
    """Convenience wrapper around ClassificationRunner.run()."""
    return ClassificationRunner(config, **kwargs).run(root, exclude)
