"""Concurrent per-category file relocation."""

import errno
import os
import shutil
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from .config import RelocationConfig
from .error_handler import ErrorHandler, describe_os_error
from .exceptions import RelocationTimeoutError
from .models import CollisionPolicy, RelocationOutcome, RelocationReport


logger = logging.getLogger(__name__)


def unique_path(dest: Path, taken: Iterable[Path] = ()) -> Path:
    """
    If dest exists, append ' (1)', ' (2)', ... before the suffix.
    Returns a Path that does not exist and is not in ``taken``.
    """
    taken = set(taken)
    if not os.path.lexists(dest) and dest not in taken:
        return dest

    stem = dest.stem
    suffix = dest.suffix
    parent = dest.parent
    i = 1
    while True:
        candidate = parent / f"{stem} ({i}){suffix}"
        if not os.path.lexists(candidate) and candidate not in taken:
            return candidate
        i += 1


def move_file(source: Path, destination: Path) -> None:
    """
    Move ``source`` to ``destination``, replacing an existing destination file.

    Same-device moves are a single rename. Across devices the file is copied
    and the source unlinked, which is not atomic.
    """
    try:
        os.replace(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        logger.debug(f"Cross-device move of {source}, falling back to copy")
        shutil.move(str(source), str(destination))


class RelocationWorkerPool:
    """Moves each category's files into ``base/<category>``, one task per category."""

    def __init__(self, max_workers: int = 0, timeout: float = 3600.0,
                 collision_policy: CollisionPolicy = CollisionPolicy.OVERWRITE,
                 dry_run: bool = False,
                 outcome_callback: Optional[Callable[[RelocationOutcome], None]] = None):
        """
        Initialize the worker pool.

        Args:
            max_workers: Upper bound on worker threads; 0 sizes the pool to the CPU count
            timeout: Seconds to wait for every task before giving up
            collision_policy: Overwrite or rename when the destination name is taken
            dry_run: Compute destinations without touching the file system
            outcome_callback: Called once per file, serialized across workers
        """
        self.config = RelocationConfig(
            max_workers=max_workers,
            timeout_seconds=timeout,
            collision_policy=getattr(collision_policy, "value", collision_policy),
        )
        self.config.validate()
        self.collision_policy = CollisionPolicy(collision_policy)
        self.dry_run = dry_run
        self.outcome_callback = outcome_callback
        self.error_handler = ErrorHandler(logger)
        self._callback_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: RelocationConfig, **kwargs) -> "RelocationWorkerPool":
        return cls(
            max_workers=config.max_workers,
            timeout=config.timeout_seconds,
            collision_policy=CollisionPolicy(config.collision_policy),
            **kwargs
        )

    def relocate(self, buckets: Dict[str, List[Path]], base: Union[str, Path]) -> RelocationReport:
        """
        Relocate every bucket concurrently and wait for all tasks.

        Args:
            buckets: Category to files mapping from the classifier
            base: Directory receiving one subdirectory per category

        Returns:
            RelocationReport with the outcome of every file

        Raises:
            RelocationTimeoutError: If tasks are still running after the timeout.
                Completed moves stay in effect; the partial report is attached.
        """
        base = Path(base)
        report = RelocationReport(dry_run=self.dry_run)
        if not buckets:
            return report

        workers = self.config.resolved_workers(len(buckets))
        logger.info(
            f"Relocating {sum(len(files) for files in buckets.values())} file(s) "
            f"in {len(buckets)} categories with {workers} worker(s)"
        )

        # One flag per call: tasks abandoned by a timed-out call must stay stopped
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="relocate")
        timed_out = False
        try:
            futures = {
                executor.submit(self._relocate_category, category, list(files), base, stop): category
                for category, files in buckets.items()
            }
            done, not_done = wait(futures, timeout=self.config.timeout_seconds)

            for future in done:
                report.add(futures[future], future.result())

            if not_done:
                timed_out = True
                stop.set()
                report.incomplete_categories = sorted(futures[future] for future in not_done)
                logger.error(
                    f"Relocation timed out after {self.config.timeout_seconds}s; "
                    f"{len(not_done)} category task(s) unfinished: {', '.join(report.incomplete_categories)}"
                )
                raise RelocationTimeoutError(
                    f"Relocation did not finish within {self.config.timeout_seconds} seconds",
                    report=report,
                )
        finally:
            # Explicit shutdown, not a with-block: a with-block would join a timed-out task.
            # Running tasks see the stop flag and end at the next file boundary.
            executor.shutdown(wait=not timed_out, cancel_futures=True)

        return report

    def _relocate_category(self, category: str, files: List[Path], base: Path,
                           stop: threading.Event) -> List[RelocationOutcome]:
        """Move one category's files sequentially, recording every outcome."""
        category_dir = base / category
        outcomes: List[RelocationOutcome] = []
        # Destinations claimed earlier in this task; a dry run leaves them absent on disk
        planned: Set[Path] = set()

        if not self.dry_run:
            try:
                category_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                cause = f"cannot create directory {category_dir}: {describe_os_error(e)}"
                logger.error(cause)
                for source in files:
                    outcome = RelocationOutcome(category, source, category_dir / source.name, error=cause)
                    outcomes.append(self._record(outcome))
                return outcomes

        for source in files:
            if stop.is_set():
                logger.warning(f"Stopping '{category}' early, {len(files) - len(outcomes)} file(s) left in place")
                break
            outcome = self._move_one(category, source, category_dir, planned)
            if outcome.succeeded:
                planned.add(outcome.destination)
            outcomes.append(self._record(outcome))

        failed = sum(1 for outcome in outcomes if not outcome.succeeded)
        logger.info(f"Category '{category}': {len(outcomes) - failed} moved, {failed} failed")
        return outcomes

    def _move_one(self, category: str, source: Path, category_dir: Path,
                  planned: Set[Path]) -> RelocationOutcome:
        destination = category_dir / source.name
        note = ""
        try:
            if self._same_location(source, destination):
                return RelocationOutcome(category, source, destination, note="same location")

            if os.path.lexists(destination) or destination in planned:
                if self.collision_policy is CollisionPolicy.RENAME:
                    destination = unique_path(destination, taken=planned)
                    note = "exists, renamed"
                else:
                    note = "overwritten"

            if self.dry_run:
                return RelocationOutcome(category, source, destination, note=note or "dry run")

            move_file(source, destination)
        except OSError as e:
            failure = self.error_handler.move_error(e, source, destination)
            return RelocationOutcome(category, source, destination, error=str(failure))

        logger.debug(f"Moved {source.name} to {category_dir.name}")
        return RelocationOutcome(category, source, destination, note=note)

    @staticmethod
    def _same_location(source: Path, destination: Path) -> bool:
        if source == destination:
            return True
        # Catches case-insensitive file systems where the paths differ only in case
        return destination.exists() and os.path.samefile(source, destination)

    def _record(self, outcome: RelocationOutcome) -> RelocationOutcome:
        if self.outcome_callback is not None:
            with self._callback_lock:
                try:
                    self.outcome_callback(outcome)
                except Exception as e:
                    logger.warning(f"Outcome callback error: {e}")
        return outcome
