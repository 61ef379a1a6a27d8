"""Directory tree scanner for the File Classifier."""

import os
import time
import logging
from pathlib import Path
from typing import Iterator, Optional, Callable, List, Union
from .models import CategoryCounter, ScanOptions, ScanResult, normalize_category
from .exceptions import InvalidRootError, ScanError, ScanCancelledError
from .error_handler import ErrorHandler


logger = logging.getLogger(__name__)


def validate_root(path: Union[str, Path]) -> Path:
    """
    Check that ``path`` is an existing, readable directory.

    Args:
        path: Directory to classify

    Returns:
        The resolved absolute path

    Raises:
        InvalidRootError: If the path does not exist or is not a directory
        ScanError: If the directory cannot be read
    """
    root = Path(path).expanduser().resolve()

    if not root.exists():
        raise InvalidRootError(f"Path does not exist: {root}")

    if not root.is_dir():
        raise InvalidRootError(f"Path is not a directory: {root}")

    try:
        with os.scandir(root) as entries:
            next(entries, None)
    except OSError as e:
        raise ScanError(f"Cannot read directory {root}: {e}") from e

    return root


class TreeScanner:
    """Walks a directory tree and collects the files to classify."""

    def __init__(self, options: Optional[ScanOptions] = None,
                 progress_callback: Optional[Callable[[int, int], None]] = None):
        """
        Initialize the tree scanner.

        Args:
            options: Scanning options
            progress_callback: Optional callback for progress reporting.
                               Called with (files_found, directories_visited).
        """
        self.options = options or ScanOptions()
        self.progress_callback = progress_callback
        self.error_handler = ErrorHandler(logger)
        self._cancelled = False
        self._directories_visited = 0

    def scan(self, root: Union[str, Path], exclude: Optional[Union[str, Path]] = None) -> ScanResult:
        """
        Collect every regular file under ``root`` except ``exclude``.

        Args:
            root: Directory to scan
            exclude: Optional file left out of the result

        Returns:
            ScanResult with the ordered file list and per-category counts

        Raises:
            InvalidRootError: If root is missing or not a directory
            ScanError: If root cannot be read
            ScanCancelledError: If cancel_scan() was called mid-walk
        """
        start_time = time.perf_counter()
        root = validate_root(root)
        exclude_path = self._resolve_exclude(exclude)

        self._cancelled = False
        counter = CategoryCounter()
        files: List[Path] = []
        errors: List[str] = []
        self._directories_visited = 0

        for file_path in self.iter_files(root, exclude_path, errors):
            files.append(file_path)
            counter.increment(normalize_category(file_path.name))
            self._report_progress(len(files))

        duration = time.perf_counter() - start_time

        if errors:
            self.error_handler.log_error_summary(errors, "directory scan")

        logger.info(
            f"Scanned {root}: {len(files)} file(s) in {len(counter)} categories "
            f"({self._directories_visited} directories, {duration:.3f}s)"
        )
        return ScanResult(root, files, counter.snapshot(), errors, duration)

    def iter_files(self, root: Path, exclude_path: Optional[Path], errors: List[str]) -> Iterator[Path]:
        """
        Depth-first generator over the files under ``root``.

        Uses an explicit stack of pending directories. Directories that cannot
        be read are skipped and reported through ``errors``.
        """
        stack = [root]

        while stack:
            if self._cancelled:
                logger.info("Scan cancelled, stopping directory walk")
                raise ScanCancelledError("Scan was cancelled by user")

            directory = stack.pop()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except OSError as e:
                error_msg = f"Could not read directory {directory}: {e}"
                errors.append(error_msg)
                self.error_handler.handle_scan_error(e, f"scanning {directory}")
                continue

            self._directories_visited += 1
            subdirectories = []

            for entry in entries:
                if not self.options.include_hidden and entry.name.startswith('.'):
                    continue

                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirectories.append(Path(entry.path))
                        continue
                    if not entry.is_file():
                        # Special files, dangling links and links to directories
                        logger.debug(f"Skipping non-regular entry {entry.path}")
                        continue
                    if exclude_path is not None and self._is_excluded(entry, exclude_path):
                        logger.debug(f"Excluding {entry.path}")
                        continue
                except OSError as e:
                    error_msg = f"Could not access {entry.path}: {e}"
                    errors.append(error_msg)
                    if self.options.verbose:
                        logger.warning(error_msg)
                    continue

                yield Path(entry.path)

            # Reversed so the first subdirectory is walked first
            stack.extend(reversed(subdirectories))

    def cancel_scan(self):
        """Cancel the current scan operation."""
        self._cancelled = True
        logger.info("Scan cancellation requested")

    @staticmethod
    def _resolve_exclude(exclude: Optional[Union[str, Path]]) -> Optional[Path]:
        if exclude is None or str(exclude) == "":
            return None
        return Path(exclude).expanduser().resolve()

    @staticmethod
    def _is_excluded(entry: os.DirEntry, exclude_path: Path) -> bool:
        # Resolving is only needed when the entry could point at the excluded file
        if entry.name != exclude_path.name and not entry.is_symlink():
            return False
        return Path(entry.path).resolve() == exclude_path

    def _report_progress(self, files_found: int):
        if not self.progress_callback:
            return
        try:
            self.progress_callback(files_found, self._directories_visited)
        except Exception as e:
            logger.warning(f"Progress callback error: {e}")
