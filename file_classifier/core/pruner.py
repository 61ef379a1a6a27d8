"""Removes directories left empty after relocation."""

import os
import logging
from pathlib import Path
from typing import Union

from .error_handler import ErrorHandler
from .models import PruneResult


logger = logging.getLogger(__name__)


def prune_empty_directories(root: Union[str, Path]) -> PruneResult:
    """
    Remove every empty directory below ``root``, deepest first.

    A directory whose only entries were empty subdirectories is removed as
    well, since children are visited before their parent. ``root`` itself is
    kept even if it ends up empty. Symlinked directories are never followed.
    Failures are logged and collected, never raised.

    Args:
        root: Top of the tree to prune

    Returns:
        PruneResult listing removed directories and errors
    """
    root = Path(root)
    result = PruneResult()
    error_handler = ErrorHandler(logger)

    def on_walk_error(error: OSError):
        failure = error_handler.prune_error(error, error.filename, action="read")
        result.errors.append(str(failure))

    for dirpath, _dirnames, _filenames in os.walk(root, topdown=False, onerror=on_walk_error):
        directory = Path(dirpath)
        if directory == root:
            continue

        try:
            # Re-list: the walk's snapshot predates removal of its children
            with os.scandir(directory) as entries:
                if next(entries, None) is not None:
                    continue
            directory.rmdir()
        except OSError as e:
            result.errors.append(str(error_handler.prune_error(e, directory)))
            continue

        logger.debug(f"Removed empty directory {directory}")
        result.removed.append(directory)

    logger.info(f"Pruned {len(result.removed)} empty director{'y' if len(result.removed) == 1 else 'ies'} under {root}")
    return result
