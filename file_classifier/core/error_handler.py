"""Error handling utilities for the File Classifier."""

import errno
import logging
from pathlib import Path
from typing import Callable, Optional, Union, List
from functools import wraps

from .exceptions import (
    FileClassifierError, FileSystemError, AccessDeniedError, PathNotFoundError,
    MoveError, PruneError
)


logger = logging.getLogger(__name__)


def describe_os_error(error: OSError) -> str:
    """Short, user-facing cause for an OSError raised by a move or delete."""
    if error.errno in (errno.EACCES, errno.EPERM):
        cause = "permission denied"
    elif error.errno == errno.ENOENT:
        cause = "no such file or directory"
    elif error.errno == errno.ENOSPC:
        cause = "no space left on device"
    elif error.errno == errno.EXDEV:
        cause = "cross-device move failed"
    elif error.errno == errno.ENOTEMPTY:
        cause = "directory not empty"
    elif error.errno in (errno.ENOTDIR, errno.EEXIST):
        cause = "path exists and is not a directory"
    else:
        cause = error.strerror or type(error).__name__
    return f"{cause}: {error}"


class ErrorHandler:
    """Centralized error handling and reporting logic."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize error handler.

        Args:
            logger: Logger instance to use for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def handle_file_system_error(self, error: Exception, file_path: Union[str, Path]) -> None:
        """
        Translate a file system error into a project exception.

        Args:
            error: The exception that occurred
            file_path: Path where the error occurred

        Raises:
            AccessDeniedError, PathNotFoundError or FileSystemError
        """
        file_path = Path(file_path) if isinstance(file_path, str) else file_path

        if isinstance(error, OSError):
            if error.errno in (errno.EACCES, errno.EPERM):
                self.logger.warning(f"Permission denied accessing {file_path}: {error}")
                raise AccessDeniedError(f"Permission denied: {file_path}") from error
            elif error.errno == errno.ENOENT:
                self.logger.warning(f"File not found: {file_path}")
                raise PathNotFoundError(f"Path not found: {file_path}") from error
            elif error.errno == errno.ENOSPC:
                self.logger.error(f"No space left on device: {error}")
                raise FileSystemError("No space left on device") from error
            elif error.errno == errno.EXDEV:
                self.logger.error(f"Cross-device operation on {file_path}: {error}")
                raise FileSystemError(f"Cannot move across devices: {file_path}") from error
            else:
                self.logger.error(f"File system error accessing {file_path}: {error}")
                raise FileSystemError(f"File system error: {error}") from error

        self.logger.error(f"Unexpected file system error: {error}")
        raise FileSystemError(f"Unexpected file system error: {error}") from error

    def move_error(self, error: OSError, source: Path, destination: Path) -> MoveError:
        """
        Log a failed move and wrap it in a MoveError carrying both paths.

        The message is the short cause from describe_os_error(); the original
        OSError is kept as ``__cause__``.
        """
        failure = MoveError(describe_os_error(error), source, destination)
        failure.__cause__ = error
        self.logger.warning(f"Error moving file {source}: {failure}")
        return failure

    def prune_error(self, error: OSError, directory: Union[str, Path], action: str = "remove") -> PruneError:
        """Log a directory that could not be pruned and wrap it in a PruneError."""
        failure = PruneError(f"Could not {action} {directory}: {describe_os_error(error)}")
        failure.__cause__ = error
        self.logger.warning(str(failure))
        return failure

    def handle_scan_error(self, error: OSError, context: str = "") -> None:
        """
        Log a directory the scanner could not read; scanning continues.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred
        """
        context_msg = f" in {context}" if context else ""
        self.logger.warning(f"File system error during scan{context_msg}: {describe_os_error(error)}")

    def log_error_summary(self, errors: List[str], operation: str = "operation"):
        """
        Log a summary of errors that occurred during an operation.

        Args:
            errors: Error messages collected during the operation
            operation: Description of the operation
        """
        if not errors:
            return

        self.logger.warning(f"Error summary for {operation}: {len(errors)} error(s)")

        unique_messages = []
        for message in errors:
            if message not in unique_messages:
                unique_messages.append(message)
            if len(unique_messages) >= 10:
                break
        for message in unique_messages:
            self.logger.warning(f"  Example: {message}")
        if len(errors) > len(unique_messages):
            self.logger.warning(f"  ... and {len(errors) - len(unique_messages)} more")


def safe_path_operation(func: Callable) -> Callable:
    """
    Decorator translating raw OSErrors from path operations into project exceptions.

    Args:
        func: Function that performs path operations

    Returns:
        Wrapped function with error handling
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FileClassifierError:
            raise
        except OSError as e:
            file_path = None
            for arg in args:
                if isinstance(arg, (str, Path)):
                    file_path = arg
                    break

            return ErrorHandler(logger).handle_file_system_error(e, file_path or "unknown")

    return wrapper
