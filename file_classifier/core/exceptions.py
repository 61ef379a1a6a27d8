"""Custom exceptions for the File Classifier."""


class FileClassifierError(Exception):
    """Base exception for file classification errors."""
    pass


class FileSystemError(FileClassifierError):
    """Exception for file system related errors."""
    pass


class ScanError(FileClassifierError):
    """Exception for scanning operation errors."""
    pass


class ConfigurationError(FileClassifierError):
    """Exception for configuration related errors."""
    pass


class AccessDeniedError(FileSystemError):
    """Exception for file permission errors."""
    pass


class PathNotFoundError(FileSystemError):
    """Exception for path not found errors."""
    pass


class MoveError(FileSystemError):
    """Exception for a single file that could not be relocated."""

    def __init__(self, message, source=None, destination=None):
        super().__init__(message)
        self.source = source
        self.destination = destination


class PruneError(FileSystemError):
    """Exception for a directory that could not be removed."""
    pass


class InvalidRootError(ScanError, NotADirectoryError):
    """Raised when the classification root is missing or not a directory.

    Also a ``NotADirectoryError`` so front ends can catch the builtin.
    """
    pass


class ScanCancelledError(ScanError):
    """Exception for cancelled scan operations."""
    pass


class RelocationTimeoutError(FileClassifierError, TimeoutError):
    """Raised when the worker pool does not finish in the allotted window.

    Moves that completed before the deadline stay in effect. ``report`` holds
    the partial relocation report and ``summary`` the partial run summary once
    the orchestrator has attached it.
    """

    def __init__(self, message, report=None, summary=None):
        super().__init__(message)
        self.report = report
        self.summary = summary
