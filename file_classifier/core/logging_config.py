"""Logging configuration and utilities for the File Classifier."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict
from .config import LoggingConfig, get_config


DEBUG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(filename)s:%(lineno)d - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors."""
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # Records are shared between handlers
            record.levelname = levelname


class LoggingManager:
    """Manages logging configuration and setup."""

    def __init__(self, config: Optional[LoggingConfig] = None):
        """
        Initialize logging manager.

        Args:
            config: Logging configuration. If None, uses global config.
        """
        self.config = config or get_config().logging
        self.handlers: Dict[str, logging.Handler] = {}
        self._setup_root_logger()

    def _setup_root_logger(self):
        """Set up the root logger with configured handlers."""
        root_logger = logging.getLogger()

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)

        try:
            log_level = getattr(logging, self.config.level.upper())
            root_logger.setLevel(log_level)
        except AttributeError:
            root_logger.setLevel(logging.INFO)
            root_logger.warning(f"Invalid log level '{self.config.level}', using INFO")

        if self.config.console_enabled:
            console_handler = self._create_console_handler()
            root_logger.addHandler(console_handler)
            self.handlers['console'] = console_handler

        if self.config.file_enabled and self.config.file_path:
            file_handler = self._create_file_handler()
            if file_handler:
                root_logger.addHandler(file_handler)
                self.handlers['file'] = file_handler

    def _create_console_handler(self) -> logging.Handler:
        """Create and configure console handler."""
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColoredFormatter(self.config.format))
        return handler

    def _create_file_handler(self) -> Optional[logging.Handler]:
        """Create and configure rotating file handler."""
        try:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)

            max_bytes = self.config.file_max_size_mb * 1024 * 1024
            handler = logging.handlers.RotatingFileHandler(
                self.config.file_path,
                maxBytes=max_bytes,
                backupCount=self.config.file_backup_count
            )
            handler.setFormatter(logging.Formatter(self.config.format))
            return handler

        except OSError as e:
            # If file handler creation fails, keep logging to console
            logging.getLogger(__name__).error(f"Failed to create file handler: {e}")
            return None

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_level(self, level: str):
        """
        Set the logging level for all loggers.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        try:
            log_level = getattr(logging, level.upper())
            logging.getLogger().setLevel(log_level)
            self.config.level = level.upper()
        except AttributeError:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    def enable_debug_logging(self):
        """Enable debug logging with thread and source location in each line."""
        self.set_level('DEBUG')

        for handler in self.handlers.values():
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
            else:
                handler.setFormatter(ColoredFormatter(DEBUG_FORMAT))

    def log_system_info(self):
        """Log system information for debugging."""
        import os
        import platform

        logger = self.get_logger(__name__)
        logger.debug("=== System Information ===")
        logger.debug(f"Platform: {platform.platform()}")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"CPU count: {os.cpu_count()}")
        logger.debug(f"Working directory: {Path.cwd()}")
        logger.debug(f"Log file: {self.config.file_path if self.config.file_enabled else 'disabled'}")
        logger.debug("=== End System Information ===")


# Global logging manager instance
_logging_manager = None


def setup_logging(config: Optional[LoggingConfig] = None) -> LoggingManager:
    """
    Set up global logging configuration.

    Args:
        config: Optional logging configuration

    Returns:
        LoggingManager instance
    """
    global _logging_manager
    _logging_manager = LoggingManager(config)
    return _logging_manager

