"""Configuration management for the File Classifier."""

import os
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
import configparser
import json

from .error_handler import safe_path_operation
from .exceptions import ConfigurationError
from .models import CollisionPolicy


@dataclass
class ScanConfig:
    """Scanning configuration settings."""
    include_hidden: bool = True


@dataclass
class RelocationConfig:
    """Worker pool and move policy settings."""
    max_workers: int = 0  # 0 = size to available CPUs
    timeout_seconds: float = 3600.0
    collision_policy: str = CollisionPolicy.OVERWRITE.value

    def resolved_workers(self, category_count: int) -> int:
        """Pool size for a run with ``category_count`` relocation tasks."""
        workers = self.max_workers or os.cpu_count() or 1
        return max(1, min(workers, category_count))

    def validate(self) -> None:
        if self.max_workers < 0:
            raise ConfigurationError(f"max_workers must be >= 0, got {self.max_workers}")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        try:
            CollisionPolicy(self.collision_policy)
        except ValueError:
            choices = ", ".join(p.value for p in CollisionPolicy)
            raise ConfigurationError(
                f"Unknown collision_policy '{self.collision_policy}' (expected one of: {choices})"
            )


@dataclass
class PruneConfig:
    """Empty-directory pruning settings."""
    enabled: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = True
    file_path: Optional[Path] = None
    file_max_size_mb: int = 10
    file_backup_count: int = 5
    console_enabled: bool = True

    def __post_init__(self):
        if self.file_path is None:
            self.file_path = Path.home() / ".file_classifier" / "logs" / "app.log"


@dataclass
class AppConfig:
    """Main application configuration."""
    scan: ScanConfig = field(default_factory=ScanConfig)
    relocation: RelocationConfig = field(default_factory=RelocationConfig)
    prune: PruneConfig = field(default_factory=PruneConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Application metadata
    app_name: str = "File Classifier"
    version: str = "0.1.0"

    def validate(self) -> None:
        """Raise ConfigurationError if any section holds an invalid value."""
        self.relocation.validate()

    def to_dict(self) -> dict:
        return {
            'scan': {
                'include_hidden': self.scan.include_hidden,
            },
            'relocation': {
                'max_workers': self.relocation.max_workers,
                'timeout_seconds': self.relocation.timeout_seconds,
                'collision_policy': self.relocation.collision_policy,
            },
            'prune': {
                'enabled': self.prune.enabled,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_enabled': self.logging.file_enabled,
                'file_path': str(self.logging.file_path),
                'file_max_size_mb': self.logging.file_max_size_mb,
                'file_backup_count': self.logging.file_backup_count,
                'console_enabled': self.logging.console_enabled,
            },
        }


class ConfigManager:
    """Manages application configuration stored in an INI file."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        if config_file is None:
            config_file = Path.home() / ".file_classifier" / "config.ini"

        self.config_file = config_file
        self.config = AppConfig()
        self.logger = logging.getLogger(__name__)

        if self.config_file.exists():
            self.load_from_file()
        else:
            self.save_to_file()

    def load_from_file(self) -> None:
        """
        Load configuration from INI file.

        Raises:
            ConfigurationError: If the file cannot be parsed or holds invalid values
        """
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(self.config_file)
        except configparser.Error as e:
            raise ConfigurationError(f"Cannot parse {self.config_file}: {e}") from e

        try:
            if 'scan' in parser:
                scan_section = parser['scan']
                if 'include_hidden' in scan_section:
                    self.config.scan.include_hidden = scan_section.getboolean('include_hidden')

            if 'relocation' in parser:
                section = parser['relocation']
                if 'max_workers' in section:
                    self.config.relocation.max_workers = section.getint('max_workers')
                if 'timeout_seconds' in section:
                    self.config.relocation.timeout_seconds = section.getfloat('timeout_seconds')
                if 'collision_policy' in section:
                    self.config.relocation.collision_policy = section.get('collision_policy').strip().lower()

            if 'prune' in parser:
                if 'enabled' in parser['prune']:
                    self.config.prune.enabled = parser['prune'].getboolean('enabled')

            if 'logging' in parser:
                log_section = parser['logging']
                if 'level' in log_section:
                    self.config.logging.level = log_section.get('level')
                if 'format' in log_section:
                    self.config.logging.format = log_section.get('format')
                if 'file_enabled' in log_section:
                    self.config.logging.file_enabled = log_section.getboolean('file_enabled')
                if 'file_path' in log_section:
                    self.config.logging.file_path = Path(log_section.get('file_path'))
                if 'file_max_size_mb' in log_section:
                    self.config.logging.file_max_size_mb = log_section.getint('file_max_size_mb')
                if 'file_backup_count' in log_section:
                    self.config.logging.file_backup_count = log_section.getint('file_backup_count')
                if 'console_enabled' in log_section:
                    self.config.logging.console_enabled = log_section.getboolean('console_enabled')
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in {self.config_file}: {e}") from e

        self.config.validate()
        self.logger.info(f"Configuration loaded from {self.config_file}")

    def save_to_file(self) -> None:
        """Save current configuration to INI file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            parser = configparser.ConfigParser(interpolation=None)
            for section, values in self.config.to_dict().items():
                parser[section] = {key: str(value) for key, value in values.items()}

            with open(self.config_file, 'w') as f:
                parser.write(f)

            self.logger.info(f"Configuration saved to {self.config_file}")

        except OSError as e:
            self.logger.error(f"Error saving configuration to {self.config_file}: {e}")

    def get_config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = AppConfig()
        self.save_to_file()
        self.logger.info("Configuration reset to defaults")

    @safe_path_operation
    def export_to_json(self, file_path: Path) -> None:
        """
        Export configuration to JSON format.

        Args:
            file_path: Path to save JSON file

        Raises:
            AccessDeniedError, PathNotFoundError or FileSystemError: If the file cannot be written
        """
        with open(file_path, 'w') as f:
            json.dump(self.config.to_dict(), f, indent=2)

        self.logger.info(f"Configuration exported to {file_path}")


# Global configuration instance
_config_manager = None


def get_config() -> AppConfig:
    """Get the global application configuration."""
    return get_config_manager().get_config()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def setup_config(config_file: Optional[Path] = None) -> ConfigManager:
    """
    Set up global configuration.

    Args:
        config_file: Optional path to configuration file

    Returns:
        ConfigManager instance
    """
    global _config_manager
    _config_manager = ConfigManager(config_file)
    return _config_manager
