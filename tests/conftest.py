"""Shared fixtures for the File Classifier tests."""

from pathlib import Path

import pytest

from file_classifier.core.config import AppConfig, LoggingConfig, RelocationConfig


def make_tree(root: Path, files):
    """Create ``files`` (relative paths) under ``root`` with their name as content."""
    created = []
    for relative in files:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(relative)
        created.append(path)
    return created


def quiet_config(**relocation) -> AppConfig:
    """AppConfig that never touches the user's log directory."""
    return AppConfig(
        relocation=RelocationConfig(**relocation),
        logging=LoggingConfig(file_enabled=False, console_enabled=False),
    )


@pytest.fixture
def tree(tmp_path):
    """A small tree with mixed-case suffixes, nesting and an extensionless file."""
    root = tmp_path / "root"
    root.mkdir()
    make_tree(root, [
        "a.txt",
        "b.TXT",
        "notes",
        "skip.log",
        "photos/cat.jpg",
        "photos/2023/dog.JPG",
        "docs/deep/er/report.pdf",
    ])
    return root
