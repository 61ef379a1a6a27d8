"""End-to-end tests for a classification run."""

import errno
import os
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import make_tree, quiet_config
from file_classifier.core import relocator
from file_classifier.core.config import PruneConfig
from file_classifier.core.exceptions import InvalidRootError, RelocationTimeoutError
from file_classifier.core.orchestrator import ClassificationRunner, run_classification


def _snapshot(root: Path):
    """Relative paths of every file and directory under ``root``."""
    entries = []
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            entries.append(str((Path(dirpath) / name).relative_to(root)))
    return sorted(entries)


def _empty_directories(root: Path):
    return [
        dirpath for dirpath, dirnames, filenames in os.walk(root)
        if Path(dirpath) != root and not dirnames and not filenames
    ]


class TestClassificationRun:
    """Test the full scan, classify, relocate and prune sequence."""

    def test_flat_tree_with_exclusion(self, tmp_path):
        root = tmp_path.resolve()
        make_tree(root, ["a.txt", "b.TXT", "notes", "skip.log"])

        summary = run_classification(root, exclude=root / "skip.log", config=quiet_config())

        assert summary.total_files == 3
        assert summary.category_counts == {"txt": 2, "unknown": 1}
        assert summary.failures == []
        assert summary.completed
        assert (root / "txt" / "a.txt").exists()
        assert (root / "txt" / "b.TXT").exists()
        assert (root / "unknown" / "notes").exists()
        assert (root / "skip.log").read_text() == "skip.log"
        assert not (root / "log").exists()

    def test_nested_tree_is_flattened_and_pruned(self, tree):
        summary = run_classification(tree, config=quiet_config())

        assert summary.total_files == 7
        assert summary.moved_files == 7
        assert summary.category_counts == {"txt": 2, "unknown": 1, "log": 1, "jpg": 2, "pdf": 1}
        assert (tree / "jpg" / "cat.jpg").read_text() == "photos/cat.jpg"
        assert (tree / "jpg" / "dog.JPG").read_text() == "photos/2023/dog.JPG"
        assert (tree / "pdf" / "report.pdf").exists()
        assert not (tree / "photos").exists()
        assert not (tree / "docs").exists()
        assert _empty_directories(tree) == []
        assert summary.removed_directories == 5

    def test_every_file_ends_in_its_category_directory(self, tree):
        run_classification(tree, config=quiet_config())

        for dirpath, _, filenames in os.walk(tree):
            for name in filenames:
                path = Path(dirpath) / name
                assert path.parent.parent == tree
                expected = name.rsplit(".", 1)[1].lower() if "." in name.strip(".") else "unknown"
                assert path.parent.name == expected

    def test_second_run_is_stable(self, tree):
        run_classification(tree, config=quiet_config())
        before = _snapshot(tree)

        summary = run_classification(tree, config=quiet_config())

        assert _snapshot(tree) == before
        assert summary.failures == []
        assert summary.removed_directories == 0

    def test_empty_root(self, tmp_path):
        summary = run_classification(tmp_path, config=quiet_config())

        assert summary.total_files == 0
        assert summary.category_counts == {}
        assert list(tmp_path.iterdir()) == []

    def test_missing_root_touches_nothing(self, tmp_path):
        make_tree(tmp_path, ["a.txt"])

        with pytest.raises(InvalidRootError):
            run_classification(tmp_path / "missing", config=quiet_config())

        assert _snapshot(tmp_path) == ["a.txt"]

    def test_file_root_is_rejected(self, tmp_path):
        file_root = make_tree(tmp_path, ["a.txt"])[0]

        with pytest.raises(NotADirectoryError):
            run_classification(file_root, config=quiet_config())

        assert file_root.exists()

    def test_failures_are_reported(self, tree):
        real_replace = os.replace

        def flaky_replace(source, destination):
            if Path(source).name == "cat.jpg":
                raise PermissionError(errno.EACCES, "Permission denied", str(source))
            return real_replace(source, destination)

        with patch.object(relocator.os, "replace", side_effect=flaky_replace):
            summary = run_classification(tree, config=quiet_config())

        assert summary.total_files == 7
        assert summary.moved_files == 6
        assert [f.path.name for f in summary.failures] == ["cat.jpg"]
        assert (tree / "photos" / "cat.jpg").exists()
        assert summary.success_rate == pytest.approx(6 / 7)

    def test_dry_run_leaves_tree_untouched(self, tree):
        before = _snapshot(tree)

        summary = run_classification(tree, config=quiet_config(), dry_run=True)

        assert _snapshot(tree) == before
        assert summary.dry_run
        assert summary.moved_files == 7
        assert summary.removed_directories == 0

    def test_prune_can_be_disabled(self, tree):
        config = quiet_config()
        config.prune = PruneConfig(enabled=False)

        summary = run_classification(tree, config=config)

        assert (tree / "photos" / "2023").is_dir()
        assert summary.removed_directories == 0

    def test_default_config_leaves_home_directory_alone(self, tree, tmp_path):
        home = tmp_path / "home"
        home.mkdir()

        with patch.object(Path, "home", return_value=home):
            summary = run_classification(tree)

        assert summary.total_files == 7
        assert list(home.iterdir()) == []

    def test_outcome_callback_is_forwarded(self, tree):
        seen = []

        runner = ClassificationRunner(quiet_config(), outcome_callback=seen.append)
        runner.run(tree)

        assert len(seen) == 7

    def test_timeout_carries_partial_summary_and_skips_pruning(self, tmp_path):
        root = tmp_path.resolve()
        make_tree(root, ["nested/slow.slow", "fast.txt"])
        release = threading.Event()
        real_move = relocator.move_file

        def blocking_move(source, destination):
            if source.suffix == ".slow":
                release.wait(5)
            real_move(source, destination)

        try:
            with patch.object(relocator, "move_file", side_effect=blocking_move):
                with pytest.raises(RelocationTimeoutError) as excinfo:
                    run_classification(root, config=quiet_config(max_workers=2, timeout_seconds=0.2))
        finally:
            release.set()

        summary = excinfo.value.summary
        assert summary is not None
        assert not summary.completed
        assert summary.total_files == 2
        assert summary.incomplete_categories == ["slow"]
        assert summary.removed_directories == 0
        assert (root / "txt" / "fast.txt").exists()
        assert (root / "nested").is_dir()
