"""Cross-platform path handling tests for the File Classifier."""

import os
import sys
import shutil
import tempfile
from pathlib import Path

import pytest

from conftest import make_tree, quiet_config
from file_classifier.core.models import category_of
from file_classifier.core.orchestrator import run_classification
from file_classifier.core.scanner import TreeScanner


class TestCrossPlatformPaths:
    """Test path handling across different platforms."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()

    def teardown_method(self):
        """Clean up test environment."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_special_characters_in_names(self):
        """Test names with spaces, unicode and punctuation."""
        names = [
            "file with spaces.txt",
            "file-with-dashes.txt",
            "file_with_underscores.txt",
            "file.with.dots.txt",
            "файл.txt",
            "文件.txt",
            "café résumé.pdf",
            "ファイル.jpg",
        ]
        created = []
        for name in names:
            try:
                created.extend(make_tree(self.temp_dir, [name]))
            except (OSError, UnicodeEncodeError):
                # Some filesystems reject certain characters
                continue

        summary = run_classification(self.temp_dir, config=quiet_config())

        assert summary.total_files == len(created)
        assert summary.failures == []
        for path in created:
            assert (self.temp_dir / category_of(path.name).lower() / path.name).exists()

    def test_long_paths(self):
        """Test deep paths with long component names."""
        long_dir = self.temp_dir
        for i in range(8):
            long_dir = long_dir / f"very_long_directory_name_{i}_{'x' * 20}"
        try:
            long_dir.mkdir(parents=True)
            (long_dir / "deep_file.txt").write_text("deep")
        except OSError:
            pytest.skip("filesystem does not support paths this long")

        summary = run_classification(self.temp_dir, config=quiet_config())

        assert summary.total_files == 1
        assert (self.temp_dir / "txt" / "deep_file.txt").read_text() == "deep"
        assert [p.name for p in self.temp_dir.iterdir()] == ["txt"]

    def test_suffix_case_is_folded_on_every_platform(self):
        """Test that suffixes differing only in case share one directory."""
        make_tree(self.temp_dir, ["upper/IMG.JPG", "lower/img2.jpg", "mixed/Img3.Jpg"])

        summary = run_classification(self.temp_dir, config=quiet_config())

        assert summary.category_counts == {"jpg": 3}
        assert sorted(p.name for p in (self.temp_dir / "jpg").iterdir()) == ["IMG.JPG", "Img3.Jpg", "img2.jpg"]

    def test_native_path_strings(self):
        """Test that roots given as native strings are accepted."""
        make_tree(self.temp_dir, ["sub/a.txt"])

        result = TreeScanner().scan(str(self.temp_dir) + os.sep)

        assert result.total_files == 1
        assert result.root == self.temp_dir

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permission bits")
    def test_unreadable_directory_on_posix(self):
        """Test that a directory without read permission is skipped, not fatal."""
        make_tree(self.temp_dir, ["open/a.txt", "closed/b.txt"])
        closed = self.temp_dir / "closed"
        closed.chmod(0o000)
        try:
            result = TreeScanner().scan(self.temp_dir)
        finally:
            closed.chmod(0o755)

        assert [p.name for p in result.files] == ["a.txt"]
        assert len(result.errors) == 1
