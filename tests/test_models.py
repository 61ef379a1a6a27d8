"""Tests for category derivation and the core data models."""

import threading
from pathlib import Path

import pytest

from file_classifier.core.models import (
    UNKNOWN_CATEGORY, CategoryCounter, MoveFailure, RelocationOutcome, RelocationReport,
    RunSummary, category_of, normalize_category
)


class TestCategoryOf:
    """Test suffix extraction from file names."""

    @pytest.mark.parametrize("name, expected", [
        ("report.txt", "txt"),
        ("report.TXT", "TXT"),
        ("archive.tar.gz", "gz"),
        (".bashrc", "bashrc"),
        ("file.with.dots.ai", "ai"),
        ("file with spaces.jpg", "jpg"),
    ])
    def test_suffix_after_last_dot(self, name, expected):
        assert category_of(name) == expected

    @pytest.mark.parametrize("name", ["notes", "trailing.", "...", ""])
    def test_missing_suffix_is_unknown(self, name):
        assert category_of(name) == UNKNOWN_CATEGORY

    def test_pure(self):
        assert category_of("Makefile") == category_of("Makefile")
        assert category_of("photo.JPEG") == category_of("photo.JPEG")

    def test_no_case_folding(self):
        """Case folding belongs to the classifier, not the resolver."""
        assert category_of("a.PDF") == "PDF"
        assert normalize_category("a.PDF") == "pdf"
        assert normalize_category("report.TXT") == normalize_category("report.txt")


class TestCategoryCounter:
    """Test the thread-safe category tally."""

    def test_increment_and_snapshot(self):
        counter = CategoryCounter()
        counter.increment("txt")
        counter.increment("txt")
        counter.increment("pdf", 3)

        snapshot = counter.snapshot()
        assert snapshot == {"txt": 2, "pdf": 3}

        # Snapshots are copies
        snapshot["txt"] = 100
        assert counter.snapshot()["txt"] == 2
        assert len(counter) == 2

    def test_merge(self):
        counter = CategoryCounter()
        counter.increment("txt")
        counter.merge({"txt": 4, "jpg": 1})
        assert counter.snapshot() == {"txt": 5, "jpg": 1}

    def test_concurrent_increments_are_not_lost(self):
        counter = CategoryCounter()

        def worker():
            for _ in range(1000):
                counter.increment("txt")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert counter.snapshot() == {"txt": 8000}


class TestReportsAndSummary:
    """Test outcome aggregation."""

    def test_report_merges_outcomes(self):
        report = RelocationReport()
        report.add("txt", [
            RelocationOutcome("txt", Path("/r/a.txt"), Path("/r/txt/a.txt")),
            RelocationOutcome("txt", Path("/r/b.txt"), Path("/r/txt/b.txt"), error="permission denied"),
        ])
        report.add("pdf", [RelocationOutcome("pdf", Path("/r/c.pdf"), Path("/r/pdf/c.pdf"))])

        assert report.moved_files == 2
        assert report.failures == [
            MoveFailure(Path("/r/b.txt"), Path("/r/txt/b.txt"), "permission denied")
        ]

    def test_summary_rates(self):
        summary = RunSummary(
            root=Path("/r"),
            total_files=4,
            elapsed_ms=12,
            category_counts={"txt": 3, "pdf": 1},
            failures=[MoveFailure(Path("/r/a.txt"), Path("/r/txt/a.txt"), "boom")],
            moved_files=3,
        )
        assert summary.failed_files == 1
        assert summary.success_rate == 0.75

    def test_empty_summary_success_rate(self):
        summary = RunSummary(Path("/r"), 0, 0, {}, [])
        assert summary.success_rate == 1.0
        assert summary.completed
