"""Tests for grouping files into category buckets."""

from pathlib import Path

from file_classifier.core.classifier import classify


def test_groups_by_lower_cased_suffix():
    files = [Path("/r/a.txt"), Path("/r/b.TXT"), Path("/r/sub/c.pdf"), Path("/r/notes")]

    buckets = classify(files)

    assert buckets == {
        "txt": [Path("/r/a.txt"), Path("/r/b.TXT")],
        "pdf": [Path("/r/sub/c.pdf")],
        "unknown": [Path("/r/notes")],
    }


def test_every_file_lands_in_exactly_one_bucket():
    files = [Path(f"/r/dir{i % 3}/file{i}.{ext}") for i, ext in enumerate(["a", "B", "b", "c", "A", "x."])]

    buckets = classify(files)

    flattened = [path for bucket in buckets.values() for path in bucket]
    assert sorted(flattened) == sorted(files)
    assert len(flattened) == len(set(flattened))


def test_bucket_preserves_input_order():
    files = [Path("/r/z.txt"), Path("/r/a.txt"), Path("/r/m.TXT")]

    assert classify(files)["txt"] == files


def test_deterministic_membership():
    files = [Path("/r/a.jpg"), Path("/r/b.png"), Path("/r/c.JPG")]

    assert classify(files) == classify(list(files))


def test_classifies_on_final_segment_only():
    buckets = classify([Path("/r/folder.d/readme")])

    assert buckets == {"unknown": [Path("/r/folder.d/readme")]}


def test_accepts_strings_and_empty_input():
    assert classify([]) == {}
    assert classify(["/r/a.csv"]) == {"csv": [Path("/r/a.csv")]}
