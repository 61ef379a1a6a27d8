"""Groups scanned files into per-category buckets."""

from pathlib import Path
from typing import Dict, Iterable, List

from .models import normalize_category


def classify(files: Iterable[Path]) -> Dict[str, List[Path]]:
    """
    Group file paths by their lower-cased suffix category.

    Each path lands in exactly one bucket; within a bucket, paths keep the
    order they were given in. Callers must not rely on the order of the
    categories themselves.

    Args:
        files: Paths produced by the scanner

    Returns:
        Mapping of category to the files belonging to it
    """
    buckets: Dict[str, List[Path]] = {}
    for file_path in files:
        file_path = Path(file_path)
        buckets.setdefault(normalize_category(file_path.name), []).append(file_path)
    return buckets
