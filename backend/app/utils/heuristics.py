"""
Construction heuristics - substring detectors for dimensions and cost data.

Both checks are plain substring tests with no word-boundary handling, so
"information" counts as a dimension line because it contains "in". Downstream
consumers rely on this behaviour; do not tighten it here.
"""
from typing import Iterable, List

# Case-sensitive unit markers for dimension lines (inches, feet, mm, cm)
DIMENSION_MARKERS = ('"', "'", "mm", "cm", "ft", "in")

# Matched against the lower-cased cell value
CONSTRUCTION_KEYWORDS = ("quantity", "cost", "price", "total", "sq ft", "linear ft")


def has_dimension(text: str) -> bool:
    """True if the line contains any dimension unit marker."""
    return any(marker in text for marker in DIMENSION_MARKERS)


def find_dimension_lines(lines: Iterable[str]) -> List[str]:
    """Lines containing a dimension marker, in their original order."""
    return [line for line in lines if has_dimension(line)]


def has_construction_keyword(value: str) -> bool:
    """True if the value mentions quantity/cost vocabulary (case-insensitive)."""
    lowered = value.lower()
    return any(keyword in lowered for keyword in CONSTRUCTION_KEYWORDS)
