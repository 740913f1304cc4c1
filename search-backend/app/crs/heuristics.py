from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from extract.axis_order import is_likely_geographic, resolve_axis_order
from extract.coordinate_parser import extract_numbers
from extract.numeric import parse_numeric
from extract.sanitize import sanitize

# -----------------------------
# Token patterns
# -----------------------------

MIN_COORDINATE_INPUT_LENGTH = 5

# Swedish street words, postal codes (NNN NN), major cities
ADDRESS_PATTERNS: List[re.Pattern] = [
    re.compile(r"\b(gata|gatan|väg|vägen|plan|torg|torget|allé|allén)\b", re.IGNORECASE),
    re.compile(r"\b\d{3}\s?\d{2}\b"),
    re.compile(r"\b(stockholm|göteborg|malmö|uppsala|linköping)\b", re.IGNORECASE),
]

_ALPHA_RE = re.compile(r"[A-Za-z]+")
_AXIS_LETTERS_RE = re.compile(r"^[ENen]+$")


@dataclass
class InputClassification:
    is_coordinate: bool
    confidence: str  # 'high' | 'medium' | 'low'
    reason: str


def has_unsupported_letters(value: str) -> bool:
    """True if any run of ASCII letters is something other than axis labels (E/N)."""
    return any(not _AXIS_LETTERS_RE.match(seg) for seg in _ALPHA_RE.findall(value))


def looks_like_address(value: str) -> bool:
    return any(p.search(value) for p in ADDRESS_PATTERNS)


def classify_input(text: Optional[str]) -> InputClassification:
    """Cheap pre-check deciding whether free text should go to the coordinate search.

    Ordered: length, letters, number count, number validity, address patterns,
    then SWEREF 99 / geographic ranges.
    """
    cleaned = sanitize(text or "")
    if len(cleaned) < MIN_COORDINATE_INPUT_LENGTH:
        return InputClassification(False, "high", "input_too_short")

    if has_unsupported_letters(cleaned):
        return InputClassification(False, "high", "unsupported_characters")

    numbers = extract_numbers(cleaned)
    if len(numbers) != 2:
        return InputClassification(False, "medium" if len(numbers) > 2 else "high", "not_two_numbers")

    first, second = (parse_numeric(n) for n in numbers)
    if first is None or second is None:
        return InputClassification(False, "high", "invalid_numbers")

    if looks_like_address(cleaned):
        return InputClassification(False, "high", "address_pattern_detected")

    order = resolve_axis_order(first, second)
    if order is not None:
        return InputClassification(True, "medium" if order.warning else "high", "sweref99_range")

    if is_likely_geographic(first, second):
        return InputClassification(True, "medium", "wgs84_range")

    return InputClassification(False, "high", "out_of_range")


__all__ = [
    "ADDRESS_PATTERNS",
    "InputClassification",
    "classify_input",
    "has_unsupported_letters",
    "looks_like_address",
]
