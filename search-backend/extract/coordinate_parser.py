from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from app.errors import (
    ERROR_EMPTY,
    ERROR_NOT_SWEREF,
    ERROR_OUT_OF_RANGE,
    ERROR_PARSE,
    ERROR_TOO_LONG,
)
from extract.axis_order import (
    MAX_EASTING,
    MAX_NORTHING,
    MIN_EASTING,
    MIN_NORTHING,
    is_likely_geographic,
    resolve_axis_order,
)
from extract.numeric import parse_numeric
from extract.sanitize import COORDINATE_INPUT_MAX_LENGTH, clean_coordinate_text


class InputFormat(str, Enum):
    SPACE_SEPARATED = "space"
    COMMA_SEPARATED = "comma"
    LABELED = "labeled"
    UNKNOWN = "unknown"


NUMBER_CAPTURE_RE = re.compile(r"[-+]?\d[\d\s.,]*")
# Label must not be the tail of a word ("SWEREF", "Sven")
LABELED_VALUE_RE = re.compile(r"(?<![A-Za-z])([EN])\s*[:=]?\s*([-+]?\d[\d\s.,]*)", re.IGNORECASE)
_COMMA_RE = re.compile(r"\d\s*,\s*\d")
_SPACE_RE = re.compile(r"\d\s+\d")
_LIST_SPLIT_RE = re.compile(r"\s*;\s*|,\s+")
_BARE_SPLIT_RE = re.compile(r"[,;]")


@dataclass
class CoordinateParseResult:
    success: bool
    easting: Optional[float] = None
    northing: Optional[float] = None
    format: Optional[InputFormat] = None
    sanitized: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def fail(cls, error: str) -> "CoordinateParseResult":
        return cls(success=False, error=error)


def _clean_capture(raw: str) -> str:
    # Captures are greedy and swallow list punctuation ("500000, N=...")
    return raw.strip().rstrip(",;. ").strip()


def detect_input_format(value: str) -> InputFormat:
    if LABELED_VALUE_RE.search(value):
        return InputFormat.LABELED
    if _COMMA_RE.search(value):
        return InputFormat.COMMA_SEPARATED
    if _SPACE_RE.search(value):
        return InputFormat.SPACE_SEPARATED
    return InputFormat.UNKNOWN


def parse_labeled(value: str) -> Tuple[Optional[float], Optional[float]]:
    """Read E/N labelled values; the last parseable occurrence of a label wins."""
    easting: Optional[float] = None
    northing: Optional[float] = None
    for m in LABELED_VALUE_RE.finditer(value):
        number = parse_numeric(_clean_capture(m.group(2)))
        if number is None:
            continue
        if m.group(1).upper() == "E":
            easting = number
        else:
            northing = number
    return easting, northing


def extract_numbers(value: str) -> List[str]:
    """Split text into numeric candidate strings, loosest strategy last."""
    numbers = [c for c in (_clean_capture(m) for m in NUMBER_CAPTURE_RE.findall(value)) if c]
    if len(numbers) >= 2:
        return numbers

    tokens = [t for t in (_clean_capture(p) for p in _LIST_SPLIT_RE.split(value)) if t]
    if len(tokens) >= 2:
        return tokens

    tokens = [t.strip(",;") for t in value.split()]
    tokens = [t for t in tokens if t]
    if len(tokens) >= 2:
        return tokens

    tokens = [t.strip() for t in _BARE_SPLIT_RE.split(value)]
    tokens = [t for t in tokens if t]
    if len(tokens) >= 2:
        return tokens
    return numbers


def normalize_coordinates(easting: float, northing: float) -> CoordinateParseResult:
    """Apply the final plausibility checks to an already numeric pair."""
    if is_likely_geographic(easting, northing):
        return CoordinateParseResult.fail(ERROR_NOT_SWEREF)
    if not (MIN_EASTING <= easting <= MAX_EASTING and MIN_NORTHING <= northing <= MAX_NORTHING):
        return CoordinateParseResult.fail(ERROR_OUT_OF_RANGE)
    return CoordinateParseResult(success=True, easting=easting, northing=northing, format=InputFormat.UNKNOWN)


def _build(
    easting: float,
    northing: float,
    fmt: InputFormat,
    sanitized: str,
    warning: Optional[str] = None,
) -> CoordinateParseResult:
    checked = normalize_coordinates(easting, northing)
    if not checked.success:
        return checked
    return CoordinateParseResult(
        success=True,
        easting=easting,
        northing=northing,
        format=fmt,
        sanitized=sanitized,
        warning=warning,
    )


def parse(text: str) -> CoordinateParseResult:
    """Parse free text into an (easting, northing) pair in SWEREF99 ranges.

    Never raises; failures carry an error key.
    """
    sanitized = clean_coordinate_text(text or "")
    if not sanitized:
        return CoordinateParseResult.fail(ERROR_EMPTY)
    if len(sanitized) > COORDINATE_INPUT_MAX_LENGTH:
        return CoordinateParseResult.fail(ERROR_TOO_LONG)

    fmt = detect_input_format(sanitized)

    if fmt == InputFormat.LABELED:
        easting, northing = parse_labeled(sanitized)
        if easting is not None and northing is not None:
            return _build(easting, northing, InputFormat.LABELED, sanitized)

    numbers = extract_numbers(sanitized)
    if len(numbers) != 2:
        return CoordinateParseResult.fail(ERROR_PARSE)

    first, second = (parse_numeric(n) for n in numbers)
    if first is None or second is None:
        return CoordinateParseResult.fail(ERROR_PARSE)

    order = resolve_axis_order(first, second)
    if order is None:
        if is_likely_geographic(first, second):
            return CoordinateParseResult.fail(ERROR_NOT_SWEREF)
        return CoordinateParseResult.fail(ERROR_PARSE)

    if fmt == InputFormat.UNKNOWN:
        fmt = InputFormat.COMMA_SEPARATED if "," in sanitized else InputFormat.SPACE_SEPARATED
    return _build(order.easting, order.northing, fmt, sanitized, order.warning)


__all__ = [
    "InputFormat",
    "CoordinateParseResult",
    "NUMBER_CAPTURE_RE",
    "detect_input_format",
    "parse_labeled",
    "extract_numbers",
    "normalize_coordinates",
    "parse",
]
