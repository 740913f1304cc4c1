from __future__ import annotations

import math
import re
from typing import Optional

MAX_RAW_DIGITS = 18  # overflow guard on the untouched input
MAX_DIGITS = 15  # float precision guard on the normalized number
PRECISION_LIMITER = 1e-3
MAX_MAGNITUDE = 1e8

_DIGIT_RE = re.compile(r"[0-9]")
_STRAY_RE = re.compile(r"[^0-9\s,.+-]")
_WS_RE = re.compile(r"\s+")
_SEPARATOR_RUN_RE = re.compile(r"[.,]{3,}")
# "123 456", "6 500 000,25"
_SPACE_GROUPED_RE = re.compile(r"^\d{1,3}(?: \d{3})+(?:[.,]\d+)?$")


def _strip_separators(s: str) -> str:
    return s.replace(".", "").replace(",", "")


def normalize_number(raw: Optional[str]) -> Optional[str]:
    """Turn a locale-ambiguous numeric string into a canonical one.

    Returns e.g. "6500000", "-12.5" or "0", or None when the string is not a
    plausible number. A single '.' or ',' is a decimal point. With several
    separators the last one is the decimal point, unless exactly three digits
    follow it and the same glyph appeared earlier ("1.234.567"), in which case
    every separator is a thousands separator.
    """
    if not raw:
        return None
    if len(_DIGIT_RE.findall(raw)) > MAX_RAW_DIGITS:
        return None

    text = _STRAY_RE.sub("", raw)
    text = _WS_RE.sub(" ", text).strip()
    if not text:
        return None

    sign = ""
    if text[0] in "+-":
        sign = "-" if text[0] == "-" else ""
        text = text[1:].lstrip()
    if not text or "+" in text or "-" in text:
        return None

    if _SEPARATOR_RUN_RE.search(text):
        return None
    if text[0] in ".," or text[-1] in ".,":
        return None

    if " " in text:
        if not _SPACE_GROUPED_RE.match(text):
            return None
        text = text.replace(" ", "")

    positions = [i for i, ch in enumerate(text) if ch in ".,"]
    if not positions:
        integer, fraction = text, ""
    elif len(positions) == 1:
        idx = positions[0]
        integer, fraction = text[:idx], text[idx + 1:]
    else:
        last = positions[-1]
        integer, fraction = text[:last], text[last + 1:]
        if len(fraction) == 3 and text[last] in integer:
            integer, fraction = _strip_separators(text), ""
        else:
            integer = _strip_separators(integer)

    integer = integer.lstrip("0") or "0"
    fraction = fraction.rstrip("0")
    if len(integer) + len(fraction) > MAX_DIGITS:
        return None

    canonical = f"{sign}{integer}.{fraction}" if fraction else f"{sign}{integer}"
    value = float(canonical)
    if not math.isfinite(value) or abs(value) > MAX_MAGNITUDE:
        return None
    if abs(value) < PRECISION_LIMITER:
        return "0"
    return canonical


def parse_numeric(raw: Optional[str]) -> Optional[float]:
    normalized = normalize_number(raw)
    if normalized is None:
        return None
    return float(normalized)


__all__ = [
    "normalize_number",
    "parse_numeric",
    "PRECISION_LIMITER",
]
