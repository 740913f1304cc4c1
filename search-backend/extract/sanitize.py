from __future__ import annotations

import re

COORDINATE_INPUT_MAX_LENGTH = 200
SEARCH_TERM_MAX_LENGTH = 256
MIN_SEARCH_LENGTH = 3

_TAG_RE = re.compile(r"<[^>]*>")
_ANGLE_RE = re.compile(r"[<>]")
_WS_CONTROL_RE = re.compile(r"[\t\n\r\f\v]")
_WS_RE = re.compile(r"\s+")


def _is_printable_latin1(ch: str) -> bool:
    code = ord(ch)
    return 32 <= code <= 126 or 160 <= code <= 255


def clean_coordinate_text(value: str) -> str:
    """Strip tags and non-printable characters and collapse whitespace, without truncating.

    The parser uses this directly so it can report over-long input instead of
    silently cutting it.
    """
    if not value:
        return ""
    text = _TAG_RE.sub("", value)
    text = _ANGLE_RE.sub("", text)
    text = _WS_CONTROL_RE.sub(" ", text)
    text = "".join(ch for ch in text if _is_printable_latin1(ch))
    return _WS_RE.sub(" ", text).strip()


def sanitize(raw: str, max_length: int = COORDINATE_INPUT_MAX_LENGTH) -> str:
    """Sanitize free-text coordinate input. Idempotent."""
    # strip again: truncation can leave a trailing space
    return clean_coordinate_text(raw)[:max_length].strip()


def sanitize_search_term(value: str) -> str:
    """Sanitizer for the general search box; keeps any non-control character."""
    if not value:
        return ""
    text = _WS_CONTROL_RE.sub(" ", value)
    text = "".join(ch for ch in text if ord(ch) >= 32 and ord(ch) != 127)
    text = _ANGLE_RE.sub("", text)
    text = _WS_RE.sub(" ", text).strip()
    return text[:SEARCH_TERM_MAX_LENGTH].strip()


def is_suggestable_term(term: str) -> bool:
    return len(sanitize_search_term(term)) >= MIN_SEARCH_LENGTH


__all__ = [
    "COORDINATE_INPUT_MAX_LENGTH",
    "SEARCH_TERM_MAX_LENGTH",
    "clean_coordinate_text",
    "sanitize",
    "sanitize_search_term",
    "is_suggestable_term",
]
