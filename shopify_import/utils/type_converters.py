"""
Type converters: shared value conversion utilities.
"""
import re
from typing import Any, Optional

_TAG_RE = re.compile(r"<[^>]*>")


def to_float(value: Any) -> Optional[float]:
    """Convert value to float, returning None if invalid or zero."""
    if value is None:
        return None
    try:
        val = float(value)
        return val if val != 0 else None
    except (ValueError, TypeError):
        return None


def to_int(value: Any) -> Optional[int]:
    """Convert value to int, returning None if invalid."""
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def strip_html(value: Optional[str], max_length: Optional[int] = None) -> str:
    """Drop HTML tags and optionally truncate."""
    if not value:
        return ""
    text = _TAG_RE.sub("", value)
    return text[:max_length] if max_length is not None else text
