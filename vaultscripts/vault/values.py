"""Decoding of raw frontmatter into tagged values.

YAML gives us strings, booleans, numbers, dates and lists. Link-shaped
strings and date-like values are decoded here, once, so the validator can
dispatch on types instead of probing strings.
"""

import re
from datetime import date, datetime, timezone
from typing import Any

from ..models import ENTRIES_DIR, DateStamp, Link
from .parser import parse_wikilink, target_to_path

ISO_DATE_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?"
)


def decode_value(value: Any) -> Any:
    """Decode a single frontmatter value (recursively for lists)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, datetime):
        return DateStamp(value.isoformat())
    if isinstance(value, date):
        return DateStamp(value.isoformat())
    if isinstance(value, str):
        parsed = parse_wikilink(value) if value.lstrip().startswith("[[") else None
        if parsed is not None:
            target, subpath, display = parsed
            return Link(path=target_to_path(target), display=display, subpath=subpath)
        if ISO_DATE_PATTERN.fullmatch(value.strip()) and is_iso_datetime(value.strip()):
            return DateStamp(value.strip())
        return value
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): decode_value(v) for k, v in value.items()}
    return value


def decode_frontmatter(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """Decode a whole frontmatter mapping; keys are kept as strings."""
    if not metadata:
        return {}
    return {str(key): decode_value(value) for key, value in metadata.items()}


def encode_value(value: Any) -> Any:
    """Inverse of decode_value, for writing frontmatter back out."""
    if isinstance(value, Link):
        if value.path.startswith(f"{ENTRIES_DIR}/") and value.path.count("/") == 1:
            target = value.name
        else:
            target = value.path.removesuffix(".md")
        subpath = f"#{value.subpath}" if value.subpath else ""
        display = f"|{value.display}" if value.display else ""
        return f"[[{target}{subpath}{display}]]"
    if isinstance(value, DateStamp):
        return value.iso
    if isinstance(value, list):
        return [encode_value(v) for v in value]
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    return value


def is_iso_datetime(value: str) -> bool:
    """Check that `value` is a well-formed ISO 8601 date or datetime."""
    text = value.strip()
    if not ISO_DATE_PATTERN.fullmatch(text):
        return False
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def iso_sort_key(value: str) -> datetime:
    """Parse an ISO date or datetime for ordering; naive values are read as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
