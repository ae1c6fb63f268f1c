from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y",
)


def now_timestamp() -> str:
    """Current UTC time in the storage format ('YYYY-MM-DD HH:MM:SS')."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse stored timestamps leniently.

    Accepts ISO 8601 (with or without offset) and a few legacy formats.
    Aware values are converted to naive UTC so results stay comparable.
    Returns None for unparsable inputs.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        parsed = None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in _FALLBACK_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if parsed is None:
            return None
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (OverflowError, ValueError):
            # Offsets that push the value outside the datetime range
            return None
    return parsed


def timestamp_sort_key(value: Any) -> datetime:
    # Unparsable timestamps sort as the oldest possible value
    return parse_timestamp(value) or datetime.min
