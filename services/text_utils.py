from __future__ import annotations

import re
import unicodedata
from typing import Any, Optional


_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def slugify(text: Optional[str]) -> str:
    """Lowercase, ASCII-fold, and hyphenate a display name into a slug."""
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKD", str(text))
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = re.sub(r"[\s_]+", "-", ascii_text.strip())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def sanitize_text(value: Any) -> str:
    """Strip tags and control characters, collapse whitespace."""
    if value is None:
        return ""
    text = re.sub(r"<[^>]*>", "", str(value))
    text = "".join(ch for ch in text if ch in "\t\n" or unicodedata.category(ch)[0] != "C")
    return " ".join(text.split())


def sanitize_hex_color(value: Any, default: str) -> str:
    if not value:
        return default
    text = str(value).strip()
    return text if _HEX_COLOR_RE.match(text) else default


def normalize_email(value: Any) -> str:
    if not value:
        return ""
    return str(value).strip().lower()
