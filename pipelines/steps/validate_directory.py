from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pipelines.runner import RunContext
from services.hydrator import MAPPING_FIELDS, STRING_FIELDS, decode_list, decode_mapping, decode_user_id
from services.text_utils import normalize_email, sanitize_text


logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _skills(value: Any) -> List[str]:
    # Spreadsheet exports carry skills as "a, b, c"
    if isinstance(value, str) and not value.strip().startswith("["):
        value = value.split(",")
    items = value if isinstance(value, list) else decode_list(value)
    return [t for t in (sanitize_text(s) for s in items) if t]


class ValidateDirectory:
    """Light cleaning of import rows; rows without a usable id are dropped."""

    def run(self, ctx: RunContext) -> RunContext:
        stats: Dict[str, int] = {"people_invalid": 0, "posts_invalid": 0, "sites_invalid": 0}

        people: List[Dict[str, Any]] = []
        for raw in ctx.people or []:
            if not isinstance(raw, dict):
                stats["people_invalid"] += 1
                continue
            user_id = _as_int(raw.get("id") or raw.get("user_id"))
            login = sanitize_text(raw.get("user_login") or raw.get("login"))
            if not user_id:
                stats["people_invalid"] += 1
                continue
            row = dict(raw)
            row["id"] = user_id
            row["user_login"] = login or f"user-{user_id}"
            row["email"] = normalize_email(raw.get("email") or raw.get("user_email"))
            for name in ["display_name", "first_name", "last_name", "job_title", "avatar_url", *STRING_FIELDS]:
                row[name] = sanitize_text(raw.get(name))
            for name in MAPPING_FIELDS:
                row[name] = decode_mapping(raw.get(name))
            if not row["display_name"]:
                row["display_name"] = " ".join(p for p in (row["first_name"], row["last_name"]) if p) or row["user_login"]
            row["reports_to"] = decode_user_id(raw.get("reports_to"))
            row["skills"] = _skills(raw.get("skills"))
            people.append(row)

        posts: List[Dict[str, Any]] = []
        for raw in ctx.posts or []:
            if not isinstance(raw, dict) or not _as_int(raw.get("id")) or not _as_int(raw.get("tenant_id")):
                stats["posts_invalid"] += 1
                continue
            row = dict(raw)
            row["id"] = _as_int(raw.get("id"))
            row["tenant_id"] = _as_int(raw.get("tenant_id"))
            row["title"] = sanitize_text(raw.get("title"))
            posts.append(row)

        sites: List[Dict[str, Any]] = []
        for raw in ctx.sites or []:
            if not isinstance(raw, dict) or not _as_int(raw.get("id")):
                stats["sites_invalid"] += 1
                continue
            sites.append({"id": _as_int(raw.get("id")), "name": sanitize_text(raw.get("name"))})

        ctx.people, ctx.posts, ctx.sites = people, posts, sites
        ctx.meta["validation_stats"] = stats
        if any(stats.values()):
            logger.warning("Dropped invalid import rows: %s", stats, extra={"op": "import.validate", "status": "partial"})
        return ctx
