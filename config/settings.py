from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # Tenants (storage partitions)
    directory_tenant_id: int
    bookmarks_tenant_id: int
    default_tenant_id: int

    # Paging
    directory_page_size: int
    bookmarks_page_size: int

    # Colleague matching
    matcher_candidate_limit: int
    matcher_max_results: int

    # User the facade acts for when a call omits user_id (0 = nobody)
    acting_user_id: int = 0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    candidate_limit = _int_env("MATCHER_CANDIDATE_LIMIT", "50")
    if candidate_limit <= 0:
        raise RuntimeError("MATCHER_CANDIDATE_LIMIT must be positive")
    return Settings(
        db_path=os.getenv("DB_PATH", "intranet.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        directory_tenant_id=_int_env("DIRECTORY_TENANT_ID", "1"),
        bookmarks_tenant_id=_int_env("BOOKMARKS_TENANT_ID", "1"),
        default_tenant_id=_int_env("DEFAULT_TENANT_ID", "1"),
        directory_page_size=_int_env("DIRECTORY_PAGE_SIZE", "20"),
        bookmarks_page_size=_int_env("BOOKMARKS_PAGE_SIZE", "20"),
        matcher_candidate_limit=candidate_limit,
        matcher_max_results=_int_env("MATCHER_MAX_RESULTS", "10"),
        acting_user_id=_int_env("ACTING_USER_ID", "0"),
    )
