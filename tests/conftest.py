from __future__ import annotations

import os
import sqlite3
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.bookmarks'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


@pytest.fixture(autouse=True)
def _fresh_settings():
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def conn(tmp_path):
    from db import schema
    db = sqlite3.connect(str(tmp_path / "t.db"))
    schema.bootstrap(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def add_person(conn):
    """Create an account plus intranet profile; returns the user id."""
    from db.repos.accounts_repo import AccountsRepo
    from db.repos.attributes_repo import AttributesRepo
    from models.profile_record import ProfileRecord
    from services.hydrator import ProfileHydrator
    from services.profile_writer import ProfileWriter

    accounts = AccountsRepo(conn)
    attributes = AttributesRepo(conn)
    writer = ProfileWriter(ProfileHydrator(accounts, attributes, 1), attributes)

    def _add(user_id, first_name, last_name="", role=None, **profile):
        accounts.upsert_account(
            user_id=user_id,
            user_login=f"{first_name.lower()}{user_id}",
            user_email=f"{first_name.lower()}@example.com",
            display_name=f"{first_name} {last_name}".strip(),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        writer.save(ProfileRecord(user_id=user_id, **profile))
        return user_id

    return _add


@pytest.fixture
def add_post(conn):
    from db.repos.posts_repo import PostsRepo

    posts = PostsRepo(conn)

    def _add(tenant_id, post_id, title="Post", status="publish", post_type="post"):
        posts.upsert_post(tenant_id, post_id, title, post_type=post_type, url=f"https://site{tenant_id}.example/p/{post_id}", status=status)
        return post_id

    return _add
