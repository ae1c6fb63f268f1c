from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create tenant, account, attribute and content tables (idempotent)."""
    cur = conn.cursor()

    # Tenants (storage partitions)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS sites (\n"
            "  id INTEGER PRIMARY KEY,\n"
            "  name TEXT NOT NULL DEFAULT ''\n"
            ")"
        )
    )

    # Accounts are network-wide; a profile exists whenever an account row does
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS users (\n"
            "  id INTEGER PRIMARY KEY,\n"
            "  user_login TEXT NOT NULL UNIQUE,\n"
            "  user_email TEXT,\n"
            "  user_nicename TEXT,\n"
            "  display_name TEXT,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  job_title TEXT,\n"
            "  avatar_url TEXT,\n"
            "  role TEXT NOT NULL DEFAULT 'employee',\n"
            "  registered_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_users_first_name ON users(first_name);")

    # Attribute store addressable by (tenant, user, key)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS usermeta (\n"
            "  tenant_id INTEGER NOT NULL,\n"
            "  user_id INTEGER NOT NULL,\n"
            "  meta_key TEXT NOT NULL,\n"
            "  meta_value TEXT,\n"
            "  PRIMARY KEY (tenant_id, user_id, meta_key)\n"
            ")"
        )
    )
    # No index on meta_value: reverse lookups (direct reports) scan by key
    cur.execute("CREATE INDEX IF NOT EXISTS idx_usermeta_key ON usermeta(tenant_id, meta_key);")

    # Content items that bookmarks point at
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS posts (\n"
            "  tenant_id INTEGER NOT NULL,\n"
            "  id INTEGER NOT NULL,\n"
            "  post_type TEXT NOT NULL DEFAULT 'post',\n"
            "  title TEXT NOT NULL DEFAULT '',\n"
            "  url TEXT,\n"
            "  excerpt TEXT,\n"
            "  thumbnail_url TEXT,\n"
            "  status TEXT NOT NULL DEFAULT 'publish',\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  PRIMARY KEY (tenant_id, id)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_posts_status ON posts(tenant_id, status);")

    conn.commit()
