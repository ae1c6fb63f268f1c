from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional


POST_COLUMNS: List[str] = [
    "tenant_id",
    "id",
    "post_type",
    "title",
    "url",
    "excerpt",
    "thumbnail_url",
    "status",
    "created_at",
]


class PostsRepo:
    """Content items and the tenants (sites) that own them."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get_post(self, tenant_id: int, post_id: int) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(
            f"SELECT {', '.join(POST_COLUMNS)} FROM posts WHERE tenant_id = ? AND id = ?",
            (tenant_id, post_id),
        )
        row = cur.fetchone()
        if not row:
            return None
        return {key: row[idx] for idx, key in enumerate(POST_COLUMNS)}

    def upsert_post(
        self,
        tenant_id: int,
        post_id: int,
        title: str,
        post_type: Optional[str] = None,
        url: Optional[str] = None,
        excerpt: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
        status: Optional[str] = None,
    ) -> int:
        sql = (
            "INSERT INTO posts (tenant_id, id, post_type, title, url, excerpt, thumbnail_url, status) "
            "VALUES (?, ?, COALESCE(?, 'post'), ?, ?, ?, ?, COALESCE(?, 'publish')) "
            "ON CONFLICT(tenant_id, id) DO UPDATE SET "
            " post_type = COALESCE(?, posts.post_type), "
            " title = excluded.title, "
            " url = COALESCE(excluded.url, posts.url), "
            " excerpt = COALESCE(excluded.excerpt, posts.excerpt), "
            " thumbnail_url = COALESCE(excluded.thumbnail_url, posts.thumbnail_url), "
            " status = COALESCE(?, posts.status);"
        )
        self.conn.execute(sql, (
            tenant_id, post_id, post_type, title, url, excerpt, thumbnail_url, status, post_type, status
        ))
        self.conn.commit()
        return int(post_id)

    def set_status(self, tenant_id: int, post_id: int, status: str) -> None:
        self.conn.execute("UPDATE posts SET status = ? WHERE tenant_id = ? AND id = ?", (status, tenant_id, post_id))
        self.conn.commit()

    def delete_post(self, tenant_id: int, post_id: int) -> None:
        self.conn.execute("DELETE FROM posts WHERE tenant_id = ? AND id = ?", (tenant_id, post_id))
        self.conn.commit()

    def upsert_site(self, tenant_id: int, name: str) -> None:
        self.conn.execute(
            "INSERT INTO sites (id, name) VALUES (?, ?) ON CONFLICT(id) DO UPDATE SET name = excluded.name;",
            (tenant_id, name),
        )
        self.conn.commit()

    def get_site_name(self, tenant_id: int) -> str:
        cur = self.conn.cursor()
        cur.execute("SELECT name FROM sites WHERE id = ?", (tenant_id,))
        row = cur.fetchone()
        return row[0] if row and row[0] else ""
