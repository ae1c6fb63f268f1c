from __future__ import annotations

import sqlite3
from typing import List, Optional


class AttributesRepo:
    """Per-tenant key/value attributes of a user account (usermeta)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, tenant_id: int, user_id: int, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT meta_value FROM usermeta WHERE tenant_id = ? AND user_id = ? AND meta_key = ?",
            (tenant_id, user_id, key),
        )
        row = cur.fetchone()
        return row[0] if row else None

    def set(self, tenant_id: int, user_id: int, key: str, value: Optional[str]) -> None:
        sql = (
            "INSERT INTO usermeta (tenant_id, user_id, meta_key, meta_value) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(tenant_id, user_id, meta_key) DO UPDATE SET meta_value = excluded.meta_value;"
        )
        self.conn.execute(sql, (tenant_id, user_id, key, value))
        self.conn.commit()

    def distinct_values(self, tenant_id: int, key: str) -> List[str]:
        """Distinct non-empty values of one key across all users (full scan)."""
        sql = (
            "SELECT DISTINCT meta_value FROM usermeta "
            "WHERE tenant_id = ? AND meta_key = ? AND meta_value IS NOT NULL AND meta_value != '' "
            "ORDER BY meta_value ASC;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (tenant_id, key))
        return [row[0] for row in cur.fetchall()]

    def user_ids_with_value(self, tenant_id: int, key: str, value: str) -> List[int]:
        """Users whose attribute equals value; scans every row of the key."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT user_id FROM usermeta WHERE tenant_id = ? AND meta_key = ? AND meta_value = ?",
            (tenant_id, key, value),
        )
        return [int(row[0]) for row in cur.fetchall()]
