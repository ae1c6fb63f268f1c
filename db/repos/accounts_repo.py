from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Sequence


ACCOUNT_COLUMNS: List[str] = [
    "id",
    "user_login",
    "user_email",
    "user_nicename",
    "display_name",
    "first_name",
    "last_name",
    "job_title",
    "avatar_url",
    "role",
    "registered_at",
]

# Columns covered by the native free-text search
SEARCH_COLUMNS: List[str] = ["user_login", "user_email", "user_nicename", "display_name"]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class AccountsRepo:
    """Network-wide user accounts plus filtered enumeration over their attributes."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _rows_to_dicts(self, rows: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
        return [{key: row[idx] for idx, key in enumerate(ACCOUNT_COLUMNS)} for row in rows]

    def get_account(self, user_id: int) -> Optional[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(f"SELECT {', '.join(ACCOUNT_COLUMNS)} FROM users WHERE id = ?", (user_id,))
        row = cur.fetchone()
        if not row:
            return None
        return self._rows_to_dicts([row])[0]

    def get_accounts(self, user_ids: Sequence[int], order_by: str = "display_name") -> List[Dict[str, Any]]:
        if not user_ids:
            return []
        if order_by not in ACCOUNT_COLUMNS:
            raise ValueError(f"Unknown order column: {order_by}")
        placeholders = ", ".join(["?" for _ in user_ids])
        sql = (
            f"SELECT {', '.join(ACCOUNT_COLUMNS)} FROM users WHERE id IN ({placeholders}) "
            f"ORDER BY COALESCE({order_by}, '') ASC, id ASC"
        )
        cur = self.conn.cursor()
        cur.execute(sql, tuple(user_ids))
        return self._rows_to_dicts(cur.fetchall())

    def upsert_account(
        self,
        user_id: int,
        user_login: str,
        user_email: Optional[str] = None,
        display_name: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        job_title: Optional[str] = None,
        avatar_url: Optional[str] = None,
        role: Optional[str] = None,
        user_nicename: Optional[str] = None,
    ) -> int:
        """Insert or update an account by id; returns the id."""
        sql = (
            "INSERT INTO users (id, user_login, user_email, user_nicename, display_name, first_name, last_name, job_title, avatar_url, role) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, COALESCE(?, 'employee')) "
            "ON CONFLICT(id) DO UPDATE SET "
            " user_login = excluded.user_login, "
            " user_email = COALESCE(excluded.user_email, users.user_email), "
            " user_nicename = COALESCE(excluded.user_nicename, users.user_nicename), "
            " display_name = COALESCE(excluded.display_name, users.display_name), "
            " first_name = COALESCE(excluded.first_name, users.first_name), "
            " last_name = COALESCE(excluded.last_name, users.last_name), "
            " job_title = COALESCE(excluded.job_title, users.job_title), "
            " avatar_url = COALESCE(excluded.avatar_url, users.avatar_url), "
            " role = COALESCE(?, users.role);"
        )
        self.conn.execute(sql, (
            user_id, user_login, user_email, user_nicename or user_login, display_name, first_name, last_name, job_title, avatar_url, role, role
        ))
        self.conn.commit()
        return int(user_id)

    def query_accounts(
        self,
        tenant_id: int,
        meta_equals: Optional[Dict[str, str]] = None,
        visibility_key: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = -1,
        offset: int = 0,
        exclude_roles: Sequence[str] = ("subscriber",),
    ) -> List[Dict[str, Any]]:
        """Filtered, first-name ordered, paginated enumeration of accounts.

        meta_equals: attribute key -> required value, read at tenant_id.
        visibility_key: when given, accounts whose attribute holds anything
        other than '1' or '' are excluded (a missing attribute means visible).
        limit: -1 means unlimited.
        """
        where: List[str] = []
        params: List[Any] = []
        if exclude_roles:
            where.append(f"u.role NOT IN ({', '.join(['?' for _ in exclude_roles])})")
            params.extend(exclude_roles)
        for key, value in (meta_equals or {}).items():
            where.append(
                "EXISTS (SELECT 1 FROM usermeta m WHERE m.tenant_id = ? AND m.user_id = u.id "
                "AND m.meta_key = ? AND m.meta_value = ?)"
            )
            params.extend([tenant_id, key, value])
        if visibility_key:
            where.append(
                "NOT EXISTS (SELECT 1 FROM usermeta v WHERE v.tenant_id = ? AND v.user_id = u.id "
                "AND v.meta_key = ? AND COALESCE(v.meta_value, '') NOT IN ('1', ''))"
            )
            params.extend([tenant_id, visibility_key])
        if search:
            pattern = f"%{_escape_like(search.strip('*'))}%"
            where.append("(" + " OR ".join([f"u.{col} LIKE ? ESCAPE '\\'" for col in SEARCH_COLUMNS]) + ")")
            params.extend([pattern for _ in SEARCH_COLUMNS])
        where_sql = (" WHERE " + " AND ".join(where)) if where else ""
        columns = ", ".join([f"u.{col}" for col in ACCOUNT_COLUMNS])
        sql = (
            f"SELECT {columns} FROM users u{where_sql} "
            "ORDER BY COALESCE(u.first_name, '') ASC, u.id ASC LIMIT ? OFFSET ?"
        )
        params.extend([limit if limit is not None and limit >= 0 else -1, max(int(offset or 0), 0)])
        cur = self.conn.cursor()
        cur.execute(sql, tuple(params))
        return self._rows_to_dicts(cur.fetchall())

    def count_accounts(self) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM users")
        return int(cur.fetchone()[0])
