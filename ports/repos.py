from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence


class AttributeStorePort(Protocol):
    # Storage failures surface as sqlite3.Error; BookmarkStore relies on it
    # to keep legacy mirror failures away from the primary write.
    def get(self, tenant_id: int, user_id: int, key: str) -> Optional[str]:
        ...

    def set(self, tenant_id: int, user_id: int, key: str, value: Optional[str]) -> None:
        ...

    def distinct_values(self, tenant_id: int, key: str) -> List[str]:
        ...

    def user_ids_with_value(self, tenant_id: int, key: str, value: str) -> List[int]:
        ...


class AccountsRepoPort(Protocol):
    def get_account(self, user_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_accounts(self, user_ids: Sequence[int], order_by: str = "display_name") -> List[Dict[str, Any]]:
        ...

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
        ...


class ContentRepoPort(Protocol):
    def get_post(self, tenant_id: int, post_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_site_name(self, tenant_id: int) -> str:
        ...
