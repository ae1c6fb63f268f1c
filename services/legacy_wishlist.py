from __future__ import annotations

import json
import logging
from typing import Dict, List

from ports.repos import AttributeStorePort


logger = logging.getLogger(__name__)

WISHLIST_KEY = "_wished_posts"
WISH_COUNT_KEY = "_user_wish_count"


def wishlist_key(post_id: int) -> str:
    return f"post-{int(post_id)}"


class LegacyWishlistMirror:
    """Flat wishlist consumed by older tooling: ``post-<id> -> id`` plus a count.

    Kept in the tenant the request came from, independently of the primary
    bookmark set. Writes are two separate attribute updates with no
    transaction around them.
    """

    def __init__(self, attributes: AttributeStorePort):
        self.attributes = attributes

    def read(self, tenant_id: int, user_id: int) -> Dict[str, int]:
        raw = self.attributes.get(tenant_id, user_id, WISHLIST_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        wishlist: Dict[str, int] = {}
        for key, value in data.items():
            try:
                wishlist[str(key)] = int(value)
            except (TypeError, ValueError):
                continue
        return wishlist

    def post_ids(self, tenant_id: int, user_id: int) -> List[int]:
        return list(self.read(tenant_id, user_id).values())

    def count(self, tenant_id: int, user_id: int) -> int:
        raw = self.attributes.get(tenant_id, user_id, WISH_COUNT_KEY)
        try:
            return int(raw) if raw else 0
        except (TypeError, ValueError):
            return 0

    def sync(self, tenant_id: int, user_id: int, post_id: int, action: str) -> bool:
        """Apply 'add' or 'remove'; returns True when the wishlist changed."""
        wishlist = self.read(tenant_id, user_id)
        key = wishlist_key(post_id)
        if action == "add" and key not in wishlist:
            wishlist[key] = int(post_id)
        elif action == "remove" and key in wishlist:
            del wishlist[key]
        else:
            return False
        self.attributes.set(tenant_id, user_id, WISHLIST_KEY, json.dumps(wishlist))
        self.attributes.set(tenant_id, user_id, WISH_COUNT_KEY, str(len(wishlist)))
        logger.debug(
            "Legacy wishlist %s post %s", action, post_id,
            extra={"op": "wishlist.sync", "status": "ok", "tenant": tenant_id},
        )
        return True
