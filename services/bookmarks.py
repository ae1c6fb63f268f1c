"""
Network-wide bookmarks.

Bookmarks and collections for every user live in one canonical tenant, no
matter which tenant a request comes from. All reads and writes of that data
go through ``TenantContext.switched_to`` so the caller's tenant is restored
on every exit path.

Each add/remove is mirrored into the legacy wishlist of the caller's tenant.
The two writes are independent: when the mirror write fails the bookmark
write still stands and the caller is not told.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from models.bookmark import Bookmark, BookmarkFilter, Collection, bookmark_key
from ports.repos import AttributeStorePort, ContentRepoPort
from services.legacy_wishlist import LegacyWishlistMirror
from services.tenancy import TenantContext
from services.text_utils import sanitize_hex_color, sanitize_text, slugify
from utils.time_parsing import now_timestamp, timestamp_sort_key


logger = logging.getLogger(__name__)

BOOKMARKS_KEY = "_intranet_network_bookmarks"
COLLECTIONS_KEY = "_intranet_bookmark_collections"

PUBLISHED_STATUS = "publish"
DEFAULT_COLLECTION_ICON = "folder"
DEFAULT_COLLECTION_COLOR = "#6b7280"

# Returned while a user has no stored collections; persisted together with
# the first collection the user creates.
DEFAULT_COLLECTIONS: List[Dict[str, str]] = [
    {"slug": "favorites", "name": "Favorites", "icon": "star", "color": "#f59e0b"},
    {"slug": "read-later", "name": "Read Later", "icon": "clock", "color": "#3b82f6"},
]


def _decode_entry(key: str, raw: Any) -> Optional[Bookmark]:
    if not isinstance(raw, dict):
        return None
    data = dict(raw)
    # Entries written before tenants were explicit carry site_id instead
    if "tenant" not in data and "site_id" in data:
        data["tenant"] = data["site_id"]
    if not isinstance(data.get("meta"), dict):
        data["meta"] = {}
    try:
        return Bookmark.model_validate(data)
    except ValidationError:
        logger.warning("Skipping unreadable bookmark entry %s", key, extra={"op": "bookmarks.read", "status": "corrupt"})
        return None


class BookmarkStore:
    def __init__(
        self,
        attributes: AttributeStorePort,
        content: ContentRepoPort,
        tenants: TenantContext,
        canonical_tenant_id: int,
        mirror: Optional[LegacyWishlistMirror] = None,
    ):
        self.attributes = attributes
        self.content = content
        self.tenants = tenants
        self.canonical_tenant_id = int(canonical_tenant_id)
        self.mirror = mirror or LegacyWishlistMirror(attributes)

    # --- canonical storage ---
    def _load(self, user_id: int) -> Dict[str, Bookmark]:
        with self.tenants.switched_to(self.canonical_tenant_id) as tenant_id:
            raw = self.attributes.get(tenant_id, user_id, BOOKMARKS_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Bookmark set is not valid JSON; treating as empty", extra={"op": "bookmarks.read", "status": "corrupt"})
            return {}
        if not isinstance(data, dict):
            return {}
        bookmarks: Dict[str, Bookmark] = {}
        for key, entry in data.items():
            bookmark = _decode_entry(str(key), entry)
            if bookmark is not None:
                bookmarks[bookmark.key] = bookmark
        return bookmarks

    def _store(self, user_id: int, bookmarks: Mapping[str, Bookmark]) -> None:
        payload = {
            key: b.model_dump(exclude={"excerpt", "thumbnail", "site_name"})
            for key, b in bookmarks.items()
        }
        with self.tenants.switched_to(self.canonical_tenant_id) as tenant_id:
            self.attributes.set(tenant_id, user_id, BOOKMARKS_KEY, json.dumps(payload, ensure_ascii=False))

    def _mirror(self, tenant_id: int, user_id: int, post_id: int, action: str) -> None:
        try:
            self.mirror.sync(tenant_id, user_id, post_id, action)
        except sqlite3.Error as e:
            # Primary write already committed; the mirror stays stale
            logger.warning(
                "Legacy wishlist %s failed for post %s", action, post_id,
                extra={"op": "wishlist.sync", "status": "failed", "tenant": tenant_id, "error": str(e)},
            )

    # --- bookmarks ---
    def get_bookmarks(self, user_id: Optional[int]) -> List[Bookmark]:
        if not user_id:
            return []
        return list(self._load(user_id).values())

    def add(
        self,
        post_id: int,
        user_id: Optional[int],
        collection: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Optional[Bookmark]:
        """Bookmark post_id from the caller's tenant; re-adding merges.

        Returns None when the user or post id is missing or the post does
        not resolve in the caller's tenant.
        """
        if not user_id or not post_id:
            return None
        origin = self.tenants.current
        post = self.content.get_post(origin, int(post_id))
        if post is None:
            logger.info("Cannot bookmark unknown post %s", post_id, extra={"op": "bookmarks.add", "status": "not_found", "tenant": origin})
            return None

        bookmarks = self._load(user_id)
        key = bookmark_key(origin, post_id)
        existing = bookmarks.get(key)
        if existing is not None:
            updates: Dict[str, Any] = {}
            if collection:
                updates["collection"] = collection
            if meta:
                updates["meta"] = {**existing.meta, **meta}
            bookmark = existing.model_copy(update=updates)
            status = "merged"
        else:
            bookmark = Bookmark(
                post_id=int(post_id),
                tenant=origin,
                post_type=post.get("post_type") or "",
                title=post.get("title") or "",
                url=post.get("url") or "",
                collection=collection or None,
                meta=dict(meta or {}),
                created_at=now_timestamp(),
            )
            status = "created"
        bookmarks[key] = bookmark
        self._store(user_id, bookmarks)
        logger.info("Bookmark %s for post %s", status, post_id, extra={"op": "bookmarks.add", "status": status, "tenant": origin})

        self._mirror(origin, user_id, int(post_id), "add")
        return bookmark

    def remove(self, post_id: int, user_id: Optional[int]) -> bool:
        if not user_id or not post_id:
            return False
        origin = self.tenants.current
        bookmarks = self._load(user_id)
        key = bookmark_key(origin, post_id)
        if key not in bookmarks:
            return False
        del bookmarks[key]
        self._store(user_id, bookmarks)
        logger.info("Bookmark removed for post %s", post_id, extra={"op": "bookmarks.remove", "status": "ok", "tenant": origin})

        self._mirror(origin, user_id, int(post_id), "remove")
        return True

    def is_bookmarked(self, post_id: int, user_id: Optional[int]) -> bool:
        if not user_id or not post_id:
            return False
        return bookmark_key(self.tenants.current, post_id) in self._load(user_id)

    def get_by_collection(self, collection: str, user_id: Optional[int]) -> List[Bookmark]:
        return [b for b in self.get_bookmarks(user_id) if (b.collection or "") == collection]

    def get_by_post_type(self, post_type: str, user_id: Optional[int]) -> List[Bookmark]:
        return [b for b in self.get_bookmarks(user_id) if b.post_type == post_type]

    def get_count(self, user_id: Optional[int]) -> int:
        return len(self.get_bookmarks(user_id))

    def get_bookmarks_with_posts(self, user_id: Optional[int], bookmark_filter: Optional[BookmarkFilter] = None) -> List[Bookmark]:
        """Filtered, newest-first page of bookmarks refreshed from their live posts.

        Each bookmark's post is read in the tenant it was bookmarked from.
        Bookmarks whose post is gone or not published are left out.
        """
        f = bookmark_filter or BookmarkFilter()
        bookmarks = self.get_bookmarks(user_id)
        if f.collection:
            bookmarks = [b for b in bookmarks if (b.collection or "") == f.collection]
        if f.post_type:
            bookmarks = [b for b in bookmarks if b.post_type == f.post_type]

        bookmarks.sort(key=lambda b: timestamp_sort_key(b.created_at), reverse=True)

        offset = max(int(f.offset or 0), 0)
        limit = f.limit if f.limit is not None else -1
        if offset > 0 or limit > 0:
            end = offset + limit if limit > 0 else None
            bookmarks = bookmarks[offset:end]

        result: List[Bookmark] = []
        for bookmark in bookmarks:
            with self.tenants.switched_to(bookmark.tenant) as tenant_id:
                post = self.content.get_post(tenant_id, bookmark.post_id)
                if post is None or post.get("status") != PUBLISHED_STATUS:
                    logger.debug(
                        "Dropping bookmark of unavailable post %s", bookmark.post_id,
                        extra={"op": "bookmarks.enrich", "status": "dropped", "tenant": tenant_id},
                    )
                    continue
                site_name = self.content.get_site_name(tenant_id)
            result.append(bookmark.model_copy(update={
                "title": post.get("title") or "",
                "url": post.get("url") or "",
                "excerpt": post.get("excerpt") or "",
                "thumbnail": post.get("thumbnail_url") or "",
                "post_type": post.get("post_type") or bookmark.post_type,
                "site_name": site_name,
            }))
        return result

    def import_from_legacy(self, user_id: Optional[int]) -> int:
        """Bookmark every legacy wishlist entry of the caller's tenant not yet bookmarked."""
        if not user_id:
            return 0
        imported = 0
        for post_id in self.mirror.post_ids(self.tenants.current, user_id):
            if self.is_bookmarked(post_id, user_id):
                continue
            if self.add(post_id, user_id) is not None:
                imported += 1
        logger.info("Imported %d legacy bookmarks", imported, extra={"op": "bookmarks.import", "status": "ok", "tenant": self.tenants.current})
        return imported

    # --- collections ---
    def _load_collections(self, user_id: int) -> List[Collection]:
        with self.tenants.switched_to(self.canonical_tenant_id) as tenant_id:
            raw = self.attributes.get(tenant_id, user_id, COLLECTIONS_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return []
        if not isinstance(data, list):
            return []
        collections: List[Collection] = []
        for item in data:
            try:
                collections.append(Collection.model_validate(item))
            except ValidationError:
                continue
        return collections

    def get_collections(self, user_id: Optional[int]) -> List[Collection]:
        if not user_id:
            return []
        stored = self._load_collections(user_id)
        if stored:
            return stored
        return [Collection(**c) for c in DEFAULT_COLLECTIONS]

    def create_collection(
        self,
        name: Optional[str],
        options: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
    ) -> Union[Collection, bool]:
        """Create a collection; False for an empty name or a slug already in use."""
        clean_name = sanitize_text(name)
        if not user_id or not clean_name:
            return False
        slug = slugify(clean_name)
        if not slug:
            return False
        collections = self.get_collections(user_id)
        if any(c.slug.lower() == slug.lower() for c in collections):
            logger.info("Collection slug %s already exists", slug, extra={"op": "collections.create", "status": "duplicate"})
            return False

        opts = options or {}
        collection = Collection(
            slug=slug,
            name=clean_name,
            icon=sanitize_text(opts.get("icon")) or DEFAULT_COLLECTION_ICON,
            color=sanitize_hex_color(opts.get("color"), DEFAULT_COLLECTION_COLOR),
        )
        collections.append(collection)
        payload = [c.model_dump(exclude={"count"}) for c in collections]
        with self.tenants.switched_to(self.canonical_tenant_id) as tenant_id:
            self.attributes.set(tenant_id, user_id, COLLECTIONS_KEY, json.dumps(payload, ensure_ascii=False))
        logger.info("Collection %s created", slug, extra={"op": "collections.create", "status": "ok", "tenant": self.canonical_tenant_id})
        return collection
