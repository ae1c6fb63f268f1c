from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Union

from config.settings import Settings, get_settings
from db.repos.accounts_repo import AccountsRepo
from db.repos.attributes_repo import AttributesRepo
from db.repos.posts_repo import PostsRepo
from models.bookmark import Bookmark, BookmarkFilter, BookmarkListing, Collection
from models.colleague import ColleagueCriteria, ColleagueSearchResult
from models.profile_record import DirectoryPage, OrgChart, ProfileFilter, ProfileRecord
from services.bookmarks import BookmarkStore
from services.colleague_matcher import ColleagueMatcher
from services.directory import ProfileDirectory
from services.hydrator import ProfileHydrator
from services.org_chart import OrgChartResolver
from services.profile_writer import ProfileWriter
from services.tenancy import TenantContext
from utils.logging_setup import init_logging


class IntranetService:
    """Entry point for callers: one instance per request.

    Calls that take an optional user_id fall back to the acting user.
    Unknown profiles come back as None; rejected collections as False.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        settings: Optional[Settings] = None,
        tenant_id: Optional[int] = None,
        acting_user_id: Optional[int] = None,
    ):
        # Make logging idempotent for any direct service use
        init_logging()
        self.settings = settings or get_settings()
        self.conn = conn
        self.acting_user_id = acting_user_id if acting_user_id is not None else self.settings.acting_user_id
        self.tenants = TenantContext(tenant_id if tenant_id is not None else self.settings.default_tenant_id)

        accounts = AccountsRepo(conn)
        attributes = AttributesRepo(conn)
        posts = PostsRepo(conn)
        self.hydrator = ProfileHydrator(accounts, attributes, self.settings.directory_tenant_id)
        self.writer = ProfileWriter(self.hydrator, attributes)
        self.directory = ProfileDirectory(self.hydrator, accounts, attributes)
        self.orgchart = OrgChartResolver(self.hydrator, accounts, attributes)
        self.bookmarks = BookmarkStore(attributes, posts, self.tenants, self.settings.bookmarks_tenant_id)
        self.matcher = ColleagueMatcher(
            self.directory,
            candidate_limit=self.settings.matcher_candidate_limit,
            max_results=self.settings.matcher_max_results,
        )

    def _user(self, user_id: Optional[int]) -> Optional[int]:
        return user_id or self.acting_user_id or None

    # --- directory ---
    def directory_list(self, profile_filter: Optional[Union[ProfileFilter, Dict[str, Any]]] = None) -> DirectoryPage:
        if isinstance(profile_filter, dict):
            profile_filter = ProfileFilter(**profile_filter)
        f = profile_filter or ProfileFilter()
        if f.limit is None:
            f = f.model_copy(update={"limit": self.settings.directory_page_size})
        return self.directory.list(f)

    def directory_get(self, user_id: Optional[int] = None) -> Optional[ProfileRecord]:
        return self.directory.get(self._user(user_id))

    def departments(self) -> List[str]:
        return self.directory.get_departments()

    def offices(self) -> List[str]:
        return self.directory.get_office_locations()

    def profile_update(self, user_id: Optional[int], changes: Dict[str, Any]) -> Optional[ProfileRecord]:
        uid = self._user(user_id)
        if not uid:
            return None
        return self.writer.update(uid, changes)

    # --- org chart ---
    def org_chart(self, user_id: Optional[int] = None) -> Optional[OrgChart]:
        return self.orgchart.org_chart(self._user(user_id))

    def direct_reports(self, manager_id: Optional[int] = None) -> List[ProfileRecord]:
        uid = self._user(manager_id)
        return self.orgchart.get_direct_reports(uid) if uid else []

    # --- bookmarks ---
    def bookmarks_get(
        self,
        user_id: Optional[int] = None,
        bookmark_filter: Optional[Union[BookmarkFilter, Dict[str, Any]]] = None,
    ) -> BookmarkListing:
        uid = self._user(user_id)
        if isinstance(bookmark_filter, dict):
            bookmark_filter = BookmarkFilter(**bookmark_filter)
        f = bookmark_filter or BookmarkFilter()
        if f.limit is None:
            f = f.model_copy(update={"limit": self.settings.bookmarks_page_size})
        enriched = self.bookmarks.get_bookmarks_with_posts(uid, f)
        all_bookmarks = self.bookmarks.get_bookmarks(uid)
        collections = [
            c.model_copy(update={"count": sum(1 for b in all_bookmarks if (b.collection or "") == c.slug)})
            for c in self.bookmarks.get_collections(uid)
        ]
        return BookmarkListing(total=len(enriched), bookmarks=enriched, collections=collections)

    def bookmarks_add(
        self,
        user_id: Optional[int],
        post_id: int,
        collection: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[Bookmark]:
        meta: Dict[str, Any] = {}
        if notes:
            meta["notes"] = str(notes).strip()
        return self.bookmarks.add(post_id, self._user(user_id), collection=collection, meta=meta)

    def bookmarks_remove(self, user_id: Optional[int], post_id: int) -> bool:
        """Remove the caller tenant's bookmark of post_id.

        Bookmarks are keyed by origin tenant, so a bookmark listed from
        another site is only removable through a service for that tenant.
        """
        return self.bookmarks.remove(post_id, self._user(user_id))

    def bookmarks_is_bookmarked(self, post_id: int, user_id: Optional[int] = None) -> bool:
        return self.bookmarks.is_bookmarked(post_id, self._user(user_id))

    def bookmarks_import_legacy(self, user_id: Optional[int] = None) -> int:
        return self.bookmarks.import_from_legacy(self._user(user_id))

    def collections_get(self, user_id: Optional[int] = None) -> List[Collection]:
        return self.bookmarks.get_collections(self._user(user_id))

    def collections_create(
        self,
        name: str,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Union[Collection, bool]:
        return self.bookmarks.create_collection(name, {"icon": icon, "color": color}, self._user(user_id))

    # --- colleagues ---
    def colleagues_find(self, criteria: Optional[Union[ColleagueCriteria, Dict[str, Any]]] = None) -> ColleagueSearchResult:
        if isinstance(criteria, dict):
            criteria = ColleagueCriteria(**criteria)
        return self.matcher.find(criteria)
