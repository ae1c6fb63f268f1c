from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Bookmark(BaseModel):
    """A user's bookmark of a content item; identity is (tenant, post_id).

    title/url/post_type are snapshotted when the bookmark is created and only
    refreshed on enriched reads.
    """

    post_id: int
    tenant: int
    post_type: str = ""
    title: str = ""
    url: str = ""
    collection: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""

    # Filled only by enriched reads
    excerpt: Optional[str] = None
    thumbnail: Optional[str] = None
    site_name: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def key(self) -> str:
        return bookmark_key(self.tenant, self.post_id)


def bookmark_key(tenant: int, post_id: int) -> str:
    return f"{int(tenant)}:post-{int(post_id)}"


class Collection(BaseModel):
    slug: str
    name: str
    icon: str = "folder"
    color: str = "#6b7280"
    count: Optional[int] = None

    model_config = ConfigDict(extra="ignore")


class BookmarkFilter(BaseModel):
    collection: Optional[str] = None
    post_type: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0

    model_config = ConfigDict(extra="ignore")


class BookmarkListing(BaseModel):
    total: int
    bookmarks: List[Bookmark] = Field(default_factory=list)
    collections: List[Collection] = Field(default_factory=list)
