from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Optional

from db.repos.accounts_repo import AccountsRepo
from db.repos.attributes_repo import AttributesRepo
from db.repos.posts_repo import PostsRepo
from models.profile_record import ProfileRecord
from pipelines.runner import RunContext
from services.hydrator import ProfileHydrator
from services.profile_writer import ProfileWriter


logger = logging.getLogger(__name__)


class PersistDirectory:
    def __init__(self, conn: sqlite3.Connection, directory_tenant_id: int, on_processed: Optional[Callable[[int], None]] = None) -> None:
        self.conn = conn
        self.accounts_repo = AccountsRepo(conn)
        self.attributes_repo = AttributesRepo(conn)
        self.posts_repo = PostsRepo(conn)
        self.writer = ProfileWriter(ProfileHydrator(self.accounts_repo, self.attributes_repo, directory_tenant_id), self.attributes_repo)
        self.on_processed = on_processed

    def run(self, ctx: RunContext) -> RunContext:
        for site in ctx.sites or []:
            self.posts_repo.upsert_site(site["id"], site.get("name") or "")

        processed = 0
        for p in ctx.people or []:
            user_id = self.accounts_repo.upsert_account(
                user_id=p["id"],
                user_login=p["user_login"],
                user_email=p.get("email") or None,
                display_name=p.get("display_name") or None,
                first_name=p.get("first_name") or None,
                last_name=p.get("last_name") or None,
                job_title=p.get("job_title") or None,
                avatar_url=p.get("avatar_url") or None,
                role=p.get("role") or None,
            )
            visible = p.get("visibility", p.get("is_visible", True))
            record = ProfileRecord.model_validate({
                **{k: v for k, v in p.items() if v is not None},
                "user_id": user_id,
                "visibility": visible not in (False, 0, "0", "false"),
            })
            self.writer.save(record)
            processed += 1
            if self.on_processed:
                self.on_processed(processed)

        posts = 0
        for post in ctx.posts or []:
            self.posts_repo.upsert_post(
                tenant_id=post["tenant_id"],
                post_id=post["id"],
                title=post.get("title") or "",
                post_type=post.get("post_type") or None,
                url=post.get("url") or None,
                excerpt=post.get("excerpt") or None,
                thumbnail_url=post.get("thumbnail_url") or post.get("thumbnail") or None,
                status=post.get("status") or None,
            )
            posts += 1

        ctx.meta["processed_people"] = processed
        ctx.meta["processed_posts"] = posts
        ctx.meta["processed_sites"] = len(ctx.sites or [])
        logger.info(
            "Imported %d people, %d posts", processed, posts,
            extra={"op": "import.persist", "status": "ok"},
        )
        return ctx
