import argparse
import json
from pathlib import Path

from db.connection import get_connection
from db import schema
from models.bookmark import BookmarkFilter
from models.colleague import ColleagueCriteria
from models.profile_record import ProfileFilter
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.validate_directory import ValidateDirectory
from pipelines.steps.persist_directory import PersistDirectory
from services.intranet import IntranetService
from config.settings import get_settings
from utils.logging_setup import init_logging


def _print_json(data):
	print(json.dumps(data, indent=2, ensure_ascii=False))


def _service(args):
	conn = get_connection(args.db)
	schema.bootstrap(conn)
	return IntranetService(conn, tenant_id=args.tenant, acting_user_id=args.user)


def cmd_bootstrap(args):
	conn = get_connection(args.db)
	schema.bootstrap(conn)
	print("Schema ready")


def cmd_import(args):
	conn = get_connection(args.db)
	schema.bootstrap(conn)
	data = json.loads(Path(args.input).read_text(encoding="utf-8"))
	if isinstance(data, list):
		data = {"people": data}
	ctx = RunContext(source=args.input)
	ctx.sites = list(data.get("sites") or [])
	ctx.people = list(data.get("people") or data.get("profiles") or [])
	ctx.posts = list(data.get("posts") or [])
	pipeline = Pipeline([
		ValidateDirectory(),
		PersistDirectory(conn, get_settings().directory_tenant_id),
	])
	ctx = pipeline.run(ctx)
	people = int(ctx.meta.get('processed_people') or 0)
	posts = int(ctx.meta.get('processed_posts') or 0)
	print(f"Imported {people} people, {posts} posts")


def cmd_directory(args):
    svc = _service(args)
    page = svc.directory_list(ProfileFilter(
        search_text=args.search,
        department=args.department,
        office_location=args.office,
        include_hidden=args.include_hidden,
        limit=args.limit,
        offset=args.offset,
    ))
    _print_json(page.model_dump())


def cmd_departments(args):
    _print_json(_service(args).departments())


def cmd_offices(args):
    _print_json(_service(args).offices())


def cmd_profile(args):
    profile = _service(args).directory_get(args.user_id)
    if profile is None:
        print("Profile not found")
        return
    _print_json(profile.model_dump())


def cmd_profile_update(args):
    changes = {}
    for item in args.set or []:
        key, _, value = item.partition("=")
        if key == "skills":
            changes[key] = [s.strip() for s in value.split(",") if s.strip()]
        else:
            changes[key] = value
    profile = _service(args).profile_update(args.user_id, changes)
    if profile is None:
        print("Profile not found")
        return
    _print_json(profile.model_dump())


def cmd_org_chart(args):
    chart = _service(args).org_chart(args.user_id)
    if chart is None:
        print("Profile not found")
        return
    _print_json(chart.model_dump())


def cmd_bookmarks(args):
    listing = _service(args).bookmarks_get(args.user_id, BookmarkFilter(
        collection=args.collection,
        post_type=args.post_type,
        limit=args.limit,
        offset=args.offset,
    ))
    _print_json(listing.model_dump())


def cmd_bookmark_add(args):
    bookmark = _service(args).bookmarks_add(args.user_id, args.post_id, args.collection, args.notes)
    if bookmark is None:
        print("Failed to add bookmark")
        return
    _print_json(bookmark.model_dump())


def cmd_bookmark_remove(args):
    removed = _service(args).bookmarks_remove(args.user_id, args.post_id)
    _print_json({"success": removed, "post_id": args.post_id})


def cmd_bookmark_check(args):
    bookmarked = _service(args).bookmarks_is_bookmarked(args.post_id, args.user_id)
    _print_json({"post_id": args.post_id, "is_bookmarked": bookmarked})


def cmd_collections(args):
    _print_json([c.model_dump(exclude={"count"}) for c in _service(args).collections_get(args.user_id)])


def cmd_collection_create(args):
    collection = _service(args).collections_create(args.name, args.icon, args.color, user_id=args.user_id)
    if not collection:
        print("A collection with this name already exists")
        return
    _print_json(collection.model_dump(exclude={"count"}))


def cmd_import_legacy(args):
    imported = _service(args).bookmarks_import_legacy(args.user_id)
    print(f"Imported {imported} legacy bookmarks")


def cmd_colleagues(args):
    result = _service(args).colleagues_find(ColleagueCriteria(
        skills=args.skill or [],
        department=args.department,
        office_location=args.office,
        query=args.query,
    ))
    _print_json(result.model_dump())


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Intranet directory CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    parser.add_argument("--tenant", type=int, default=None, help="Tenant the request comes from (default from settings)")
    parser.add_argument("--user", type=int, default=None, help="Acting user id (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_imp = sub.add_parser("import", help="Import sites, people and posts from JSON")
    p_imp.add_argument("--input", required=True, help="Path to JSON file (object with sites/people/posts, or a people array)")
    p_imp.set_defaults(func=cmd_import)

    p_dir = sub.add_parser("directory", help="Search the directory")
    p_dir.add_argument("--search", default=None)
    p_dir.add_argument("--department", default=None)
    p_dir.add_argument("--office", default=None)
    p_dir.add_argument("--include-hidden", action="store_true")
    p_dir.add_argument("--limit", type=int, default=None, help="Page size; -1 for all (default from settings)")
    p_dir.add_argument("--offset", type=int, default=0)
    p_dir.set_defaults(func=cmd_directory)

    p_dep = sub.add_parser("departments", help="List distinct departments")
    p_dep.set_defaults(func=cmd_departments)

    p_off = sub.add_parser("offices", help="List distinct office locations")
    p_off.set_defaults(func=cmd_offices)

    p_prof = sub.add_parser("profile", help="Show one profile")
    p_prof.add_argument("--user-id", type=int, default=None)
    p_prof.set_defaults(func=cmd_profile)

    p_pu = sub.add_parser("profile-update", help="Update self-service profile fields")
    p_pu.add_argument("--user-id", type=int, default=None)
    p_pu.add_argument("--set", action="append", help="field=value (repeatable); skills are comma separated")
    p_pu.set_defaults(func=cmd_profile_update)

    p_org = sub.add_parser("org-chart", help="Reporting chain and direct reports of a user")
    p_org.add_argument("--user-id", type=int, default=None)
    p_org.set_defaults(func=cmd_org_chart)

    p_bm = sub.add_parser("bookmarks", help="List bookmarks with live post data and collections")
    p_bm.add_argument("--user-id", type=int, default=None)
    p_bm.add_argument("--collection", default=None)
    p_bm.add_argument("--post-type", default=None)
    p_bm.add_argument("--limit", type=int, default=None)
    p_bm.add_argument("--offset", type=int, default=0)
    p_bm.set_defaults(func=cmd_bookmarks)

    p_ba = sub.add_parser("bookmark-add", help="Bookmark a post of the current tenant")
    p_ba.add_argument("--user-id", type=int, default=None)
    p_ba.add_argument("--post-id", type=int, required=True)
    p_ba.add_argument("--collection", default=None)
    p_ba.add_argument("--notes", default=None)
    p_ba.set_defaults(func=cmd_bookmark_add)

    p_br = sub.add_parser("bookmark-remove", help="Remove a bookmark")
    p_br.add_argument("--user-id", type=int, default=None)
    p_br.add_argument("--post-id", type=int, required=True)
    p_br.set_defaults(func=cmd_bookmark_remove)

    p_bc = sub.add_parser("bookmark-check", help="Check whether a post is bookmarked")
    p_bc.add_argument("--user-id", type=int, default=None)
    p_bc.add_argument("--post-id", type=int, required=True)
    p_bc.set_defaults(func=cmd_bookmark_check)

    p_col = sub.add_parser("collections", help="List bookmark collections")
    p_col.add_argument("--user-id", type=int, default=None)
    p_col.set_defaults(func=cmd_collections)

    p_cc = sub.add_parser("collection-create", help="Create a bookmark collection")
    p_cc.add_argument("--user-id", type=int, default=None)
    p_cc.add_argument("--name", required=True)
    p_cc.add_argument("--icon", default=None)
    p_cc.add_argument("--color", default=None)
    p_cc.set_defaults(func=cmd_collection_create)

    p_il = sub.add_parser("bookmarks-import-legacy", help="Import the legacy wishlist as bookmarks")
    p_il.add_argument("--user-id", type=int, default=None)
    p_il.set_defaults(func=cmd_import_legacy)

    p_cf = sub.add_parser("colleagues", help="Find colleagues by skills, department and office")
    p_cf.add_argument("--skill", action="append", help="Skill to match (repeatable)")
    p_cf.add_argument("--department", default=None)
    p_cf.add_argument("--office", default=None)
    p_cf.add_argument("--query", default=None, help="Free-text search narrowing the candidate pool")
    p_cf.set_defaults(func=cmd_colleagues)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
