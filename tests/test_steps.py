from __future__ import annotations

import sqlite3

from db import schema
from db.repos.accounts_repo import AccountsRepo
from db.repos.attributes_repo import AttributesRepo
from db.repos.posts_repo import PostsRepo
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.validate_directory import ValidateDirectory
from pipelines.steps.persist_directory import PersistDirectory
from services.hydrator import ProfileHydrator


def test_validate_directory_drops_rows_without_ids():
    step = ValidateDirectory()
    ctx = RunContext()
    ctx.people = [
        {'id': '7', 'first_name': 'Alice', 'last_name': '<b>Example</b>', 'email': ' Alice@Example.COM ',
         'skills': 'Python, SQL', 'reports_to': '0', 'extension': 4021},
        {'first_name': 'No Id'},
        'not a row',
    ]
    ctx.posts = [{'id': 1, 'tenant_id': 2, 'title': 'Hello'}, {'id': 2}]
    ctx.sites = [{'id': 2, 'name': 'Branch'}, {'name': 'nameless'}]
    out = step.run(ctx)

    assert len(out.people) == 1
    person = out.people[0]
    assert person['id'] == 7
    assert person['user_login'] == 'user-7'
    assert person['email'] == 'alice@example.com'
    assert person['display_name'] == 'Alice Example'
    assert person['skills'] == ['Python', 'SQL']
    assert person['reports_to'] is None
    assert person['extension'] == '4021'
    assert [p['id'] for p in out.posts] == [1]
    assert out.sites == [{'id': 2, 'name': 'Branch'}]
    assert out.meta['validation_stats'] == {'people_invalid': 2, 'posts_invalid': 1, 'sites_invalid': 1}


def test_persist_directory_writes_accounts_profiles_and_posts(tmp_path):
    db_path = tmp_path / 't.db'
    conn = sqlite3.connect(str(db_path))
    try:
        schema.bootstrap(conn)
        seen = []
        pipeline = Pipeline([ValidateDirectory(), PersistDirectory(conn, 1, on_processed=seen.append)])
        ctx = RunContext()
        ctx.sites = [{'id': 1, 'name': 'Headquarters'}]
        ctx.people = [
            {'id': 1, 'user_login': 'boss', 'first_name': 'Bea', 'department': 'Sales',
             'skills': ['Mortgages', 'Spanish'], 'working_hours': {'mon': '9-17'}},
            {'id': 2, 'user_login': 'ana', 'first_name': 'Ana', 'reports_to': 1, 'visibility': False,
             'internal_title': 'Analyst'},
        ]
        ctx.posts = [{'id': 42, 'tenant_id': 1, 'title': 'Rates', 'status': 'draft'}]
        out = pipeline.run(ctx)

        assert out.meta.get('processed_people') == 2
        assert out.meta.get('processed_posts') == 1
        assert out.meta.get('processed_sites') == 1
        assert seen == [1, 2]

        hydrator = ProfileHydrator(AccountsRepo(conn), AttributesRepo(conn), 1)
        bea = hydrator.hydrate(1)
        assert bea.skills == ['Mortgages', 'Spanish']
        assert bea.working_hours == {'mon': '9-17'}
        ana = hydrator.hydrate(2)
        assert ana.reports_to == 1
        assert ana.visibility is False
        assert ana.title == 'Analyst'

        posts = PostsRepo(conn)
        assert posts.get_post(1, 42)['status'] == 'draft'
        assert posts.get_site_name(1) == 'Headquarters'
    finally:
        conn.close()


def test_persist_directory_reimport_updates_in_place(conn):
    pipeline = Pipeline([ValidateDirectory(), PersistDirectory(conn, 1)])
    ctx = RunContext()
    ctx.people = [{'id': 3, 'user_login': 'cid', 'first_name': 'Cid', 'department': 'Ops'}]
    pipeline.run(ctx)
    ctx = RunContext()
    ctx.people = [{'id': 3, 'user_login': 'cid', 'first_name': 'Cid', 'department': 'Support'}]
    pipeline.run(ctx)

    assert AccountsRepo(conn).count_accounts() == 1
    assert ProfileHydrator(AccountsRepo(conn), AttributesRepo(conn), 1).hydrate(3).department == 'Support'
