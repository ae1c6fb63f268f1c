from __future__ import annotations

import json
import sys
import sqlite3
from typing import List


def _run_cli_with_args(args_list: List[str]) -> None:
    """Run cli.py main() with provided argv in-process (no subprocess)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Import fresh to ensure clean parser each time
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # type: ignore
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            code = int(getattr(e, "code", 0) or 0)
            if code not in (0, None):
                raise
    finally:
        sys.argv = argv_backup


def _write_import(tmp_path):
    payload = {
        "sites": [{"id": 1, "name": "Headquarters"}, {"id": 2, "name": "Branch"}],
        "people": [
            {"id": 1, "user_login": "bea", "first_name": "Bea", "department": "Sales",
             "office_location": "Madrid", "skills": ["Mortgages", "Spanish"]},
            {"id": 2, "user_login": "ana", "first_name": "Ana", "reports_to": 1,
             "department": "Support", "skills": ["Mortgages"]},
        ],
        "posts": [{"id": 42, "tenant_id": 2, "title": "Branch memo", "url": "https://branch.example/memo"}],
    }
    path = tmp_path / "directory.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_import_writes_db(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("RUN_ENV", "test")
    db_path = tmp_path / "cli_import.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "import", "--input", str(_write_import(tmp_path))])
    assert "Imported 2 people, 1 posts" in capsys.readouterr().out

    conn = sqlite3.connect(str(db_path))
    try:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM users")
        assert cur.fetchone()[0] == 2
        cur.execute("SELECT title FROM posts WHERE tenant_id = 2 AND id = 42")
        assert cur.fetchone() == ("Branch memo",)
    finally:
        conn.close()


def test_cli_colleagues_and_org_chart_print_json(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "import", "--input", str(_write_import(tmp_path))])
    capsys.readouterr()

    _run_cli_with_args([
        "--db", str(db_path), "colleagues",
        "--skill", "mortgages", "--skill", "spanish", "--department", "Sales",
    ])
    result = json.loads(capsys.readouterr().out)
    assert [m["user_id"] for m in result["matches"]] == [1, 2]
    assert result["suggestion"].startswith("I found 2 colleagues")

    _run_cli_with_args(["--db", str(db_path), "org-chart", "--user-id", "2"])
    chart = json.loads(capsys.readouterr().out)
    assert [p["user_id"] for p in chart["reporting_chain"]] == [1]

    _run_cli_with_args(["--db", str(db_path), "profile", "--user-id", "99"])
    assert "Profile not found" in capsys.readouterr().out


def test_cli_bookmarks_across_tenants(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "import", "--input", str(_write_import(tmp_path))])
    capsys.readouterr()

    _run_cli_with_args([
        "--db", str(db_path), "--tenant", "2", "--user", "1",
        "bookmark-add", "--post-id", "42", "--collection", "favorites", "--notes", "share",
    ])
    added = json.loads(capsys.readouterr().out)
    assert added["tenant"] == 2 and added["meta"] == {"notes": "share"}

    _run_cli_with_args(["--db", str(db_path), "--tenant", "1", "--user", "1", "bookmarks"])
    listing = json.loads(capsys.readouterr().out)
    assert listing["total"] == 1
    assert listing["bookmarks"][0]["site_name"] == "Branch"

    _run_cli_with_args(["--db", str(db_path), "--user", "1", "collection-create", "--name", "Favorites"])
    assert "already exists" in capsys.readouterr().out

    _run_cli_with_args(["--db", str(db_path), "--tenant", "1", "--user", "1", "bookmark-add", "--post-id", "42"])
    assert "Failed to add bookmark" in capsys.readouterr().out
