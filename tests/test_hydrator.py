from __future__ import annotations

import pytest

from db.repos.accounts_repo import AccountsRepo
from db.repos.attributes_repo import AttributesRepo
from services.errors import ProfileNotFound
from services.hydrator import ProfileHydrator, decode_list, decode_mapping, decode_user_id


def _hydrator(conn):
    return ProfileHydrator(AccountsRepo(conn), AttributesRepo(conn), 1)


def test_decode_list_is_lenient():
    assert decode_list('["Spanish", "Mortgages"]') == ["Spanish", "Mortgages"]
    assert decode_list('{"a": "x", "b": "y"}') == ["x", "y"]
    assert decode_list("not json [") == []
    assert decode_list('"a string"') == []
    assert decode_list(None) == []
    assert decode_list("") == []
    assert decode_list(["a", None, " "]) == ["a"]


def test_decode_mapping_and_user_id():
    assert decode_mapping('{"mon": "9-5"}') == {"mon": "9-5"}
    assert decode_mapping("{broken") == {}
    assert decode_user_id("12") == 12
    assert decode_user_id("0") is None
    assert decode_user_id("abc") is None
    assert decode_user_id(None) is None


def test_hydrate_defaults_for_bare_account(conn):
    AccountsRepo(conn).upsert_account(user_id=5, user_login="bare", display_name="Bare Account", first_name="Bare")
    profile = _hydrator(conn).hydrate(5)
    assert profile.user_id == 5
    assert profile.department == ""
    assert profile.office_location == ""
    assert profile.skills == []
    assert profile.reports_to is None
    assert profile.visibility is True
    assert profile.title == ""


def test_hydrate_tolerates_corrupt_attributes(conn):
    AccountsRepo(conn).upsert_account(user_id=6, user_login="corrupt", job_title="Loan Officer")
    attrs = AttributesRepo(conn)
    attrs.set(1, 6, "intranet_skills", "{{{ nope")
    attrs.set(1, 6, "intranet_working_hours", "[1, 2")
    attrs.set(1, 6, "intranet_reports_to", "boss")
    attrs.set(1, 6, "intranet_is_visible", "0")
    profile = _hydrator(conn).hydrate(6)
    assert profile.skills == []
    assert profile.working_hours == {}
    assert profile.reports_to is None
    assert profile.visibility is False
    # Falls back to the account's job title
    assert profile.title == "Loan Officer"


def test_hydrate_unknown_user_raises_and_find_returns_none(conn):
    hydrator = _hydrator(conn)
    with pytest.raises(ProfileNotFound):
        hydrator.hydrate(999)
    assert hydrator.find(999) is None
    assert hydrator.find(None) is None


def test_save_roundtrips_through_attributes(conn, add_person):
    add_person(7, "Maria", "Lopez", department="Sales", skills=["Spanish", "Mortgages"],
               reports_to=3, internal_title="Team Lead", working_hours={"mon": "9-17"})
    profile = _hydrator(conn).hydrate(7)
    assert profile.department == "Sales"
    assert profile.skills == ["Spanish", "Mortgages"]
    assert profile.reports_to == 3
    assert profile.title == "Team Lead"
    assert profile.working_hours == {"mon": "9-17"}
    assert AttributesRepo(conn).get(1, 7, "intranet_updated_at")
