from __future__ import annotations

from db.repos.accounts_repo import AccountsRepo
from db.repos.attributes_repo import AttributesRepo
from models.colleague import ColleagueCriteria
from models.profile_record import ProfileRecord
from services.colleague_matcher import ColleagueMatcher, build_suggestion, score_candidate
from services.directory import ProfileDirectory
from services.hydrator import ProfileHydrator


def _matcher(conn, **kwargs):
    accounts = AccountsRepo(conn)
    attributes = AttributesRepo(conn)
    directory = ProfileDirectory(ProfileHydrator(accounts, attributes, 1), accounts, attributes)
    return ColleagueMatcher(directory, **kwargs)


def test_score_candidate_points_and_reason():
    profile = ProfileRecord(user_id=1, skills=["Mortgages", "Spanish"], department="Sales", office_location="LA")
    score, reason = score_candidate(profile, ColleagueCriteria(skills=["spanish", "MORTGAGES", "spanish"], department="Sales"))
    assert score == 25
    assert reason == "Has skills: spanish, mortgages"

    score, reason = score_candidate(profile, ColleagueCriteria(department="Sales", office_location="LA"))
    assert score == 10
    assert reason == "In requested department"

    score, reason = score_candidate(profile, ColleagueCriteria(office_location="LA"))
    assert (score, reason) == (5, "At requested location")

    assert score_candidate(profile, ColleagueCriteria()) == (0, "General match")


def test_skill_gate_excludes_profiles_without_the_skill(conn, add_person):
    add_person(1, "Ana", skills=["spanish"])
    add_person(2, "Bea", skills=["French"])
    add_person(3, "Cid", skills=[])
    add_person(4, "Dov", skills=["SPANISH", "Excel"])
    result = _matcher(conn).find(ColleagueCriteria(skills=["Spanish"]))
    assert [m.user_id for m in result.matches] == [1, 4]
    for match in result.matches:
        assert "spanish" in [s.lower() for s in match.skills]


def test_two_skills_and_department_outrank_single_skill(conn, add_person):
    # Directory order puts Abe first; the score must override it
    add_person(1, "Abe", skills=["mortgages"], department="Operations")
    add_person(2, "Zia", skills=["Mortgages", "Spanish"], department="Sales")
    result = _matcher(conn).find(ColleagueCriteria(skills=["mortgages", "spanish"], department="Sales"))
    assert [m.user_id for m in result.matches] == [2, 1]
    assert result.matches[0].match_reason == "Has skills: mortgages, spanish"
    assert result.suggestion == "I found 2 colleagues who might help. Zia seems like the best match."


def test_without_skills_everyone_is_included_and_ties_keep_directory_order(conn, add_person):
    add_person(1, "Cal", department="Support")
    add_person(2, "Ada", department="Support")
    add_person(3, "Bo", department="Sales")
    add_person(4, "Hidden", department="Sales", visibility=False)
    result = _matcher(conn).find(ColleagueCriteria(department="Sales"))
    assert [m.display_name for m in result.matches] == ["Bo", "Ada", "Cal"]
    assert result.matches[1].match_reason == "General match"


def test_results_truncate_to_max(conn, add_person):
    for uid in range(1, 15):
        add_person(uid, f"Person{uid:02d}", skills=["python"])
    result = _matcher(conn).find(ColleagueCriteria(skills=["Python"]))
    assert len(result.matches) == 10
    assert result.matches[0].display_name == "Person01"


def test_candidate_pool_is_bounded(conn, add_person):
    for uid in range(1, 6):
        add_person(uid, f"Person{uid}", skills=["python"])
    result = _matcher(conn, candidate_limit=3).find(ColleagueCriteria(skills=["python"]))
    assert [m.user_id for m in result.matches] == [1, 2, 3]


def test_query_narrows_candidates(conn, add_person):
    add_person(1, "Ana", skills=["python"])
    add_person(2, "Bea", skills=["python"])
    result = _matcher(conn).find(ColleagueCriteria(skills=["python"], query="bea"))
    assert [m.user_id for m in result.matches] == [2]
    assert result.suggestion == "I found Bea who matches your criteria."


def test_no_matches_suggests_broadening(conn, add_person):
    add_person(1, "Ana", skills=["python"])
    result = _matcher(conn).find(ColleagueCriteria(skills=["cobol"]))
    assert result.matches == []
    assert result.suggestion == build_suggestion([])
    assert "broadening" in result.suggestion


def test_department_points_pass_the_skill_gate(conn, add_person):
    add_person(1, "Ana", skills=["Spanish"], department="Support")
    add_person(2, "Bob", skills=["French"], department="Sales")
    add_person(3, "Cy", skills=["French"], department="Support")
    matcher = _matcher(conn)

    result = matcher.find(ColleagueCriteria(skills=["Spanish"], department="Sales"))
    assert [(m.user_id, m.match_reason) for m in result.matches] == [
        (1, "Has skills: spanish"),
        (2, "In requested department"),
    ]

    # Skills alone keep the strict gate
    result = matcher.find(ColleagueCriteria(skills=["Spanish"]))
    assert [m.user_id for m in result.matches] == [1]
