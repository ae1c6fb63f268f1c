"""
Colleague ranking against skills, department and office.

Score per candidate:
    +10 for each requested skill the candidate has (case-insensitive)
    +5  when the department matches exactly
    +5  when the office location matches exactly

When skills are requested, only candidates with a positive score are kept.
Without skills every candidate is kept and department/office only reorder.
Equal scores keep the directory's first-name order.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from models.colleague import ColleagueCriteria, ColleagueMatch, ColleagueSearchResult
from models.profile_record import ProfileFilter, ProfileRecord
from services.directory import ProfileDirectory


logger = logging.getLogger(__name__)

SKILL_POINTS = 10
DEPARTMENT_POINTS = 5
LOCATION_POINTS = 5


def score_candidate(profile: ProfileRecord, criteria: ColleagueCriteria) -> Tuple[int, str]:
    """Return (score, match_reason) for one candidate."""
    score = 0
    reason = ""

    wanted: List[str] = []
    for skill in criteria.skills or []:
        low = str(skill).strip().lower()
        if low and low not in wanted:
            wanted.append(low)
    if wanted and profile.skills:
        have = {s.strip().lower() for s in profile.skills}
        matching = [s for s in wanted if s in have]
        if matching:
            score += len(matching) * SKILL_POINTS
            reason = f"Has skills: {', '.join(matching)}"

    if criteria.department and profile.department == criteria.department:
        score += DEPARTMENT_POINTS
        reason = reason or "In requested department"

    if criteria.office_location and profile.office_location == criteria.office_location:
        score += LOCATION_POINTS
        reason = reason or "At requested location"

    return score, reason or "General match"


def build_suggestion(matches: List[ColleagueMatch]) -> str:
    if not matches:
        return "No colleagues found matching your criteria. Try broadening your search."
    if len(matches) == 1:
        return f"I found {matches[0].display_name} who matches your criteria."
    return (
        f"I found {len(matches)} colleagues who might help. "
        f"{matches[0].display_name} seems like the best match."
    )


class ColleagueMatcher:
    def __init__(self, directory: ProfileDirectory, candidate_limit: int = 50, max_results: int = 10):
        self.directory = directory
        self.candidate_limit = candidate_limit
        self.max_results = max_results

    def candidates(self, criteria: ColleagueCriteria) -> List[ProfileRecord]:
        # Department/office are scored, not filtered, so near misses still rank
        page = self.directory.list(ProfileFilter(search_text=criteria.query or None, limit=self.candidate_limit))
        return page.results

    def find(self, criteria: Optional[ColleagueCriteria] = None) -> ColleagueSearchResult:
        criteria = criteria or ColleagueCriteria()
        has_skills = any(str(s).strip() for s in (criteria.skills or []))

        scored: List[Tuple[int, ColleagueMatch]] = []
        for profile in self.candidates(criteria):
            score, reason = score_candidate(profile, criteria)
            if has_skills and score <= 0:
                continue
            scored.append((score, ColleagueMatch(
                user_id=profile.user_id,
                display_name=profile.display_name,
                email=profile.email,
                title=profile.title,
                department=profile.department,
                office_location=profile.office_location,
                skills=list(profile.skills),
                avatar_url=profile.avatar_url,
                match_reason=reason,
            )))

        # sorted() is stable: ties keep directory order
        ranked = sorted(scored, key=lambda item: item[0], reverse=True)
        matches = [match for _, match in ranked[: self.max_results]]
        logger.info(
            "Colleague search returned %d matches", len(matches),
            extra={"op": "colleagues.find", "status": "ok"},
        )
        return ColleagueSearchResult(matches=matches, suggestion=build_suggestion(matches))
