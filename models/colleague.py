from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ColleagueCriteria(BaseModel):
    skills: List[str] = Field(default_factory=list)
    department: Optional[str] = None
    office_location: Optional[str] = None
    query: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ColleagueMatch(BaseModel):
    user_id: int
    display_name: str = ""
    email: str = ""
    title: str = ""
    department: str = ""
    office_location: str = ""
    skills: List[str] = Field(default_factory=list)
    avatar_url: str = ""
    match_reason: str = ""


class ColleagueSearchResult(BaseModel):
    matches: List[ColleagueMatch] = Field(default_factory=list)
    suggestion: str = ""
