from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ProfileRecord(BaseModel):
    """Hydrated directory profile: account fields plus intranet attributes."""

    user_id: int
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    job_title: str = ""
    avatar_url: str = ""

    internal_title: str = ""
    department: str = ""
    reports_to: Optional[int] = None
    office_location: str = ""
    desk_phone: str = ""
    extension: str = ""
    start_date: str = ""
    employee_id: str = ""
    internal_bio: str = ""
    skills: List[str] = Field(default_factory=list)
    slack_handle: str = ""
    teams_email: str = ""
    timezone: str = ""
    availability_status: str = ""
    working_hours: Dict[str, Any] = Field(default_factory=dict)
    out_of_office_message: str = ""
    visibility: bool = True
    notification_preferences: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def title(self) -> str:
        """Internal title, falling back to the account's job title."""
        return self.internal_title or self.job_title or ""


class ProfileFilter(BaseModel):
    search_text: Optional[str] = None
    department: Optional[str] = None
    office_location: Optional[str] = None
    include_hidden: bool = False
    limit: Optional[int] = None
    offset: int = 0

    model_config = ConfigDict(extra="ignore")


class DirectoryPage(BaseModel):
    total: int
    results: List[ProfileRecord] = Field(default_factory=list)


class OrgChart(BaseModel):
    user: ProfileRecord
    reporting_chain: List[ProfileRecord] = Field(default_factory=list)
    direct_reports: List[ProfileRecord] = Field(default_factory=list)
