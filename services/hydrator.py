"""
Profile hydration from account rows and per-tenant attributes.

Every intranet attribute lives under the ``intranet_`` prefix in the
attribute store. Reads are lenient: a missing or corrupt attribute yields
its empty default instead of an error.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from models.profile_record import ProfileRecord
from ports.repos import AccountsRepoPort, AttributeStorePort
from services.errors import ProfileNotFound


logger = logging.getLogger(__name__)

META_PREFIX = "intranet_"

STRING_FIELDS: List[str] = [
    "internal_title",
    "department",
    "office_location",
    "desk_phone",
    "extension",
    "start_date",
    "employee_id",
    "internal_bio",
    "slack_handle",
    "teams_email",
    "timezone",
    "availability_status",
    "out_of_office_message",
]
LIST_FIELDS: List[str] = ["skills"]
MAPPING_FIELDS: List[str] = ["working_hours", "notification_preferences"]


def meta_key(field_name: str) -> str:
    return META_PREFIX + field_name


def decode_list(raw: Any) -> List[str]:
    """Decode a stored list attribute; corrupt or absent data becomes []."""
    if raw is None or raw == "":
        return []
    value = raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            return []
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def decode_mapping(raw: Any) -> Dict[str, Any]:
    """Decode a stored map attribute; corrupt or absent data becomes {}."""
    if raw is None or raw == "":
        return {}
    value = raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            return {}
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, list):
        # Lists decoded from older saves keep their positions as keys
        return {str(idx): item for idx, item in enumerate(value)}
    return {}


def decode_user_id(raw: Any) -> Optional[int]:
    """Manager pointers: anything that is not a positive integer means 'none'."""
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def decode_visibility(raw: Optional[str]) -> bool:
    # Missing or '' counts as visible; only '1' is an explicit yes
    return raw is None or raw in ("", "1")


class ProfileHydrator:
    def __init__(self, accounts: AccountsRepoPort, attributes: AttributeStorePort, tenant_id: int):
        self.accounts = accounts
        self.attributes = attributes
        self.tenant_id = tenant_id

    def hydrate(self, user_id: int) -> ProfileRecord:
        """Build the profile for user_id; raises ProfileNotFound for unknown ids."""
        account = self.accounts.get_account(user_id) if user_id else None
        if not account:
            raise ProfileNotFound(user_id)
        return self.hydrate_account(account)

    def hydrate_account(self, account: Dict[str, Any]) -> ProfileRecord:
        user_id = int(account["id"])

        def attr(name: str) -> Optional[str]:
            return self.attributes.get(self.tenant_id, user_id, meta_key(name))

        fields: Dict[str, Any] = {
            "user_id": user_id,
            "display_name": account.get("display_name") or "",
            "first_name": account.get("first_name") or "",
            "last_name": account.get("last_name") or "",
            "email": account.get("user_email") or "",
            "job_title": account.get("job_title") or "",
            "avatar_url": account.get("avatar_url") or "",
        }
        for name in STRING_FIELDS:
            fields[name] = attr(name) or ""
        for name in LIST_FIELDS:
            fields[name] = decode_list(attr(name))
        for name in MAPPING_FIELDS:
            fields[name] = decode_mapping(attr(name))
        fields["reports_to"] = decode_user_id(attr("reports_to"))
        fields["visibility"] = decode_visibility(attr("is_visible"))
        return ProfileRecord(**fields)

    def find(self, user_id: Optional[int]) -> Optional[ProfileRecord]:
        """Like hydrate, but returns None for unknown ids."""
        if not user_id:
            return None
        try:
            return self.hydrate(user_id)
        except ProfileNotFound:
            logger.debug("Profile lookup missed", extra={"op": "hydrate", "status": "not_found", "tenant": self.tenant_id})
            return None
