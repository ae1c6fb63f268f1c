from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from models.profile_record import ProfileRecord
from ports.repos import AttributeStorePort
from services.hydrator import LIST_FIELDS, MAPPING_FIELDS, STRING_FIELDS, ProfileHydrator, meta_key
from services.text_utils import sanitize_text
from utils.time_parsing import now_timestamp


logger = logging.getLogger(__name__)

# Fields a user may change on their own profile
SELF_SERVICE_FIELDS: List[str] = [
    "availability_status",
    "out_of_office_message",
    "internal_bio",
    "skills",
    "slack_handle",
    "teams_email",
    "timezone",
    "notification_preferences",
]


class ProfileWriter:
    """Explicit saves of intranet attributes; there is no delete."""

    def __init__(self, hydrator: ProfileHydrator, attributes: AttributeStorePort):
        self.hydrator = hydrator
        self.attributes = attributes

    @property
    def tenant_id(self) -> int:
        return self.hydrator.tenant_id

    def save(self, record: ProfileRecord) -> bool:
        if not record.user_id:
            return False
        uid = record.user_id

        def put(name: str, value: Optional[str]) -> None:
            self.attributes.set(self.tenant_id, uid, meta_key(name), value)

        for name in STRING_FIELDS:
            put(name, getattr(record, name) or "")
        put("reports_to", str(record.reports_to) if record.reports_to else "")
        put("is_visible", "1" if record.visibility else "0")
        # Preserve non-ASCII characters (e.g., umlauts) in stored JSON text
        for name in LIST_FIELDS:
            put(name, json.dumps(list(getattr(record, name) or []), ensure_ascii=False))
        for name in MAPPING_FIELDS:
            put(name, json.dumps(dict(getattr(record, name) or {}), ensure_ascii=False))
        put("updated_at", now_timestamp())
        logger.info("Profile saved", extra={"op": "profile.save", "status": "ok", "tenant": self.tenant_id})
        return True

    def update(self, user_id: int, changes: Dict[str, Any]) -> Optional[ProfileRecord]:
        """Apply self-service changes and save; None when the profile is unknown."""
        record = self.hydrator.find(user_id)
        if record is None:
            return None
        updates: Dict[str, Any] = {}
        for name in SELF_SERVICE_FIELDS:
            if name not in changes or changes[name] is None:
                continue
            value = changes[name]
            if name == "skills":
                items = value if isinstance(value, (list, tuple)) else [value]
                updates[name] = [sanitize_text(item) for item in items if sanitize_text(item)]
            elif name == "notification_preferences":
                updates[name] = dict(value) if isinstance(value, dict) else {}
            elif name in ("internal_bio", "out_of_office_message"):
                updates[name] = str(value).strip()
            else:
                updates[name] = sanitize_text(value)
        saved = record.model_copy(update=updates)
        self.save(saved)
        return saved
