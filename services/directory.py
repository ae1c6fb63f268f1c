from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from models.profile_record import DirectoryPage, ProfileFilter, ProfileRecord
from ports.repos import AccountsRepoPort, AttributeStorePort
from services.hydrator import ProfileHydrator, meta_key


logger = logging.getLogger(__name__)


class ProfileDirectory:
    def __init__(self, hydrator: ProfileHydrator, accounts: AccountsRepoPort, attributes: AttributeStorePort):
        self.hydrator = hydrator
        self.accounts = accounts
        self.attributes = attributes

    @property
    def tenant_id(self) -> int:
        return self.hydrator.tenant_id

    def list(self, profile_filter: Optional[ProfileFilter] = None) -> DirectoryPage:
        """Visible profiles (unless include_hidden), ordered by first name.

        search_text goes to the repository's own search over login, email,
        nicename and display name. A missing or negative limit is unlimited.
        total counts the results of this page.
        """
        started = time.monotonic()
        f = profile_filter or ProfileFilter()
        meta_equals: Dict[str, str] = {}
        if f.department:
            meta_equals[meta_key("department")] = f.department
        if f.office_location:
            meta_equals[meta_key("office_location")] = f.office_location
        limit = f.limit if f.limit is not None and f.limit >= 0 else -1
        rows = self.accounts.query_accounts(
            self.tenant_id,
            meta_equals=meta_equals,
            visibility_key=None if f.include_hidden else meta_key("is_visible"),
            search=f.search_text or None,
            limit=limit,
            offset=f.offset or 0,
        )
        results = [self.hydrator.hydrate_account(row) for row in rows]
        logger.debug(
            "Directory listed %d profiles", len(results),
            extra={"op": "directory.list", "status": "ok", "tenant": self.tenant_id,
                   "duration_ms": int((time.monotonic() - started) * 1000)},
        )
        return DirectoryPage(total=len(results), results=results)

    def get(self, user_id: Optional[int]) -> Optional[ProfileRecord]:
        return self.hydrator.find(user_id)

    # Both facets scan every stored value of their key across all users and
    # ignore visibility; fine at intranet scale, revisit before large tenants.
    def get_departments(self) -> List[str]:
        return self.attributes.distinct_values(self.tenant_id, meta_key("department"))

    def get_office_locations(self) -> List[str]:
        return self.attributes.distinct_values(self.tenant_id, meta_key("office_location"))
