from __future__ import annotations

import logging
from typing import List, Optional, Set

from models.profile_record import OrgChart, ProfileRecord
from ports.repos import AccountsRepoPort, AttributeStorePort
from services.hydrator import ProfileHydrator, meta_key


logger = logging.getLogger(__name__)


class OrgChartResolver:
    """Reporting lines derived from each profile's reports_to pointer.

    reports_to is never validated on write, so chains may loop back on
    themselves; every walk here is bounded by a seen-set.
    """

    def __init__(self, hydrator: ProfileHydrator, accounts: AccountsRepoPort, attributes: AttributeStorePort):
        self.hydrator = hydrator
        self.accounts = accounts
        self.attributes = attributes

    def get_manager(self, profile: ProfileRecord) -> Optional[ProfileRecord]:
        if not profile.reports_to:
            return None
        return self.hydrator.find(profile.reports_to)

    def get_reporting_chain(self, profile: ProfileRecord) -> List[ProfileRecord]:
        """Managers above profile, immediate manager first."""
        chain: List[ProfileRecord] = []
        seen: Set[int] = {profile.user_id}
        current = profile
        while current.reports_to:
            if current.reports_to in seen:
                logger.warning(
                    "Reporting cycle at user %s -> %s", current.user_id, current.reports_to,
                    extra={"op": "orgchart.chain", "status": "cycle", "tenant": self.hydrator.tenant_id},
                )
                break
            manager = self.hydrator.find(current.reports_to)
            if manager is None:
                break
            chain.append(manager)
            seen.add(manager.user_id)
            current = manager
        return chain

    def get_direct_reports(self, manager_id: int) -> List[ProfileRecord]:
        """Profiles whose reports_to equals manager_id, ordered by display name.

        There is no reverse index: this scans every reports_to attribute, O(n)
        in the number of profiles.
        """
        if not manager_id:
            return []
        ids = self.attributes.user_ids_with_value(self.hydrator.tenant_id, meta_key("reports_to"), str(int(manager_id)))
        rows = self.accounts.get_accounts(ids, order_by="display_name")
        return [self.hydrator.hydrate_account(row) for row in rows]

    def org_chart(self, user_id: Optional[int]) -> Optional[OrgChart]:
        profile = self.hydrator.find(user_id)
        if profile is None:
            return None
        return OrgChart(
            user=profile,
            reporting_chain=self.get_reporting_chain(profile),
            direct_reports=self.get_direct_reports(profile.user_id),
        )
