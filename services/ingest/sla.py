"""
SLA threshold table
Resolution targets per priority label, taken from the account's SLA policy
"""

from typing import Optional

import structlog

from shared.errors import FreshdeskError
from shared.schemas import SLAPolicy, TicketPriority

from .client import FreshdeskClient

logger = structlog.get_logger()

# Used for any priority the policy does not cover (7 days)
FALLBACK_SECONDS = 7 * 24 * 60 * 60

POLICY_PRIORITY_KEYS = {
    "priority_1": TicketPriority.LOW.value,
    "priority_2": TicketPriority.MEDIUM.value,
    "priority_3": TicketPriority.HIGH.value,
    "priority_4": TicketPriority.URGENT.value,
}


class SLAThresholdTable:
    """
    Mapping of priority label -> allowed resolution time in seconds.

    Only the first policy returned by the API is used. Labels missing from
    the policy fall back to FALLBACK_SECONDS at evaluation time.
    """

    def __init__(self, thresholds: Optional[dict[str, int]] = None):
        self.thresholds: dict[str, int] = dict(thresholds or {})
        self.populated = False

    def __len__(self) -> int:
        return len(self.thresholds)

    def threshold_for(self, label: str) -> int:
        """Allowed seconds for a priority label"""
        return self.thresholds.get(label, FALLBACK_SECONDS)

    def apply_policy(self, policy: SLAPolicy) -> dict[str, int]:
        """Store resolve_within for each priority key present in the policy"""
        for key, label in POLICY_PRIORITY_KEYS.items():
            target = policy.sla_target.get(key)
            if target is not None and target.resolve_within is not None:
                self.thresholds[label] = target.resolve_within
        self.populated = True
        return self.thresholds

    async def populate(self, client: FreshdeskClient) -> bool:
        """
        Load thresholds from the first SLA policy on the account

        Failures are logged and leave the table as it was.

        Returns:
            True if a policy was applied
        """
        try:
            policies = await client.fetch_sla_policies()
        except FreshdeskError as e:
            logger.warning("Failed to fetch SLA policies", error=str(e))
            return False

        if not policies:
            logger.warning("No SLA policies returned")
            return False

        self.apply_policy(policies[0])
        logger.info("Loaded SLA limits", policy=policies[0].name, thresholds=self.thresholds)
        return True
