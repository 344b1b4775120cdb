"""Support issue pressure risk component."""

from datetime import datetime
from typing import Optional

from ..profile import CustomerProfile
from ..signals import ABOVE, BELOW, tier_points
from .base import BaseScorer


class SupportScorer(BaseScorer):
    """
    Score based on issue-tracker and ticketing pressure.

    Jira (when present):
    - critical issues > 3: 8, > 1: 5, > 0: 2
    - open issues > 15: 6, > 8: 4, > 3: 2

    Zendesk (when present):
    - open tickets > 10: 4, > 5: 2
    - satisfaction < 60: 6, < 80: 3 (unknown satisfaction counts as 100)

    Capped at 20. Not applicable when neither source is present.
    """

    name = "support"

    @property
    def max_points(self) -> int:
        return self.config.support_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Calculate support pressure score."""
        jira = profile.integrations.jira
        zendesk = profile.integrations.zendesk
        if jira is None and zendesk is None:
            return None

        risk = 0
        if jira is not None:
            risk += tier_points(jira.critical_issues, self.config.jira_critical_tiers, ABOVE)
            risk += tier_points(jira.open_issues, self.config.jira_open_tiers, ABOVE)

        if zendesk is not None:
            satisfaction = zendesk.satisfaction_score
            if satisfaction is None:
                satisfaction = self.config.unknown_satisfaction
            risk += tier_points(zendesk.open_tickets, self.config.zendesk_open_tiers, ABOVE)
            risk += tier_points(satisfaction, self.config.zendesk_satisfaction_tiers, BELOW)

        return min(risk, self.max_points)
