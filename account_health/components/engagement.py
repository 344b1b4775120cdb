"""Engagement recency risk component."""

from datetime import datetime
from typing import Optional

from ..profile import CustomerProfile, days_since
from ..signals import ABOVE, tier_points
from .base import BaseScorer


class EngagementScorer(BaseScorer):
    """
    Score based on days since the customer's last activity.

    Points:
    - > 30 days: 20 (gone quiet)
    - > 14 days: 12
    - > 7 days: 6
    - <= 7 days: 0 (active)
    """

    name = "engagement"

    @property
    def max_points(self) -> int:
        return self.config.engagement_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Calculate engagement recency score."""
        idle_days = days_since(profile.last_activity_at, now)
        if idle_days is None:
            return None
        return tier_points(idle_days, self.config.engagement_tiers, ABOVE)
