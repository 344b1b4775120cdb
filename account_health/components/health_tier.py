"""Health score tier risk component."""

from datetime import datetime
from typing import Optional

from ..profile import CustomerProfile
from ..signals import BELOW, tier_points
from .base import BaseScorer


class HealthTierScorer(BaseScorer):
    """
    Score based on the stored 0-10 health score.

    Points:
    - < 4: 25 (critical health)
    - < 6: 15
    - < 8: 8
    - >= 8: 0 (healthy)
    """

    name = "health"

    @property
    def max_points(self) -> int:
        return self.config.health_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Map health score to risk points."""
        if profile.health_score is None:
            return None
        return tier_points(profile.health_score, self.config.health_tiers, BELOW)
