"""Renewal likelihood risk component."""

from datetime import datetime
from typing import Optional

from ..profile import CustomerProfile
from .base import BaseScorer


class RenewalScorer(BaseScorer):
    """
    Score based on the stored renewal likelihood.

    Points:
    - low: 15
    - medium: 8
    - high: 0
    """

    name = "renewal"

    @property
    def max_points(self) -> int:
        return self.config.renewal_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Map renewal likelihood to risk points."""
        if profile.renewal_likelihood is None:
            return None
        return dict(self.config.renewal_points).get(profile.renewal_likelihood.value, 0)
