"""Feedback sentiment risk component."""

from datetime import datetime, timedelta
from typing import Optional

from ..profile import CustomerProfile, as_utc
from ..signals import BELOW, mean, tier_points
from .base import BaseScorer


class SentimentScorer(BaseScorer):
    """
    Score based on recent feedback ratings.

    Uses the last 5 feedback entries (in recorded order) dated within
    the past 90 days.

    Points (mean rating):
    - < 2: 10
    - < 3: 7
    - < 3.5: 4
    - < 4: 2
    - >= 4: 0
    - no recent feedback: 2
    """

    name = "sentiment"

    @property
    def max_points(self) -> int:
        return self.config.sentiment_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Calculate feedback sentiment score."""
        cutoff = as_utc(now) - timedelta(days=self.config.sentiment_window_days)
        recent = [
            f for f in profile.feedback
            if f.date is not None and as_utc(f.date) > cutoff
        ][-self.config.sentiment_sample_size:]

        if not recent:
            return self.config.sentiment_no_data

        avg_rating = mean([f.rating for f in recent])
        return tier_points(avg_rating, self.config.sentiment_tiers, BELOW)
