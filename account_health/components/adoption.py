"""Product adoption breadth risk component."""

from datetime import datetime
from typing import Optional

from ..profile import CustomerProfile
from .base import BaseScorer


class AdoptionScorer(BaseScorer):
    """
    Score based on the number of distinct products in use.

    A customer on one product has a single point of failure.

    Points:
    - 0 products: 10
    - 1 product: 6
    - 2 products: 3
    - 3+ products: 0 (well adopted)
    """

    name = "adoption"

    @property
    def max_points(self) -> int:
        return self.config.adoption_max

    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """Calculate product adoption score. Always applicable."""
        return dict(self.config.adoption_points).get(
            profile.product_count, self.config.adoption_default
        )
