"""Base class for churn-risk dimension scorers."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..profile import CustomerProfile

if TYPE_CHECKING:
    from ..config import RiskConfig


class BaseScorer(ABC):
    """
    Abstract base class for risk dimensions.

    Each dimension scores one aspect of churn risk on its own point
    budget. A dimension whose input is absent returns None and is left
    out of both the points and the max points of the composite.
    """

    name: str = "base"

    def __init__(self, config: "RiskConfig"):
        """
        Initialize scorer with configuration.

        Args:
            config: RiskConfig instance with tiers and point budgets
        """
        self.config = config

    @property
    @abstractmethod
    def max_points(self) -> int:
        """Point budget of this dimension."""
        pass

    @abstractmethod
    def score(self, profile: CustomerProfile, now: datetime) -> Optional[int]:
        """
        Calculate dimension points for one customer.

        Args:
            profile: Validated customer profile
            now: Reference time for recency calculations

        Returns:
            Points in [0, max_points], or None when not applicable
        """
        pass
