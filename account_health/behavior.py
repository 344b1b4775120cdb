"""
Behavior scorer.

Rates how a customer engages across product, support, development, sales
and activity on a 0-100 scale and places it in one of five bands
(Champion / Advocate / Passive / At Risk / Critical).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, EngineConfig, Tiers
from .integrations import IntegrationHealth
from .profile import CustomerProfile, days_since
from .signals import AT_LEAST, AT_MOST, Comparison


# Factor labels, one per tier plus the fallback
ADOPTION_LABELS = (
    "High product adoption",
    "Moderate product adoption",
    "Basic product adoption",
    "Low product adoption",
)
SUPPORT_LABELS = (
    "Excellent support satisfaction",
    "Good support satisfaction",
    "Moderate support satisfaction",
    "Poor support satisfaction",
)
DEVELOPMENT_LABELS = (
    "Active development collaboration",
    "Moderate development engagement",
    "Limited development engagement",
)
SALES_LABELS = (
    "Strong sales relationship",
    "Moderate sales engagement",
    "Limited sales engagement",
)
ACTIVITY_LABELS = (
    "Highly active customer",
    "Regular activity pattern",
    "Moderate activity level",
    "Low activity level",
)


@dataclass(frozen=True)
class BehaviorResult:
    score: int
    category: str
    factors: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {"score": self.score, "category": self.category, "factors": list(self.factors)}


def _labelled_tier(
    value: float, tiers: Tiers, labels: Sequence[str], compare: Comparison
) -> Tuple[int, str]:
    """First matching tier's points and label, else 0 and the fallback label."""
    for (threshold, points), label in zip(tiers, labels):
        if compare(value, threshold):
            return points, label
    return 0, labels[-1]


class BehaviorScorer:
    """
    Additive behavior score.

    - Product adoption: >=3 products 25, >=2 15, >=1 8
    - Support health: >=85 20, >=70 15, >=50 8
    - Development health: >=80 20, >=60 12
    - Sales health: >=80 15, >=60 10
    - Activity: <=7 days 20, <=14 15, <=30 8

    Missing integration sub-scores count as 0, unknown activity as 999 days.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.behavior = self.config.behavior

    def score(
        self,
        profile: CustomerProfile,
        now: Optional[datetime] = None,
        integration_health: Optional[IntegrationHealth] = None,
    ) -> BehaviorResult:
        """
        Calculate the behavior score for one customer.

        Args:
            profile: Validated customer profile
            now: Reference time for activity recency (default: current UTC time)
            integration_health: Precomputed sub-scores; when omitted the
                profile's stored metrics are used, else they are derived
                from its integration metrics

        Returns:
            BehaviorResult with score, category and one factor per dimension
        """
        now = now or datetime.now(timezone.utc)
        cfg = self.behavior
        if integration_health is None:
            integration_health = self._integration_health(profile)

        idle_days = days_since(profile.last_activity_at, now)
        if idle_days is None:
            idle_days = cfg.unknown_activity_days

        parts = [
            _labelled_tier(profile.product_count, cfg.adoption_tiers, ADOPTION_LABELS, AT_LEAST),
            _labelled_tier(integration_health.support or 0, cfg.support_tiers, SUPPORT_LABELS, AT_LEAST),
            _labelled_tier(
                integration_health.development or 0, cfg.development_tiers, DEVELOPMENT_LABELS, AT_LEAST
            ),
            _labelled_tier(integration_health.sales or 0, cfg.sales_tiers, SALES_LABELS, AT_LEAST),
            _labelled_tier(idle_days, cfg.activity_tiers, ACTIVITY_LABELS, AT_MOST),
        ]

        total = min(sum(points for points, _ in parts), cfg.max_score)
        return BehaviorResult(
            score=total,
            category=cfg.get_category(total),
            factors=tuple(label for _, label in parts),
        )

    def _integration_health(self, profile: CustomerProfile) -> IntegrationHealth:
        stored = profile.metrics
        if stored is not None:
            return IntegrationHealth(
                development=stored.development_health,
                support=stored.support_health,
                sales=stored.sales_health,
            )
        return IntegrationHealth.from_metrics(profile.integrations, self.config.integrations)
