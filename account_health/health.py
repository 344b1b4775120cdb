"""
Health score engine.

Combines up to seven signal categories into one normalized 0-10 score.
A category without data is skipped entirely, so the score is an average
over the evidence that is present rather than a penalty for missing data.
With no evidence at all the neutral score (5.0) is returned.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .integrations import IntegrationHealth
from .logger import get_logger
from .profile import CustomerProfile
from .signals import SignalContribution, WeightedSignal, clamp, fold_signals, mean, round_half_up

logger = get_logger(__name__)


@dataclass(frozen=True)
class HealthScoreResult:
    """
    Health score with the evidence behind it.

    Attributes:
        score: 0-10, one decimal
        applied_weight: Sum of weights of categories that had data (0 = no data)
        breakdown: Per-category value, weight and contribution
        integration_health: Sub-scores used by the integrations category
    """

    score: float
    applied_weight: float
    breakdown: Tuple[SignalContribution, ...]
    integration_health: IntegrationHealth

    @property
    def has_data(self) -> bool:
        return self.applied_weight > 0

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "appliedWeight": self.applied_weight,
            "breakdown": [
                {
                    "factor": row.name,
                    "value": round(row.value, 4),
                    "weight": row.weight,
                    "contribution": round(row.contribution, 4),
                }
                for row in self.breakdown
            ],
        }


class HealthScoreEngine:
    """
    Weighted health scoring over seven signal categories.

    Categories (evaluated in this fixed order):
    1. feedback: average rating / 10
    2. sentiment_trend: 1.0 if the last two points are non-decreasing, else 0.5
    3. ticket_volume: max(0, (10 - volume) / 10)
    4. product_usage: min(count, 4) / 4
    5. renewal_likelihood: high 1.0, medium 0.6, low 0.2
    6. social: min(linkedin + twitter, 10) / 10
    7. integrations: mean of available integration sub-scores / 100
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.weights = self.config.health

    def signals(
        self, profile: CustomerProfile, integration_health: IntegrationHealth
    ) -> List[WeightedSignal]:
        """Build the declarative signal list for a profile."""
        w = self.weights
        return [
            WeightedSignal("feedback", self._feedback(profile), w.feedback),
            WeightedSignal("sentiment_trend", self._sentiment(profile), w.sentiment_trend),
            WeightedSignal("ticket_volume", self._ticket_volume(profile), w.ticket_volume),
            WeightedSignal("product_usage", self._product_usage(profile), w.product_usage),
            WeightedSignal("renewal_likelihood", self._renewal(profile), w.renewal_likelihood),
            WeightedSignal("social", self._social(profile), w.social),
            WeightedSignal("integrations", integration_health.average(), w.integrations),
        ]

    def score(self, profile: CustomerProfile) -> HealthScoreResult:
        """
        Calculate the health score for one customer.

        Args:
            profile: Validated customer profile

        Returns:
            HealthScoreResult with score, applied weight and breakdown
        """
        integration_health = IntegrationHealth.from_metrics(
            profile.integrations, self.config.integrations
        )
        folded = fold_signals(self.signals(profile, integration_health))

        if folded.ratio is None:
            score = self.weights.neutral_score
        else:
            score = clamp(
                round_half_up(folded.ratio * self.weights.max_score, 1),
                0.0,
                self.weights.max_score,
            )

        logger.debug(
            "health score computed",
            extra={
                "customer_id": profile.customer_id,
                "score": score,
                "applied_weight": folded.applied_weight,
            },
        )
        return HealthScoreResult(
            score=score,
            applied_weight=folded.applied_weight,
            breakdown=folded.contributions,
            integration_health=integration_health,
        )

    # Signal definitions: each returns None when its input is absent

    def _feedback(self, profile: CustomerProfile) -> Optional[float]:
        if not profile.feedback:
            return None
        return mean([f.rating for f in profile.feedback]) / self.weights.feedback_scale

    def _sentiment(self, profile: CustomerProfile) -> Optional[float]:
        if len(profile.sentiment_trend) < 2:
            return None
        previous, latest = profile.sentiment_trend[-2:]
        if latest.score >= previous.score:
            return self.weights.sentiment_improving
        return self.weights.sentiment_declining

    def _ticket_volume(self, profile: CustomerProfile) -> Optional[float]:
        if profile.ticket_volume is None:
            return None
        ceiling = self.weights.ticket_volume_ceiling
        return max(0.0, (ceiling - profile.ticket_volume) / ceiling)

    def _product_usage(self, profile: CustomerProfile) -> Optional[float]:
        if not profile.product_usage:
            return None
        cap = self.weights.product_usage_cap
        return min(profile.product_count, cap) / cap

    def _renewal(self, profile: CustomerProfile) -> Optional[float]:
        if profile.renewal_likelihood is None:
            return None
        return dict(self.weights.renewal_values)[profile.renewal_likelihood.value]

    def _social(self, profile: CustomerProfile) -> Optional[float]:
        if profile.social_stats is None:
            return None
        cap = self.weights.social_cap
        return min(profile.social_stats.total, cap) / cap
