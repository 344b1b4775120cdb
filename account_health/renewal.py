"""
Renewal likelihood estimator.

Estimates renewal likelihood independently of the value stored on the
profile, for validation and manual override review. The estimate is
advisory: it never overwrites profile.renewal_likelihood.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .profile import CustomerProfile, RenewalLikelihood, days_since
from .signals import round_half_up


@dataclass(frozen=True)
class RenewalEstimate:
    likelihood: RenewalLikelihood
    score: float  # 0-1, two decimals
    factors: Tuple[str, ...]

    def disagrees_with(self, profile: CustomerProfile) -> bool:
        """True when the stored likelihood is set and differs from this estimate."""
        stored = profile.renewal_likelihood
        return stored is not None and stored != self.likelihood

    def to_dict(self) -> dict:
        return {
            "likelihood": self.likelihood.value,
            "score": self.score,
            "factors": list(self.factors),
        }


class RenewalLikelihoodEstimator:
    """
    Weighted sum of five 0-1 factors.

    Weights:
    - Health score / 10: 0.30
    - Product usage breadth (saturates at 3 products): 0.20
    - Support satisfaction / 100: 0.25
    - Inverse open-ticket volume (0 at 20 tickets): 0.15
    - Activity recency (0 at 30 days): 0.10

    Factors without data contribute nothing. Thresholds: >=0.7 high,
    >=0.4 medium, else low.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.renewal = self.config.renewal

    def estimate(self, profile: CustomerProfile, now: Optional[datetime] = None) -> RenewalEstimate:
        """
        Estimate renewal likelihood for one customer.

        Args:
            profile: Validated customer profile
            now: Reference time for activity recency (default: current UTC time)

        Returns:
            RenewalEstimate with likelihood, score and explanatory factors
        """
        now = now or datetime.now(timezone.utc)
        cfg = self.renewal
        score = 0.0
        factors: List[str] = []

        if profile.health_score is not None:
            score += (profile.health_score / 10) * cfg.health_weight
            factors.append(f"Health Score: {profile.health_score:g}/10")

        if profile.product_count > 0:
            usage = min(profile.product_count / cfg.usage_saturation, 1)
            score += usage * cfg.usage_weight
            factors.append(f"Product Usage: {profile.product_count} products")

        zendesk = profile.integrations.zendesk
        if zendesk is not None and zendesk.satisfaction_score is not None:
            score += (zendesk.satisfaction_score / 100) * cfg.satisfaction_weight
            factors.append(f"Support Satisfaction: {zendesk.satisfaction_score:g}%")

        jira = profile.integrations.jira
        total_tickets = (jira.open_issues if jira else 0) + (zendesk.open_tickets if zendesk else 0)
        if total_tickets > 0:
            tickets = max(0.0, 1 - total_tickets / cfg.ticket_saturation)
            score += tickets * cfg.tickets_weight
            factors.append(f"Open Tickets: {total_tickets}")

        idle_days = days_since(profile.last_activity_at, now)
        if idle_days is not None:
            activity = max(0.0, 1 - idle_days / cfg.activity_saturation_days)
            score += min(activity, 1.0) * cfg.activity_weight
            factors.append(f"Days Since Activity: {idle_days}")

        if score >= cfg.high_threshold:
            likelihood = RenewalLikelihood.HIGH
        elif score >= cfg.medium_threshold:
            likelihood = RenewalLikelihood.MEDIUM
        else:
            likelihood = RenewalLikelihood.LOW

        return RenewalEstimate(
            likelihood=likelihood,
            score=round_half_up(score, 2),
            factors=tuple(factors),
        )
