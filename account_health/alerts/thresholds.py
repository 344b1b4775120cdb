"""
Dynamic alert thresholds.

The same raw metric should alarm earlier for a customer who matters more
or is already struggling. Thresholds are computed once per customer per
evaluation and handed to every detector:

1. Base thresholds
2. ARR tier overrides (> $100K tightest, > $50K tighter)
3. Health score < 5: tighter feedback, engagement and decline limits
4. Product adoption: >= 3 products tighter engagement, 0 products looser
"""

from dataclasses import dataclass, replace

from ..config import DEFAULT_CONFIG, AlertConfig
from ..profile import CustomerProfile


@dataclass(frozen=True)
class AlertThresholds:
    negative_feedback_count: int
    low_engagement_days: int
    critical_issues_count: int
    support_ticket_count: int
    health_score_decline: float

    @classmethod
    def base(cls, config: AlertConfig = DEFAULT_CONFIG.alerts) -> "AlertThresholds":
        return cls(
            negative_feedback_count=config.negative_feedback_count,
            low_engagement_days=config.low_engagement_days,
            critical_issues_count=config.critical_issues_count,
            support_ticket_count=config.support_ticket_count,
            health_score_decline=config.health_score_decline,
        )

    def to_dict(self) -> dict:
        return {
            "negativeFeedbackCount": self.negative_feedback_count,
            "lowEngagementDays": self.low_engagement_days,
            "criticalIssuesCount": self.critical_issues_count,
            "supportTicketCount": self.support_ticket_count,
            "healthScoreDecline": self.health_score_decline,
        }


def calculate_thresholds(
    profile: CustomerProfile, config: AlertConfig = DEFAULT_CONFIG.alerts
) -> AlertThresholds:
    """
    Compute per-customer alert thresholds.

    Args:
        profile: Validated customer profile
        config: Base thresholds and adjustment policy

    Returns:
        AlertThresholds for this customer
    """
    thresholds = AlertThresholds.base(config)

    for min_arr, overrides in config.arr_overrides:
        if profile.arr > min_arr:
            thresholds = replace(thresholds, **dict(overrides))
            break

    health = profile.health_score if profile.health_score is not None else config.default_health_score
    if health < config.unhealthy_below:
        thresholds = replace(
            thresholds,
            negative_feedback_count=max(1, thresholds.negative_feedback_count - 1),
            low_engagement_days=max(3, thresholds.low_engagement_days - 3),
            health_score_decline=round(max(0.3, thresholds.health_score_decline - 0.2), 2),
        )

    if profile.product_count >= config.deep_adoption_products:
        thresholds = replace(
            thresholds,
            low_engagement_days=max(
                5, thresholds.low_engagement_days - config.deep_adoption_engagement_days
            ),
        )
    elif profile.product_count == 0:
        thresholds = replace(
            thresholds,
            low_engagement_days=thresholds.low_engagement_days + config.new_customer_grace_days,
        )

    return thresholds
