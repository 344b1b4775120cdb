"""
AlertEngine - threshold policy, detectors and prioritization for one customer.

Usage:
    from account_health.alerts import AlertEngine

    engine = AlertEngine()
    alerts = engine.generate(profile, now)
    for alert in alerts:
        print(alert.priority.value, alert.title)
"""

from dataclasses import replace
from datetime import datetime, timezone
from itertools import chain
from typing import Iterable, List, Optional

from ..config import DEFAULT_CONFIG, EngineConfig
from ..logger import get_logger
from ..profile import CustomerProfile, as_utc
from ..signals import ABOVE, BELOW, tier_points
from .detectors import DETECTORS
from .models import Alert, Priority
from .thresholds import AlertThresholds, calculate_thresholds

logger = get_logger(__name__)


class AlertEngine:
    """
    Runs every detector against a customer and orders the result.

    Priority score:
    - Severity: critical 40, high 30, medium 20, low 10
    - ARR: > $100K +20, > $50K +10, > $20K +5
    - Health: < 4 +15, < 6 +10, < 8 +5 (missing health counts as 5)

    Buckets: >= 70 urgent, >= 50 high, >= 30 medium, else low.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def thresholds(self, profile: CustomerProfile) -> AlertThresholds:
        return calculate_thresholds(profile, self.config.alerts)

    def generate(self, profile: CustomerProfile, now: Optional[datetime] = None) -> List[Alert]:
        """
        Detect and prioritize alerts for one customer.

        Args:
            profile: Validated customer profile
            now: Reference time (default: current UTC time)

        Returns:
            Alerts sorted by priority score, highest first
        """
        now = now or datetime.now(timezone.utc)
        thresholds = self.thresholds(profile)

        alerts = []
        for detect in DETECTORS:
            alert = detect(profile, now, thresholds, self.config.alerts)
            if alert is not None:
                alerts.append(alert)

        prioritized = self.prioritize(alerts, profile)
        logger.debug(
            "alerts generated",
            extra={
                "customer_id": profile.customer_id,
                "alert_count": len(prioritized),
                "types": [a.type.value for a in prioritized],
            },
        )
        return prioritized

    def priority_score(self, alert: Alert, profile: CustomerProfile) -> int:
        cfg = self.config.priority
        severity_points = dict(cfg.severity_points)
        health = profile.health_score if profile.health_score is not None else cfg.default_health_score
        return (
            severity_points.get(alert.severity.value, severity_points["low"])
            + tier_points(profile.arr, cfg.arr_bonus, ABOVE)
            + tier_points(health, cfg.health_bonus, BELOW)
        )

    def prioritize(self, alerts: Iterable[Alert], profile: CustomerProfile) -> List[Alert]:
        """
        Attach priority to each alert and sort descending by priority score.

        Alerts with equal scores keep their detection order.
        """
        ranked = []
        for alert in alerts:
            score = self.priority_score(alert, profile)
            ranked.append(replace(
                alert,
                priority=Priority(self.config.priority.get_priority(score)),
                priority_score=score,
            ))
        return sorted(ranked, key=lambda a: a.priority_score, reverse=True)


def rank_portfolio_alerts(alert_lists: Iterable[Iterable[Alert]]) -> List[Alert]:
    """
    Merge per-customer alert lists for a portfolio-wide view.

    Sorted by severity (critical first), then priority score so equal
    severities favor higher-value or less healthy customers, then newest first.
    """
    merged = list(chain.from_iterable(alert_lists))
    return sorted(
        merged,
        key=lambda a: (a.severity.rank, a.priority_score, as_utc(a.created_at).timestamp()),
        reverse=True,
    )
