"""
Trend analysis over customer time series.

- analyze_trend: direction and confidence of any numeric series
- health_trend: mean step change of recent health score history
- engagement_trend: engagement proxy from integration sync recency and ticket load
- satisfaction_trend: recent vs older halves of the latest feedback ratings
- trend_patterns: the three metric trends combined into one outlook
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .profile import CustomerProfile, as_utc, days_since
from .signals import mean, tier_points, AT_MOST


class TrendDirection(str, Enum):
    """Direction of a raw numeric series."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class Outlook(str, Enum):
    """Direction of a customer metric, read as good or bad news."""

    IMPROVING = "improving"
    SLIGHTLY_IMPROVING = "slightly_improving"
    STABLE = "stable"
    SLIGHTLY_DECLINING = "slightly_declining"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient_data"

    @property
    def vote(self) -> int:
        if self is Outlook.IMPROVING:
            return 1
        if self is Outlook.DECLINING:
            return -1
        return 0


@dataclass(frozen=True)
class TrendResult:
    direction: TrendDirection
    confidence: float
    change_pct: float = 0.0
    points: int = 0

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.value,
            "confidence": self.confidence,
            "changePct": self.change_pct,
            "points": self.points,
        }


@dataclass(frozen=True)
class MetricTrend:
    direction: Outlook
    confidence: float
    change: Optional[float] = None
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {"direction": self.direction.value, "confidence": self.confidence}
        if self.change is not None:
            data["change"] = self.change
        data.update(self.detail)
        return data


@dataclass(frozen=True)
class TrendPatterns:
    health: MetricTrend
    engagement: MetricTrend
    satisfaction: MetricTrend
    predicted_direction: Outlook

    def to_dict(self) -> dict:
        return {
            "healthTrend": self.health.to_dict(),
            "engagementTrend": self.engagement.to_dict(),
            "satisfactionTrend": self.satisfaction.to_dict(),
            "predictedDirection": self.predicted_direction.value,
        }


_NO_DATA = MetricTrend(direction=Outlook.INSUFFICIENT_DATA, confidence=0.0)


class TrendAnalyzer:
    """Direction and confidence of customer time series."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.trends = self.config.trends

    def analyze_trend(
        self, series: Sequence[float], window_size: Optional[int] = None
    ) -> TrendResult:
        """
        Percent change between the endpoints of a series.

        Args:
            series: Chronological values (oldest first)
            window_size: Only use the most recent N points (N >= 2)

        Returns:
            TrendResult: increasing above +5%, decreasing below -5%, else stable.
            Fewer than 2 points gives insufficient_data with confidence 0.

        Raises:
            ValueError: If a value is not finite or window_size < 2
        """
        if window_size is not None and window_size < 2:
            raise ValueError(f"window_size must be at least 2, got {window_size}")

        values = [float(v) for v in series]
        if any(not math.isfinite(v) for v in values):
            raise ValueError("Trend series contains non-finite values")
        if window_size is not None:
            values = values[-window_size:]

        if len(values) < 2:
            return TrendResult(TrendDirection.INSUFFICIENT_DATA, 0.0, 0.0, len(values))

        first, last = values[0], values[-1]
        if first == 0:
            change = 0.0 if last == 0 else math.copysign(100.0, last)
        else:
            change = (last - first) / abs(first) * 100

        cfg = self.trends
        if change > cfg.change_threshold_pct:
            direction = TrendDirection.INCREASING
        elif change < -cfg.change_threshold_pct:
            direction = TrendDirection.DECREASING
        else:
            direction = TrendDirection.STABLE

        confidence = min(abs(change) * cfg.confidence_per_pct, cfg.max_confidence)
        return TrendResult(direction, round(confidence, 2), round(change, 2), len(values))

    def health_trend(self, profile: CustomerProfile) -> MetricTrend:
        """Mean step change over the last 5 health score history points."""
        history = profile.health_score_history
        if len(history) < 2:
            return _NO_DATA

        cfg = self.trends
        recent = [p.score for p in history[-cfg.health_window:]]
        avg_change = mean([b - a for a, b in zip(recent, recent[1:])])

        if avg_change > cfg.health_step_threshold:
            direction = Outlook.IMPROVING
        elif avg_change < -cfg.health_step_threshold:
            direction = Outlook.DECLINING
        else:
            direction = Outlook.STABLE

        confidence = min(abs(avg_change) * cfg.health_confidence_factor, cfg.max_confidence)
        return MetricTrend(direction, round(confidence, 2), round(avg_change, 3))

    def engagement_trend(self, profile: CustomerProfile, now: Optional[datetime] = None) -> MetricTrend:
        """
        Engagement proxy from integration activity, baseline 50.

        Jira sync recency counts only when there are open issues; an
        unknown sync time counts as stale. Zendesk open tickets 1-3 read
        as healthy engagement, more than 10 as overload.
        """
        now = now or datetime.now(timezone.utc)
        cfg = self.trends
        score = cfg.engagement_baseline

        jira = profile.integrations.jira
        if jira is not None and jira.open_issues:
            sync_days = days_since(jira.last_sync, now)
            if sync_days is None:
                score += cfg.engagement_stale_sync
            else:
                score += tier_points(
                    sync_days, cfg.engagement_sync_tiers, AT_MOST, cfg.engagement_stale_sync
                )

        zendesk = profile.integrations.zendesk
        if zendesk is not None and zendesk.open_tickets:
            if zendesk.open_tickets <= cfg.engagement_healthy_tickets:
                score += cfg.engagement_healthy_bonus
            elif zendesk.open_tickets > cfg.engagement_overload_tickets:
                score += cfg.engagement_overload_penalty

        if score > cfg.engagement_improving_above:
            direction = Outlook.IMPROVING
        elif score < cfg.engagement_declining_below:
            direction = Outlook.DECLINING
        else:
            direction = Outlook.STABLE

        confidence = float(abs(score - cfg.engagement_baseline) * 2)
        return MetricTrend(direction, confidence, detail={"score": score})

    def satisfaction_trend(self, profile: CustomerProfile) -> MetricTrend:
        """
        Compare the newer and older halves of the 5 most recent ratings.

        Ratings are ordered newest first, so the first half is the more
        recent one: change = newer mean - older mean.
        """
        cfg = self.trends
        dated = [f for f in profile.feedback if f.date is not None]
        recent = sorted(dated, key=lambda f: as_utc(f.date), reverse=True)[:cfg.satisfaction_sample_size]
        if len(recent) < 2:
            return _NO_DATA

        ratings = [f.rating if f.rating else cfg.default_rating for f in recent]
        split = math.ceil(len(ratings) / 2)
        newer, older = ratings[:split], ratings[split:]
        change = mean(newer) - mean(older)

        if change > cfg.satisfaction_change_threshold:
            direction = Outlook.IMPROVING
        elif change < -cfg.satisfaction_change_threshold:
            direction = Outlook.DECLINING
        else:
            direction = Outlook.STABLE

        confidence = min(abs(change) * cfg.satisfaction_confidence_factor, cfg.max_confidence)
        return MetricTrend(
            direction,
            round(confidence, 2),
            round(change, 3),
            detail={"avgRating": round(mean(ratings), 2)},
        )

    def trend_patterns(self, profile: CustomerProfile, now: Optional[datetime] = None) -> TrendPatterns:
        """Combine health, engagement and satisfaction trends into one outlook."""
        health = self.health_trend(profile)
        engagement = self.engagement_trend(profile, now)
        satisfaction = self.satisfaction_trend(profile)

        total = health.direction.vote + engagement.direction.vote + satisfaction.direction.vote
        if total >= 2:
            predicted = Outlook.IMPROVING
        elif total <= -2:
            predicted = Outlook.DECLINING
        elif total == 1:
            predicted = Outlook.SLIGHTLY_IMPROVING
        elif total == -1:
            predicted = Outlook.SLIGHTLY_DECLINING
        else:
            predicted = Outlook.STABLE

        return TrendPatterns(health, engagement, satisfaction, predicted)
