"""
Portfolio summary.

Evaluates every customer independently, collects one row per customer
into a DataFrame validated against PORTFOLIO_FRAME_SCHEMA, then reduces
the frame to dashboard aggregates.

Usage:
    from account_health import summarize_portfolio

    summary = summarize_portfolio(profiles, now)
    print(summary.health_distribution)
    print(summary.get_high_risk()[["NAME", "RISK_SCORE"]])
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .alerts import Alert, AlertEngine, Severity, rank_portfolio_alerts
from .behavior import BehaviorScorer
from .config import DEFAULT_CONFIG, EngineConfig
from .health import HealthScoreEngine
from .logger import get_logger
from .profile import CustomerProfile
from .renewal import RenewalLikelihoodEstimator
from .schemas import BEHAVIOR_CATEGORIES, OUTLOOKS, PORTFOLIO_FRAME_SCHEMA, RISK_LEVELS
from .scorer import LEVEL_ORDER, RiskScorer
from .signals import round_half_up
from .trends import TrendAnalyzer

logger = get_logger(__name__)

# Bucket labels, best first; edges are lower bounds (inclusive)
HEALTH_BUCKETS = ["9-10 Excellent", "7-8 Good", "5-6 Fair", "3-4 Poor", "1-2 Critical"]
HEALTH_EDGES = [-np.inf, 3, 5, 7, 9, np.inf]

ARR_BUCKETS = ["$100K+", "$50K-$100K", "$25K-$50K", "$10K-$25K", "<$10K"]
ARR_EDGES = [-np.inf, 10000, 25000, 50000, 100000, np.inf]

SEVERITIES = [s.value for s in Severity]

COLUMNS = [
    "CUSTOMER_ID",
    "NAME",
    "ARR",
    "HEALTH_SCORE",
    "RISK_SCORE",
    "RISK_LEVEL",
    "BEHAVIOR_SCORE",
    "BEHAVIOR_CATEGORY",
    "OUTLOOK",
    "RENEWAL_ESTIMATE",
    "ALERT_COUNT",
    *[f"{s.upper()}_ALERTS" for s in SEVERITIES],
]


@dataclass
class PortfolioSummary:
    """
    Per-customer frame plus portfolio aggregates.

    Distributions map bucket label -> {"count", "percentage"}; count maps
    always list every category, zero-filled.
    """

    df: pd.DataFrame
    total_customers: int
    health_distribution: Dict[str, dict]
    arr_distribution: Dict[str, dict]
    behavior_counts: Dict[str, int]
    outlook_counts: Dict[str, int]
    risk_level_counts: Dict[str, int]
    average_risk_score: float
    average_health_score: float
    alert_counts: Dict[str, int]
    integration_counts: Dict[str, int]
    alerts: List[Alert] = field(default_factory=list)

    def get_high_risk(self, min_level: str = "high") -> pd.DataFrame:
        """Customers at or above a risk level, riskiest first."""
        valid_levels = LEVEL_ORDER[LEVEL_ORDER.index(min_level):]
        high = self.df[self.df["RISK_LEVEL"].isin(valid_levels)]
        return high.sort_values("RISK_SCORE", ascending=False)

    def to_dict(self) -> dict:
        return {
            "totalCustomers": self.total_customers,
            "healthDistribution": self.health_distribution,
            "arrDistribution": self.arr_distribution,
            "behaviorCategories": self.behavior_counts,
            "trendOutlook": self.outlook_counts,
            "riskLevels": self.risk_level_counts,
            "averageRiskScore": self.average_risk_score,
            "averageHealthScore": self.average_health_score,
            "alerts": self.alert_counts,
            "integrations": self.integration_counts,
        }


def _distribution(values: pd.Series, edges: list, labels: List[str]) -> Dict[str, dict]:
    """Bucket counts with whole-number percentages of the total."""
    total = len(values)
    # pd.cut labels run low to high; buckets are reported best first
    buckets = pd.cut(values, bins=edges, labels=labels[::-1], right=False)
    counts = buckets.value_counts().reindex(labels, fill_value=0)
    return {
        label: {
            "count": int(count),
            "percentage": int(round_half_up(count / total * 100)) if total else 0,
        }
        for label, count in counts.items()
    }


def _counts(values: pd.Series, categories: List[str]) -> Dict[str, int]:
    counts = values.value_counts().reindex(categories, fill_value=0)
    return {str(k): int(v) for k, v in counts.items()}


def _evaluate(
    profile: CustomerProfile,
    now: datetime,
    engines: dict,
) -> tuple:
    health = engines["health"].score(profile)
    risk = engines["risk"].score(profile, now)
    behavior = engines["behavior"].score(profile, now)
    patterns = engines["trends"].trend_patterns(profile, now)
    renewal = engines["renewal"].estimate(profile, now)
    alerts = engines["alerts"].generate(profile, now)

    row = {
        "CUSTOMER_ID": profile.customer_id,
        "NAME": profile.name,
        "ARR": float(profile.arr),
        "HEALTH_SCORE": health.score,
        "RISK_SCORE": risk.score,
        "RISK_LEVEL": risk.level,
        "BEHAVIOR_SCORE": behavior.score,
        "BEHAVIOR_CATEGORY": behavior.category,
        "OUTLOOK": patterns.predicted_direction.value,
        "RENEWAL_ESTIMATE": renewal.likelihood.value,
        "ALERT_COUNT": len(alerts),
    }
    for severity in SEVERITIES:
        row[f"{severity.upper()}_ALERTS"] = sum(1 for a in alerts if a.severity.value == severity)
    return row, alerts


def summarize_portfolio(
    profiles: Iterable[CustomerProfile],
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> PortfolioSummary:
    """
    Evaluate and aggregate a portfolio of customers.

    Args:
        profiles: Validated customer profiles
        now: Reference time shared by every customer (default: current UTC time)
        config: EngineConfig instance. Uses DEFAULT_CONFIG if None.

    Returns:
        PortfolioSummary; an empty portfolio yields zero counts and averages

    Raises:
        pandera.errors.SchemaError: If a per-customer row is out of range
    """
    now = now or datetime.now(timezone.utc)
    config = config or DEFAULT_CONFIG
    engines = {
        "health": HealthScoreEngine(config),
        "risk": RiskScorer(config),
        "behavior": BehaviorScorer(config),
        "trends": TrendAnalyzer(config),
        "renewal": RenewalLikelihoodEstimator(config),
        "alerts": AlertEngine(config),
    }

    rows = []
    alert_lists = []
    integration_counts = {"jira": 0, "zendesk": 0, "hubspot": 0}
    for profile in profiles:
        row, alerts = _evaluate(profile, now, engines)
        rows.append(row)
        alert_lists.append(alerts)
        for source in integration_counts:
            if getattr(profile.integrations, source) is not None:
                integration_counts[source] += 1

    df = PORTFOLIO_FRAME_SCHEMA.validate(pd.DataFrame(rows, columns=COLUMNS))
    total = len(df)

    alert_counts = {
        severity: int(df[f"{severity.upper()}_ALERTS"].sum()) for severity in SEVERITIES
    }
    summary = PortfolioSummary(
        df=df,
        total_customers=total,
        health_distribution=_distribution(df["HEALTH_SCORE"], HEALTH_EDGES, HEALTH_BUCKETS),
        arr_distribution=_distribution(df["ARR"], ARR_EDGES, ARR_BUCKETS),
        behavior_counts=_counts(df["BEHAVIOR_CATEGORY"], BEHAVIOR_CATEGORIES),
        outlook_counts=_counts(df["OUTLOOK"], OUTLOOKS),
        risk_level_counts=_counts(df["RISK_LEVEL"], RISK_LEVELS),
        average_risk_score=round(float(df["RISK_SCORE"].mean()), 1) if total else 0.0,
        average_health_score=round(float(df["HEALTH_SCORE"].mean()), 1) if total else 0.0,
        alert_counts=alert_counts,
        integration_counts=integration_counts,
        alerts=rank_portfolio_alerts(alert_lists),
    )

    logger.debug(
        "portfolio summarized",
        extra={"total_customers": total, "alerts": alert_counts},
    )
    return summary
