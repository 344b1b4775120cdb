"""
RiskScorer - composite 0-100 churn-risk score from six dimensions.

Usage:
    from account_health import RiskScorer, EngineConfig

    # With default config
    scorer = RiskScorer()
    result = scorer.score(profile, now)

    # Batch scoring
    batch = scorer.score_portfolio(profiles, now)
    print(batch.df[["CUSTOMER_ID", "RISK_SCORE", "RISK_LEVEL"]])
    print(batch.summary())
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

import pandas as pd

from .components import (
    AdoptionScorer,
    EngagementScorer,
    HealthTierScorer,
    RenewalScorer,
    SentimentScorer,
    SupportScorer,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .logger import get_logger
from .profile import CustomerProfile
from .signals import WeightedSignal, fold_signals, round_half_up

logger = get_logger(__name__)

LEVEL_ORDER = ["low", "medium", "high", "critical"]


@dataclass(frozen=True)
class RiskResult:
    """
    Churn-risk score for one customer.

    Attributes:
        score: 0-100, higher = more likely to churn
        level: low / medium / high / critical
        applied_max_points: Sum of max points of applicable dimensions
        components: Points per dimension (None = not applicable)
    """

    score: int
    level: str
    applied_max_points: int
    components: Dict[str, Optional[int]]

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "appliedMaxPoints": self.applied_max_points,
            "components": dict(self.components),
        }


@dataclass
class ScoringResult:
    """
    Container for batch scoring results with component breakdown.

    Attributes:
        df: One row per customer with component and total scores
        component_columns: List of component score column names
    """

    df: pd.DataFrame
    component_columns: list[str]

    def get_high_risk(self, min_level: str = "high") -> pd.DataFrame:
        """
        Get customers at or above a risk level.

        Args:
            min_level: Minimum risk level ("low", "medium", "high", "critical")

        Returns:
            DataFrame filtered to customers at or above the specified level
        """
        min_idx = LEVEL_ORDER.index(min_level)
        valid_levels = LEVEL_ORDER[min_idx:]
        return self.df[self.df["RISK_LEVEL"].isin(valid_levels)]

    def summary(self) -> pd.DataFrame:
        """
        Generate summary statistics by risk level.

        Returns:
            DataFrame with counts, average score and total ARR per level
        """
        return (
            self.df.groupby("RISK_LEVEL")
            .agg(
                count=("CUSTOMER_ID", "count"),
                avg_score=("RISK_SCORE", "mean"),
                total_arr=("ARR", "sum"),
            )
            .round(1)
        )

    def component_breakdown(self) -> pd.DataFrame:
        """
        Show average contribution of each component.

        Not-applicable dimensions are excluded from the statistics.

        Returns:
            DataFrame with component statistics
        """
        stats = {}
        for col in self.component_columns:
            component_name = col.replace("_score", "")
            values = self.df[col].dropna()
            stats[component_name] = {
                "mean": values.mean(),
                "max": values.max(),
                "min": values.min(),
                "applicable": len(values),
            }
        return pd.DataFrame(stats).T.round(1)


class RiskScorer:
    """
    Churn risk scoring engine.

    Components:
    - Health tier (0-25): Based on stored health score
    - Engagement recency (0-20): Based on days since last activity
    - Support pressure (0-20): Based on Jira issues and Zendesk tickets
    - Renewal likelihood (0-15): Based on stored renewal likelihood
    - Product adoption (0-10): Based on distinct product count
    - Feedback sentiment (0-10): Based on recent feedback ratings

    Final score = points / max points of applicable dimensions x 100.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize scorer with configuration.

        Args:
            config: EngineConfig instance. Uses DEFAULT_CONFIG if None.
        """
        self.config = config or DEFAULT_CONFIG
        self._init_components()

    def _init_components(self) -> None:
        """Initialize all scoring components."""
        risk = self.config.risk
        self.components = {
            "health": HealthTierScorer(risk),
            "engagement": EngagementScorer(risk),
            "support": SupportScorer(risk),
            "renewal": RenewalScorer(risk),
            "adoption": AdoptionScorer(risk),
            "sentiment": SentimentScorer(risk),
        }

    def score(self, profile: CustomerProfile, now: Optional[datetime] = None) -> RiskResult:
        """
        Calculate churn risk for one customer.

        Args:
            profile: Validated customer profile
            now: Reference time (default: current UTC time)

        Returns:
            RiskResult with score, level and per-dimension points

        Example:
            >>> scorer = RiskScorer()
            >>> scorer.score(profile, now).level
            'medium'
        """
        now = now or datetime.now(timezone.utc)

        points = {name: component.score(profile, now) for name, component in self.components.items()}
        signals = [
            WeightedSignal(
                name,
                None if points[name] is None else points[name] / component.max_points,
                component.max_points,
            )
            for name, component in self.components.items()
        ]
        folded = fold_signals(signals)

        if folded.ratio is None:
            score = self.config.risk.neutral_score
        else:
            score = int(round_half_up(folded.ratio * 100))
        score = max(0, min(100, score))

        logger.debug(
            "risk score computed",
            extra={"customer_id": profile.customer_id, "score": score},
        )
        return RiskResult(
            score=score,
            level=self.config.risk.get_risk_level(score),
            applied_max_points=int(folded.applied_weight),
            components=points,
        )

    def score_portfolio(
        self, profiles: Iterable[CustomerProfile], now: Optional[datetime] = None
    ) -> ScoringResult:
        """
        Calculate churn risk for many customers.

        Args:
            profiles: Validated customer profiles
            now: Reference time shared by every customer

        Returns:
            ScoringResult with one row per customer
        """
        now = now or datetime.now(timezone.utc)
        component_cols = [f"{name}_score" for name in self.components]

        rows = []
        for profile in profiles:
            result = self.score(profile, now)
            row = {
                "CUSTOMER_ID": profile.customer_id,
                "NAME": profile.name,
                "ARR": profile.arr,
            }
            for name, value in result.components.items():
                row[f"{name}_score"] = value
            row["RISK_SCORE"] = result.score
            row["RISK_LEVEL"] = result.level
            rows.append(row)

        columns = ["CUSTOMER_ID", "NAME", "ARR", *component_cols, "RISK_SCORE", "RISK_LEVEL"]
        df = pd.DataFrame(rows, columns=columns)
        for col in component_cols:
            df[col] = df[col].astype("Int64")
        return ScoringResult(df=df, component_columns=component_cols)
