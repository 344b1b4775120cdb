"""
Engine configuration for account health scoring.

All weights, tier tables and alert thresholds are defined here for easy
tuning. Every section is a frozen dataclass: a configuration is built once,
passed into each engine component and never mutated afterwards.

Tier tables are lists of (threshold, points) tuples checked in order,
first match wins. Lookup tables are (key, value) pairs rather than dicts so
a shared config cannot be changed in place.
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml


Tiers = Tuple[Tuple[float, int], ...]
Pairs = Tuple[Tuple[Any, Any], ...]


@dataclass(frozen=True)
class HealthWeights:
    """
    Weights of the seven health signal categories.

    Total weight when every category has data: 11.0
    - Feedback rating: 2.0
    - Sentiment trend: 1.0
    - Legacy ticket volume: 1.0
    - Product usage breadth: 1.5
    - Renewal likelihood: 1.5
    - Social engagement: 1.0
    - Integration health: 3.0 (heavily weighted)
    """

    feedback: float = 2.0
    sentiment_trend: float = 1.0
    ticket_volume: float = 1.0
    product_usage: float = 1.5
    renewal_likelihood: float = 1.5
    social: float = 1.0
    integrations: float = 3.0

    # Signal shaping
    feedback_scale: float = 10.0
    sentiment_improving: float = 1.0
    sentiment_declining: float = 0.5
    ticket_volume_ceiling: int = 10
    product_usage_cap: int = 4
    social_cap: int = 10
    renewal_values: Pairs = (
        ("high", 1.0),
        ("medium", 0.6),
        ("low", 0.2),
    )

    # Returned when no category has data
    neutral_score: float = 5.0
    max_score: float = 10.0


@dataclass(frozen=True)
class IntegrationConfig:
    """Coefficients for the Jira / Zendesk / HubSpot sub-scores (0-100)."""

    # === Development health (Jira) ===
    critical_issue_penalty: float = 15.0
    dev_open_ratio_limit: float = 0.3
    dev_open_ratio_factor: float = 100.0
    resolution_hours_limit: float = 72.0
    resolution_penalty_per_day: float = 5.0
    resolution_penalty_cap: float = 30.0

    # === Support health (Zendesk) ===
    urgent_ticket_penalty: float = 10.0
    support_open_ratio_limit: float = 0.2
    support_open_ratio_factor: float = 125.0
    response_hours_limit: float = 24.0
    response_penalty_per_12h: float = 5.0
    response_penalty_cap: float = 25.0
    satisfaction_weight: float = 0.3

    # === Sales health (HubSpot) ===
    lifecycle_scores: Pairs = (
        ("subscriber", 20),
        ("lead", 40),
        ("marketingqualifiedlead", 60),
        ("salesqualifiedlead", 75),
        ("opportunity", 85),
        ("customer", 100),
        ("evangelist", 100),
        ("other", 50),
        ("unknown", 30),
    )
    lifecycle_default: int = 30
    lifecycle_weight: float = 0.7
    inactivity_days_limit: float = 30.0
    inactivity_penalty_per_30d: float = 10.0
    inactivity_penalty_cap: float = 20.0
    open_deal_bonus: float = 5.0
    open_deal_bonus_cap: float = 15.0
    high_win_rate: float = 0.5
    high_win_rate_factor: float = 20.0
    low_win_rate: float = 0.3
    low_win_rate_factor: float = 30.0


@dataclass(frozen=True)
class RiskConfig:
    """
    Churn-risk dimensions. Max points sum to 100.

    - Health tier: 0-25
    - Engagement recency: 0-20
    - Support pressure: 0-20 (capped)
    - Renewal likelihood: 0-15
    - Product adoption: 0-10
    - Feedback sentiment: 0-10
    """

    # === Health tier (0-25 points) ===
    # Health score strictly below threshold
    health_max: int = 25
    health_tiers: Tiers = ((4, 25), (6, 15), (8, 8))

    # === Engagement recency (0-20 points) ===
    # Days since last activity strictly above threshold
    engagement_max: int = 20
    engagement_tiers: Tiers = ((30, 20), (14, 12), (7, 6))

    # === Support pressure (0-20 points) ===
    support_max: int = 20
    jira_critical_tiers: Tiers = ((3, 8), (1, 5), (0, 2))
    jira_open_tiers: Tiers = ((15, 6), (8, 4), (3, 2))
    zendesk_open_tiers: Tiers = ((10, 4), (5, 2))
    # Satisfaction strictly below threshold
    zendesk_satisfaction_tiers: Tiers = ((60, 6), (80, 3))
    unknown_satisfaction: float = 100.0

    # === Renewal likelihood (0-15 points) ===
    renewal_max: int = 15
    renewal_points: Pairs = (
        ("low", 15),
        ("medium", 8),
        ("high", 0),
    )

    # === Product adoption (0-10 points) ===
    # Exact product count
    adoption_max: int = 10
    adoption_points: Pairs = (
        (0, 10),
        (1, 6),
        (2, 3),
    )
    adoption_default: int = 0

    # === Feedback sentiment (0-10 points) ===
    # Mean rating strictly below threshold
    sentiment_max: int = 10
    sentiment_window_days: int = 90
    sentiment_sample_size: int = 5
    sentiment_tiers: Tiers = ((2, 10), (3, 7), (3.5, 4), (4, 2))
    sentiment_no_data: int = 2

    # === Risk level categorization (minimum score) ===
    risk_levels: Tuple[Tuple[str, int], ...] = (
        ("critical", 70),
        ("high", 50),
        ("medium", 30),
        ("low", 0),
    )
    neutral_score: int = 50

    def get_risk_level(self, score: int) -> str:
        """Map numeric score to risk level."""
        for level, minimum in self.risk_levels:
            if score >= minimum:
                return level
        return "low"


@dataclass(frozen=True)
class RenewalConfig:
    """Weights of the advisory renewal likelihood estimator (sum to 1.0)."""

    health_weight: float = 0.30
    usage_weight: float = 0.20
    satisfaction_weight: float = 0.25
    tickets_weight: float = 0.15
    activity_weight: float = 0.10

    usage_saturation: int = 3
    ticket_saturation: int = 20
    activity_saturation_days: int = 30

    high_threshold: float = 0.7
    medium_threshold: float = 0.4


@dataclass(frozen=True)
class TrendConfig:
    """Thresholds for trend direction and confidence."""

    # Generic series (percent change)
    change_threshold_pct: float = 5.0
    confidence_per_pct: float = 2.0
    max_confidence: float = 100.0

    # Health score history (mean step change)
    health_window: int = 5
    health_step_threshold: float = 0.3
    health_confidence_factor: float = 20.0

    # Engagement proxy (0-100, baseline 50)
    engagement_baseline: int = 50
    engagement_sync_tiers: Tiers = ((1, 20), (7, 10), (14, 5))
    engagement_stale_sync: int = -10
    engagement_healthy_tickets: int = 3
    engagement_healthy_bonus: int = 10
    engagement_overload_tickets: int = 10
    engagement_overload_penalty: int = -15
    engagement_improving_above: int = 60
    engagement_declining_below: int = 40

    # Satisfaction (recent feedback halves)
    satisfaction_sample_size: int = 5
    satisfaction_change_threshold: float = 0.3
    satisfaction_confidence_factor: float = 50.0
    default_rating: float = 3.0


@dataclass(frozen=True)
class BehaviorConfig:
    """
    Behavior score contributions. Max 100 points.

    - Product adoption: 0-25 (product count at least threshold)
    - Support satisfaction: 0-20 (support health at least threshold)
    - Development engagement: 0-20 (development health at least threshold)
    - Sales engagement: 0-15 (sales health at least threshold)
    - Activity recency: 0-20 (days since activity at most threshold)
    """

    adoption_tiers: Tiers = ((3, 25), (2, 15), (1, 8))
    support_tiers: Tiers = ((85, 20), (70, 15), (50, 8))
    development_tiers: Tiers = ((80, 20), (60, 12))
    sales_tiers: Tiers = ((80, 15), (60, 10))
    activity_tiers: Tiers = ((7, 20), (14, 15), (30, 8))
    unknown_activity_days: int = 999
    max_score: int = 100

    categories: Tuple[Tuple[str, int], ...] = (
        ("Champion", 80),
        ("Advocate", 60),
        ("Passive", 40),
        ("At Risk", 20),
        ("Critical", 0),
    )

    def get_category(self, score: int) -> str:
        """Map numeric behavior score to a category band."""
        for category, minimum in self.categories:
            if score >= minimum:
                return category
        return "Critical"


@dataclass(frozen=True)
class AlertConfig:
    """Base alert thresholds and the per-customer adjustment policy."""

    # === Base thresholds ===
    negative_feedback_count: int = 3
    low_engagement_days: int = 14
    critical_issues_count: int = 2
    support_ticket_count: int = 10
    health_score_decline: float = 1.0

    # === ARR tiers: (minimum ARR exclusive, overrides) ===
    arr_overrides: Tuple[Tuple[float, Pairs], ...] = (
        (100000, (
            ("negative_feedback_count", 2),
            ("low_engagement_days", 7),
            ("critical_issues_count", 1),
            ("support_ticket_count", 5),
            ("health_score_decline", 0.5),
        )),
        (50000, (
            ("negative_feedback_count", 2),
            ("low_engagement_days", 10),
            ("critical_issues_count", 1),
            ("support_ticket_count", 7),
            ("health_score_decline", 0.7),
        )),
    )

    # === Unhealthy customers get closer monitoring ===
    unhealthy_below: float = 5.0
    default_health_score: float = 5.0

    # === Product adoption adjustments ===
    deep_adoption_products: int = 3
    deep_adoption_engagement_days: int = 2
    new_customer_grace_days: int = 7

    # === Negative feedback ===
    negative_feedback_window_days: int = 14
    negative_feedback_max_rating: int = 3
    negative_feedback_critical_count: int = 5

    # === Renewal risk ===
    # Days until renewal at most threshold
    renewal_window_days: int = 90
    renewal_severity_tiers: Tuple[Tuple[int, str], ...] = ((30, "critical"), (60, "high"))
    renewal_min_products: int = 2
    renewal_low_health: float = 6.0
    renewal_inactive_days: int = 30

    # === Low engagement (0-100 engagement score) ===
    engagement_product_points: int = 10
    engagement_product_cap: int = 40
    engagement_health_points: float = 30.0
    engagement_activity_tiers: Tiers = ((7, 30), (30, 20), (60, 10))
    engagement_unknown_activity_days: int = 90
    low_engagement_below: int = 30
    low_engagement_high_below: int = 15

    # === Critical issues ===
    critical_issues_critical_count: int = 3

    # === Support overload ===
    support_urgent_tickets: int = 3
    support_open_ratio: float = 0.4
    support_critical_urgent: int = 5

    # === Sales stagnation ===
    sales_inactive_days: int = 60

    # === Health score decline (severity by decline size) ===
    decline_window: int = 3
    decline_critical: float = 2.0
    decline_high: float = 1.5

    # === Product adoption stagnation ===
    adoption_min_arr: float = 50000
    adoption_high_arr: float = 100000
    adoption_max_products: int = 1
    adoption_inactive_days: int = 60
    unknown_activity_days: int = 999

    # === Escalation risk ===
    escalation_window_days: int = 7
    escalation_max_rating: int = 2
    escalation_min_negative: int = 2
    escalation_urgent_above: int = 2
    escalation_low_satisfaction: float = 60.0
    escalation_points: Pairs = (
        ("critical_issues", 30),
        ("urgent_tickets", 25),
        ("low_satisfaction", 20),
        ("negative_feedback", 25),
    )
    escalation_trigger: int = 50
    escalation_critical: int = 75


@dataclass(frozen=True)
class PriorityConfig:
    """Alert prioritization: severity base + ARR bonus + health bonus."""

    severity_points: Pairs = (
        ("critical", 40),
        ("high", 30),
        ("medium", 20),
        ("low", 10),
    )
    # ARR strictly above threshold
    arr_bonus: Tiers = ((100000, 20), (50000, 10), (20000, 5))
    # Health score strictly below threshold
    health_bonus: Tiers = ((4, 15), (6, 10), (8, 5))
    default_health_score: float = 5.0

    priority_levels: Tuple[Tuple[str, int], ...] = (
        ("urgent", 70),
        ("high", 50),
        ("medium", 30),
        ("low", 0),
    )

    def get_priority(self, score: int) -> str:
        """Map priority score to a priority bucket."""
        for level, minimum in self.priority_levels:
            if score >= minimum:
                return level
        return "low"


_SECTIONS = {
    "health": HealthWeights,
    "integrations": IntegrationConfig,
    "risk": RiskConfig,
    "renewal": RenewalConfig,
    "trends": TrendConfig,
    "behavior": BehaviorConfig,
    "alerts": AlertConfig,
    "priority": PriorityConfig,
}


def _freeze(value: Any) -> Any:
    """Convert YAML lists and mappings into the tuples the config tables use."""
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, dict):
        return tuple((key, _freeze(item)) for key, item in value.items())
    return value


@dataclass(frozen=True)
class EngineConfig:
    """
    Complete engine configuration.

    Load from YAML (any subset of sections and keys):
        config = EngineConfig.from_yaml("engine.yaml")

    Create programmatically:
        config = EngineConfig(risk=RiskConfig(health_max=30))
    """

    health: HealthWeights = field(default_factory=HealthWeights)
    integrations: IntegrationConfig = field(default_factory=IntegrationConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    renewal: RenewalConfig = field(default_factory=RenewalConfig)
    trends: TrendConfig = field(default_factory=TrendConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    priority: PriorityConfig = field(default_factory=PriorityConfig)
    version: str = "1.0.0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Build a config from nested dicts, keeping defaults for omitted keys."""
        unknown = set(data) - set(_SECTIONS) - {"version"}
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        kwargs: Dict[str, Any] = {}
        for name, section_cls in _SECTIONS.items():
            overrides = data.get(name) or {}
            valid = {f.name for f in fields(section_cls)}
            bad = set(overrides) - valid
            if bad:
                raise ValueError(f"Unknown keys in '{name}': {sorted(bad)}")
            kwargs[name] = section_cls(**{k: _freeze(v) for k, v in overrides.items()})
        if "version" in data:
            kwargs["version"] = str(data["version"])
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "EngineConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        def _plain(value: Any) -> Any:
            if isinstance(value, tuple):
                return [_plain(item) for item in value]
            if isinstance(value, dict):
                return {key: _plain(item) for key, item in value.items()}
            return value

        with open(path, "w") as f:
            yaml.dump(_plain(self.to_dict()), f, default_flow_style=False, sort_keys=False)


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
