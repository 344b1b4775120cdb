"""
Function-level boundary of the account health engine.

Every function accepts a CustomerProfile or a stored customer document
(a mapping, parsed with CustomerProfile.from_dict) and an optional
EngineConfig. Profiles are validated here, so malformed input raises
ProfileValidationError before any score is computed.

Usage:
    from account_health import api

    result = api.compute_health_score({"healthScore": 7.5, "productUsage": ["Core"]})
    alerts = api.generate_alerts(profile, now)
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from .alerts import Alert, AlertEngine
from .behavior import BehaviorResult, BehaviorScorer
from .config import EngineConfig
from .health import HealthScoreEngine, HealthScoreResult
from .integrations import IntegrationHealth
from .portfolio import PortfolioSummary
from .portfolio import summarize_portfolio as _summarize_portfolio
from .profile import CustomerProfile, as_utc
from .renewal import RenewalEstimate, RenewalLikelihoodEstimator
from .scorer import RiskResult, RiskScorer
from .trends import TrendAnalyzer, TrendResult

ProfileLike = Union[CustomerProfile, Mapping]

# Cache policy of the persistence layer
HEALTH_SCORE_MAX_AGE = timedelta(minutes=30)
ALERT_SUMMARY_MAX_AGE = timedelta(hours=1)


def to_profile(profile: ProfileLike) -> CustomerProfile:
    """Parse a stored document or validate an existing profile."""
    if isinstance(profile, CustomerProfile):
        return profile.validate()
    return CustomerProfile.from_dict(profile)


def compute_health_score(
    profile: ProfileLike, config: Optional[EngineConfig] = None
) -> HealthScoreResult:
    return HealthScoreEngine(config).score(to_profile(profile))


def compute_risk_score(
    profile: ProfileLike,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> RiskResult:
    return RiskScorer(config).score(to_profile(profile), now)


def estimate_renewal_likelihood(
    profile: ProfileLike,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> RenewalEstimate:
    return RenewalLikelihoodEstimator(config).estimate(to_profile(profile), now)


def analyze_trend(
    series: Sequence[float],
    window_size: Optional[int] = None,
    config: Optional[EngineConfig] = None,
) -> TrendResult:
    return TrendAnalyzer(config).analyze_trend(series, window_size)


def score_behavior(
    profile: ProfileLike,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
    integration_health: Optional[IntegrationHealth] = None,
) -> BehaviorResult:
    """Behavior score; integration_health overrides the profile's sub-scores."""
    return BehaviorScorer(config).score(to_profile(profile), now, integration_health)


def generate_alerts(
    profile: ProfileLike,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> List[Alert]:
    """Prioritized alerts for one customer, highest priority first."""
    return AlertEngine(config).generate(to_profile(profile), now)


def summarize_portfolio(
    profiles: Iterable[ProfileLike],
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> PortfolioSummary:
    return _summarize_portfolio([to_profile(p) for p in profiles], now, config)


def needs_recompute(
    last_computed_at: Optional[datetime],
    now: Optional[datetime] = None,
    max_age: timedelta = HEALTH_SCORE_MAX_AGE,
) -> bool:
    """
    True when a cached result is missing or older than max_age.

    Example:
        >>> needs_recompute(None)
        True
    """
    if last_computed_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    return as_utc(now) - as_utc(last_computed_at) > max_age


def should_append_history(profile: ProfileLike, new_score: float) -> bool:
    """True when new_score differs from the latest health score history point."""
    if not isinstance(profile, CustomerProfile):
        profile = CustomerProfile.from_dict(profile)
    history = profile.health_score_history
    if not history:
        return True
    return history[-1].score != new_score
