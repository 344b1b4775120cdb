"""
Account Health Engine Package

Rule-based health, churn-risk, behavior and alert scoring for enterprise
customer accounts.
"""

from .alerts import Alert, AlertEngine, AlertType, Priority, Severity
from .behavior import BehaviorResult, BehaviorScorer
from .config import DEFAULT_CONFIG, EngineConfig
from .health import HealthScoreEngine, HealthScoreResult
from .integrations import IntegrationHealth
from .portfolio import PortfolioSummary, summarize_portfolio
from .profile import CustomerProfile, ProfileValidationError, RenewalLikelihood
from .renewal import RenewalEstimate, RenewalLikelihoodEstimator
from .scorer import RiskResult, RiskScorer
from .trends import Outlook, TrendAnalyzer, TrendDirection, TrendResult

__all__ = [
    "Alert",
    "AlertEngine",
    "AlertType",
    "BehaviorResult",
    "BehaviorScorer",
    "CustomerProfile",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "HealthScoreEngine",
    "HealthScoreResult",
    "IntegrationHealth",
    "Outlook",
    "PortfolioSummary",
    "Priority",
    "ProfileValidationError",
    "RenewalEstimate",
    "RenewalLikelihood",
    "RenewalLikelihoodEstimator",
    "RiskResult",
    "RiskScorer",
    "Severity",
    "TrendAnalyzer",
    "TrendDirection",
    "TrendResult",
    "summarize_portfolio",
]
__version__ = "1.0.0"
