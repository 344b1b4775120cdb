from .detectors import DETECTORS, engagement_score
from .engine import AlertEngine, rank_portfolio_alerts
from .models import Alert, AlertType, Priority, Severity
from .recommendations import recommend_actions, summarize
from .thresholds import AlertThresholds, calculate_thresholds

__all__ = [
    "Alert",
    "AlertEngine",
    "AlertThresholds",
    "AlertType",
    "DETECTORS",
    "Priority",
    "Severity",
    "calculate_thresholds",
    "engagement_score",
    "rank_portfolio_alerts",
    "recommend_actions",
    "summarize",
]
