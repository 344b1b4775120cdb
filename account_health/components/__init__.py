"""Churn-risk dimension scorers."""

from .base import BaseScorer
from .health_tier import HealthTierScorer
from .engagement import EngagementScorer
from .support import SupportScorer
from .renewal import RenewalScorer
from .adoption import AdoptionScorer
from .sentiment import SentimentScorer

__all__ = [
    "BaseScorer",
    "HealthTierScorer",
    "EngagementScorer",
    "SupportScorer",
    "RenewalScorer",
    "AdoptionScorer",
    "SentimentScorer",
]
