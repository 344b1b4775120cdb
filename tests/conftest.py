"""
Pytest fixtures for account health engine tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from account_health.config import EngineConfig
from account_health.profile import (
    CustomerProfile,
    FeedbackEntry,
    HealthScorePoint,
    HubspotMetrics,
    IntegrationMetrics,
    JiraMetrics,
    ProductUsage,
    ZendeskMetrics,
)
from account_health.sample import generate_sample_profiles

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def products(n: int) -> tuple:
    return tuple(ProductUsage(f"Product {i}") for i in range(n))


@pytest.fixture
def default_config():
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def now():
    """Fixed reference time shared by every test."""
    return NOW


@pytest.fixture
def empty_profile():
    """Profile with no populated signal category."""
    return CustomerProfile()


@pytest.fixture
def healthy_profile():
    """Engaged multi-product customer with clean integration metrics."""
    return CustomerProfile(
        customer_id="HEALTHY",
        name="Healthy Co",
        health_score=9.0,
        health_score_history=(
            HealthScorePoint(days_ago(21), 8.6),
            HealthScorePoint(days_ago(14), 8.8),
            HealthScorePoint(days_ago(7), 9.0),
        ),
        arr=80000,
        feedback=(
            FeedbackEntry(days_ago(10), 5),
            FeedbackEntry(days_ago(3), 5),
        ),
        product_usage=products(4),
        renewal_likelihood="high",
        integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=1, resolved_issues=20, last_sync=days_ago(0.5)),
            zendesk=ZendeskMetrics(open_tickets=1, solved_tickets=30,
                                   satisfaction_score=95, total_ratings=12),
            hubspot=HubspotMetrics(lifecycle_stage="customer", days_since_last_activity=2),
        ),
        last_activity_at=days_ago(2),
    )


@pytest.fixture
def at_risk_profile():
    """Struggling single-product customer on a large contract."""
    return CustomerProfile(
        customer_id="AT_RISK",
        name="At Risk Inc",
        health_score=3.0,
        health_score_history=(
            HealthScorePoint(days_ago(21), 6.0),
            HealthScorePoint(days_ago(14), 4.5),
            HealthScorePoint(days_ago(7), 3.0),
        ),
        arr=150000,
        feedback=(
            FeedbackEntry(days_ago(6), 2),
            FeedbackEntry(days_ago(4), 1),
            FeedbackEntry(days_ago(2), 2),
        ),
        product_usage=products(1),
        renewal_likelihood="low",
        renewal_date=NOW + timedelta(days=25),
        integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=18, resolved_issues=10, critical_issues=4,
                             avg_resolution_time=150, last_sync=days_ago(30)),
            zendesk=ZendeskMetrics(open_tickets=12, solved_tickets=8, urgent_tickets=5,
                                   satisfaction_score=45, total_ratings=10),
            hubspot=HubspotMetrics(lifecycle_stage="opportunity", days_since_last_activity=75),
        ),
        last_activity_at=days_ago(90),
    )


@pytest.fixture
def edge_profiles(empty_profile, healthy_profile, at_risk_profile):
    """Specific edge cases for boundary conditions."""
    return [empty_profile, healthy_profile, at_risk_profile]


@pytest.fixture
def sample_profiles():
    """100 seeded sample customers."""
    return generate_sample_profiles(n_customers=100, seed=42, now=NOW)
