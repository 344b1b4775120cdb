"""
Seeded synthetic customer portfolios for demos and tests.

Distributions are loosely shaped on a mid-market SaaS book of business:
- ARR log-normal around $30K, capped at $500K
- Health scores centered near 6.5 / 10
- ~70% of customers connect each integration source
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from .profile import (
    CustomerProfile,
    FeedbackEntry,
    HealthScorePoint,
    HubspotMetrics,
    IntegrationMetrics,
    JiraMetrics,
    ProductUsage,
    SentimentPoint,
    SocialStats,
    ZendeskMetrics,
)

PRODUCTS = [
    ProductUsage("Analytics", "Platform"),
    ProductUsage("Automation", "Platform"),
    ProductUsage("Integrations Hub", "Add-on"),
    ProductUsage("Reporting", "Add-on"),
    ProductUsage("Mobile", "Other"),
]
LIFECYCLE_STAGES = ["lead", "marketingqualifiedlead", "salesqualifiedlead", "opportunity", "customer", "evangelist"]
RENEWAL_VALUES = ["high", "medium", "low"]


def _sample_integrations(rng: np.random.RandomState, now: datetime) -> IntegrationMetrics:
    jira = zendesk = hubspot = None

    if rng.random_sample() < 0.7:
        jira = JiraMetrics(
            open_issues=int(rng.randint(0, 20)),
            resolved_issues=int(rng.randint(0, 60)),
            critical_issues=int(rng.choice([0, 0, 0, 1, 2, 3])),
            avg_resolution_time=float(round(rng.uniform(4, 200), 1)),
            last_sync=now - timedelta(days=int(rng.randint(0, 20))),
        )

    if rng.random_sample() < 0.7:
        total_ratings = int(rng.randint(0, 40))
        zendesk = ZendeskMetrics(
            open_tickets=int(rng.randint(0, 15)),
            solved_tickets=int(rng.randint(0, 80)),
            urgent_tickets=int(rng.choice([0, 0, 1, 2, 3, 5])),
            avg_first_response_time=float(round(rng.uniform(1, 60), 1)),
            satisfaction_score=float(round(rng.uniform(40, 100))) if total_ratings else None,
            total_ratings=total_ratings,
            last_sync=now - timedelta(days=int(rng.randint(0, 20))),
        )

    if rng.random_sample() < 0.7:
        total_deals = int(rng.randint(0, 10))
        won_deals = int(rng.randint(0, total_deals + 1))
        hubspot = HubspotMetrics(
            lifecycle_stage=str(rng.choice(LIFECYCLE_STAGES)),
            days_since_last_activity=int(rng.randint(0, 120)),
            open_deals=int(rng.randint(0, 4)),
            total_deals=total_deals,
            won_deals=won_deals,
            total_deal_value=float(total_deals * 10000),
            won_deal_value=float(won_deals * 10000),
            last_sync=now - timedelta(days=int(rng.randint(0, 20))),
        )

    return IntegrationMetrics(jira=jira, zendesk=zendesk, hubspot=hubspot)


def generate_sample_profiles(
    n_customers: int = 100,
    seed: int = 42,
    now: Optional[datetime] = None,
) -> List[CustomerProfile]:
    """
    Generate a reproducible synthetic portfolio.

    Args:
        n_customers: Number of profiles
        seed: Random seed; the same seed and now give identical profiles
        now: Reference time that dates are generated around

    Returns:
        List of validated CustomerProfile objects
    """
    rng = np.random.RandomState(seed)
    now = now or datetime.now(timezone.utc)

    profiles = []
    for i in range(n_customers):
        health = float(np.clip(round(rng.normal(6.5, 1.8), 1), 1.0, 10.0))

        history = []
        score = health
        for weeks_ago in range(int(rng.randint(0, 7)), 0, -1):
            score = float(np.clip(round(score + rng.normal(0, 0.6), 1), 0.0, 10.0))
            history.append(HealthScorePoint(now - timedelta(weeks=weeks_ago), score))

        feedback = tuple(
            FeedbackEntry(
                date=now - timedelta(days=int(rng.randint(0, 60))),
                rating=float(rng.choice([1, 2, 3, 4, 5], p=[0.08, 0.12, 0.2, 0.35, 0.25])),
                sentiment=None,
            )
            for _ in range(int(rng.randint(0, 7)))
        )

        sentiment = tuple(
            SentimentPoint(now - timedelta(weeks=weeks_ago), float(rng.randint(20, 100)))
            for weeks_ago in range(int(rng.randint(0, 5)), 0, -1)
        )

        n_products = int(rng.choice([0, 1, 2, 3, 4], p=[0.1, 0.35, 0.25, 0.2, 0.1]))
        product_idx = rng.choice(len(PRODUCTS), size=n_products, replace=False)

        profile = CustomerProfile(
            customer_id=f"CUST_{i:04d}",
            name=f"Customer {i:04d}",
            health_score=health,
            health_score_history=tuple(history),
            arr=float(min(round(rng.lognormal(mean=10.3, sigma=0.9), -2), 500000)),
            feedback=feedback,
            sentiment_trend=sentiment,
            ticket_volume=int(rng.randint(0, 15)) if rng.random_sample() < 0.5 else None,
            product_usage=tuple(PRODUCTS[j] for j in sorted(product_idx)),
            renewal_likelihood=(
                str(rng.choice(RENEWAL_VALUES)) if rng.random_sample() < 0.8 else None
            ),
            renewal_date=now + timedelta(days=int(rng.randint(-30, 365))),
            social_stats=(
                SocialStats(int(rng.randint(0, 8)), int(rng.randint(0, 8)))
                if rng.random_sample() < 0.5 else None
            ),
            integrations=_sample_integrations(rng, now),
            last_activity_at=(
                now - timedelta(days=int(rng.randint(0, 120)))
                if rng.random_sample() < 0.9 else None
            ),
        )
        profiles.append(profile.validate())

    return profiles
