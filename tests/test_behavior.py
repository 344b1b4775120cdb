"""
Tests for the behavior scorer.
"""

from dataclasses import replace

import pytest

from account_health.behavior import BehaviorScorer
from account_health.integrations import IntegrationHealth
from account_health.profile import CustomerProfile, StoredHealthMetrics

from conftest import days_ago, products


@pytest.fixture
def scorer(default_config):
    return BehaviorScorer(default_config)


class TestBehaviorScore:

    def test_engaged_customer_is_champion(self, scorer, healthy_profile, now):
        result = scorer.score(healthy_profile, now)

        assert result.score == 100
        assert result.category == "Champion"
        assert result.factors == (
            "High product adoption",
            "Excellent support satisfaction",
            "Active development collaboration",
            "Strong sales relationship",
            "Highly active customer",
        )

    def test_struggling_customer_is_critical(self, scorer, at_risk_profile, now):
        """8 (one product) + 10 (sales 75) = 18."""
        result = scorer.score(at_risk_profile, now)

        assert result.score == 18
        assert result.category == "Critical"
        assert "Moderate sales engagement" in result.factors
        assert "Poor support satisfaction" in result.factors

    def test_empty_profile_scores_zero(self, scorer, empty_profile, now):
        result = scorer.score(empty_profile, now)

        assert result.score == 0
        assert result.category == "Critical"
        assert result.factors == (
            "Low product adoption",
            "Poor support satisfaction",
            "Limited development engagement",
            "Limited sales engagement",
            "Low activity level",
        )

    @pytest.mark.parametrize("idle,label", [
        (7, "Highly active customer"),
        (14, "Regular activity pattern"),
        (30, "Moderate activity level"),
        (31, "Low activity level"),
    ])
    def test_activity_labels(self, scorer, now, idle, label):
        profile = CustomerProfile(last_activity_at=days_ago(idle))
        assert scorer.score(profile, now).factors[-1] == label

    def test_precomputed_integration_health(self, scorer, now):
        """Supplied sub-scores are used instead of the profile's metrics."""
        profile = CustomerProfile(product_usage=products(2), last_activity_at=days_ago(10))
        health = IntegrationHealth(development=65, support=72, sales=90)
        result = scorer.score(profile, now, integration_health=health)

        # 15 + 15 + 12 + 15 + 15
        assert result.score == 72
        assert result.category == "Advocate"

    def test_stored_metrics_used_before_integration_data(self, scorer, healthy_profile, now):
        """Persisted sub-scores win over the live integration metrics."""
        stored = replace(
            healthy_profile,
            metrics=StoredHealthMetrics(support_health=55, development_health=65, sales_health=None),
        )
        result = scorer.score(stored, now)

        # 25 + 8 + 12 + 0 + 20
        assert result.score == 65
        assert result.factors[1:4] == (
            "Moderate support satisfaction",
            "Moderate development engagement",
            "Limited sales engagement",
        )

    def test_override_beats_stored_metrics(self, scorer, now):
        profile = CustomerProfile(
            metrics=StoredHealthMetrics(support_health=90, development_health=90, sales_health=90),
        )
        result = scorer.score(profile, now, integration_health=IntegrationHealth())

        assert result.score == 0

    @pytest.mark.parametrize("score,category", [
        (80, "Champion"), (79, "Advocate"), (60, "Advocate"),
        (59, "Passive"), (40, "Passive"), (39, "At Risk"), (20, "At Risk"), (19, "Critical"),
    ])
    def test_category_bands(self, default_config, score, category):
        assert default_config.behavior.get_category(score) == category

    def test_scores_within_range(self, scorer, sample_profiles, now):
        for profile in sample_profiles:
            assert 0 <= scorer.score(profile, now).score <= 100

    def test_to_dict(self, scorer, healthy_profile, now):
        data = scorer.score(healthy_profile, now).to_dict()

        assert data["category"] == "Champion"
        assert len(data["factors"]) == 5
