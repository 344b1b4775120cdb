"""
Tests for trend analysis.
"""

import math

import pytest

from account_health.profile import (
    CustomerProfile,
    FeedbackEntry,
    HealthScorePoint,
    IntegrationMetrics,
    JiraMetrics,
    ZendeskMetrics,
)
from account_health.trends import Outlook, TrendAnalyzer, TrendDirection

from conftest import days_ago


@pytest.fixture
def analyzer(default_config):
    return TrendAnalyzer(default_config)


def history(*scores):
    return tuple(
        HealthScorePoint(days_ago(7 * (len(scores) - i)), s) for i, s in enumerate(scores)
    )


class TestAnalyzeTrend:
    """Generic series trend."""

    def test_increasing(self, analyzer):
        result = analyzer.analyze_trend([10, 11, 12])

        assert result.direction == TrendDirection.INCREASING
        assert result.change_pct == 20.0
        assert result.confidence == 40.0
        assert result.points == 3

    def test_decreasing(self, analyzer):
        result = analyzer.analyze_trend([10, 9.5, 8])
        assert result.direction == TrendDirection.DECREASING

    def test_small_change_is_stable(self, analyzer):
        result = analyzer.analyze_trend([100, 104])

        assert result.direction == TrendDirection.STABLE
        assert result.confidence == 8.0

    def test_exactly_five_percent_is_stable(self, analyzer):
        assert analyzer.analyze_trend([100, 105]).direction == TrendDirection.STABLE

    @pytest.mark.parametrize("series", [[], [7]])
    def test_insufficient_data(self, analyzer, series):
        result = analyzer.analyze_trend(series)

        assert result.direction == TrendDirection.INSUFFICIENT_DATA
        assert result.confidence == 0.0

    def test_confidence_capped(self, analyzer):
        assert analyzer.analyze_trend([1, 10]).confidence == 100.0

    def test_window_uses_most_recent_points(self, analyzer):
        """Old spike is outside the window."""
        result = analyzer.analyze_trend([50, 10, 10, 10.2], window_size=3)
        assert result.direction == TrendDirection.STABLE
        assert result.points == 3

    def test_zero_first_value(self, analyzer):
        assert analyzer.analyze_trend([0, 0]).direction == TrendDirection.STABLE
        assert analyzer.analyze_trend([0, 3]).change_pct == 100.0
        assert analyzer.analyze_trend([0, -3]).change_pct == -100.0

    def test_rejects_non_finite(self, analyzer):
        with pytest.raises(ValueError, match="non-finite"):
            analyzer.analyze_trend([1, math.nan, 3])
        with pytest.raises(ValueError):
            analyzer.analyze_trend([1, math.inf])

    def test_rejects_small_window(self, analyzer):
        with pytest.raises(ValueError, match="window_size"):
            analyzer.analyze_trend([1, 2, 3], window_size=1)


class TestHealthTrend:

    def test_improving(self, analyzer):
        trend = analyzer.health_trend(CustomerProfile(health_score_history=history(5, 6, 7)))

        assert trend.direction == Outlook.IMPROVING
        assert trend.change == 1.0
        assert trend.confidence == 20.0

    def test_declining(self, analyzer):
        trend = analyzer.health_trend(CustomerProfile(health_score_history=history(8, 7, 6)))
        assert trend.direction == Outlook.DECLINING

    def test_small_steps_stable(self, analyzer):
        trend = analyzer.health_trend(CustomerProfile(health_score_history=history(7, 7.2, 7.4)))
        assert trend.direction == Outlook.STABLE

    def test_only_last_five_points(self, analyzer):
        """Early collapse outside the window is ignored."""
        profile = CustomerProfile(health_score_history=history(10, 2, 2, 2, 2, 2))
        assert analyzer.health_trend(profile).direction == Outlook.STABLE

    def test_insufficient_history(self, analyzer):
        profile = CustomerProfile(health_score_history=history(7))
        assert analyzer.health_trend(profile).direction == Outlook.INSUFFICIENT_DATA


class TestEngagementTrend:

    def test_baseline_without_integrations(self, analyzer, empty_profile, now):
        trend = analyzer.engagement_trend(empty_profile, now)

        assert trend.direction == Outlook.STABLE
        assert trend.detail["score"] == 50
        assert trend.confidence == 0.0

    def test_recent_sync_with_open_issues_improving(self, analyzer, now):
        profile = CustomerProfile(integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=4, last_sync=days_ago(0.5)),
        ))
        trend = analyzer.engagement_trend(profile, now)

        assert trend.detail["score"] == 70
        assert trend.direction == Outlook.IMPROVING
        assert trend.confidence == 40.0

    def test_sync_ignored_without_open_issues(self, analyzer, now):
        profile = CustomerProfile(integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=0, last_sync=days_ago(0.5)),
        ))
        assert analyzer.engagement_trend(profile, now).detail["score"] == 50

    def test_unknown_sync_counts_as_stale(self, analyzer, now):
        profile = CustomerProfile(integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=4),
        ))
        assert analyzer.engagement_trend(profile, now).detail["score"] == 40

    def test_ticket_overload_declining(self, analyzer, now):
        profile = CustomerProfile(integrations=IntegrationMetrics(
            jira=JiraMetrics(open_issues=4, last_sync=days_ago(20)),
            zendesk=ZendeskMetrics(open_tickets=12),
        ))
        trend = analyzer.engagement_trend(profile, now)

        assert trend.detail["score"] == 25
        assert trend.direction == Outlook.DECLINING

    def test_mid_ticket_load_neutral(self, analyzer, now):
        """4-10 open tickets neither add nor remove points."""
        profile = CustomerProfile(integrations=IntegrationMetrics(
            zendesk=ZendeskMetrics(open_tickets=7),
        ))
        assert analyzer.engagement_trend(profile, now).detail["score"] == 50


class TestSatisfactionTrend:

    def test_recent_ratings_improving(self, analyzer):
        feedback = (
            FeedbackEntry(days_ago(40), 2),
            FeedbackEntry(days_ago(30), 2),
            FeedbackEntry(days_ago(20), 4),
            FeedbackEntry(days_ago(10), 5),
        )
        trend = analyzer.satisfaction_trend(CustomerProfile(feedback=feedback))

        # newer half (5, 4) = 4.5, older half (2, 2) = 2.0
        assert trend.direction == Outlook.IMPROVING
        assert trend.change == 2.5
        assert trend.confidence == 100.0

    def test_odd_count_puts_extra_in_newer_half(self, analyzer):
        feedback = (
            FeedbackEntry(days_ago(30), 5),
            FeedbackEntry(days_ago(20), 3),
            FeedbackEntry(days_ago(10), 3),
        )
        trend = analyzer.satisfaction_trend(CustomerProfile(feedback=feedback))

        # newer (3, 3) = 3.0, older (5) = 5.0
        assert trend.change == -2.0
        assert trend.direction == Outlook.DECLINING

    def test_unordered_feedback_sorted_by_date(self, analyzer):
        feedback = (
            FeedbackEntry(days_ago(10), 5),
            FeedbackEntry(days_ago(40), 1),
        )
        trend = analyzer.satisfaction_trend(CustomerProfile(feedback=feedback))
        assert trend.direction == Outlook.IMPROVING

    def test_insufficient_feedback(self, analyzer):
        profile = CustomerProfile(feedback=(FeedbackEntry(days_ago(1), 4),))
        assert analyzer.satisfaction_trend(profile).direction == Outlook.INSUFFICIENT_DATA


class TestTrendPatterns:

    def test_two_improving_signals(self, analyzer, now):
        profile = CustomerProfile(
            health_score_history=history(5, 6, 7),
            integrations=IntegrationMetrics(
                jira=JiraMetrics(open_issues=4, last_sync=days_ago(0.5)),
            ),
        )
        patterns = analyzer.trend_patterns(profile, now)

        assert patterns.predicted_direction == Outlook.IMPROVING

    def test_single_declining_signal(self, analyzer, now):
        profile = CustomerProfile(health_score_history=history(8, 7, 6))
        patterns = analyzer.trend_patterns(profile, now)

        assert patterns.predicted_direction == Outlook.SLIGHTLY_DECLINING

    def test_no_signals_stable(self, analyzer, empty_profile, now):
        patterns = analyzer.trend_patterns(empty_profile, now)

        assert patterns.predicted_direction == Outlook.STABLE
        assert patterns.health.direction == Outlook.INSUFFICIENT_DATA

    def test_to_dict(self, analyzer, empty_profile, now):
        data = analyzer.trend_patterns(empty_profile, now).to_dict()
        assert data["predictedDirection"] == "stable"
        assert data["engagementTrend"]["score"] == 50
