"""
Tests for stored-document parsing into customer profiles.
"""

from datetime import date, datetime, timezone

import pytest

from account_health.profile import (
    CustomerProfile,
    ProfileValidationError,
    StoredHealthMetrics,
    ZendeskMetrics,
)
from account_health.scorer import RiskScorer

from conftest import NOW


class TestIntegrationBlocks:
    """Scored metrics come from integrationData only."""

    @pytest.fixture
    def stored_record(self):
        return {
            "_id": "cust-9",
            "integrations": {
                "jira": {"projectKey": "ACME", "enabled": True},
                "zendesk": {"organizationId": "42", "satisfaction": 4},
                "hubspot": {"companyId": "c-1", "dealStage": "closedwon"},
            },
            "integrationData": {
                "jira": {"criticalIssues": 4, "openIssues": 12},
                "zendesk": {"openTickets": 3, "satisfactionScore": 72, "totalRatings": 9},
                "hubspot": {"lifecycleStage": "customer", "daysSinceLastActivity": 12},
            },
        }

    def test_metrics_read_from_integration_data(self, stored_record):
        integrations = CustomerProfile.from_dict(stored_record).integrations

        assert integrations.jira.critical_issues == 4
        assert integrations.jira.open_issues == 12
        assert integrations.zendesk.satisfaction_score == 72
        assert integrations.hubspot.lifecycle_stage == "customer"

    def test_connector_settings_alone_are_not_metrics(self, stored_record):
        del stored_record["integrationData"]
        profile = CustomerProfile.from_dict(stored_record)

        assert profile.integrations.is_empty

    def test_snake_case_metrics_block(self):
        profile = CustomerProfile.from_dict({
            "integration_data": {"jira": {"critical_issues": 2}},
        })
        assert profile.integrations.jira.critical_issues == 2

    def test_empty_source_block_is_absent(self):
        profile = CustomerProfile.from_dict({"integrationData": {"jira": {}, "zendesk": None}})

        assert profile.integrations.jira is None
        assert profile.integrations.zendesk is None


class TestZendeskSatisfaction:
    """An unrated ticketing cache carries no satisfaction evidence."""

    def test_unrated_zero_is_unknown(self):
        profile = CustomerProfile.from_dict({
            "integrationData": {"zendesk": {"satisfactionScore": 0, "totalRatings": 0}},
        })
        assert profile.integrations.zendesk.satisfaction_score is None

    def test_rated_zero_is_kept(self):
        assert ZendeskMetrics(satisfaction_score=0, total_ratings=3).satisfaction_score == 0

    def test_unrated_zero_has_no_support_risk(self, default_config):
        profile = CustomerProfile.from_dict({
            "integrationData": {"zendesk": {"satisfactionScore": 0, "totalRatings": 0}},
        })
        result = RiskScorer(default_config).score(profile, NOW)

        assert result.components["support"] == 0


class TestStoredMetrics:

    def test_metrics_block_parsed(self):
        profile = CustomerProfile.from_dict({
            "metrics": {"supportHealth": 90, "developmentHealth": 85, "salesHealth": 85},
        })
        assert profile.metrics == StoredHealthMetrics(
            support_health=90, development_health=85, sales_health=85,
        )

    def test_missing_metrics_block(self):
        assert CustomerProfile.from_dict({}).metrics is None

    def test_metrics_out_of_range(self):
        with pytest.raises(ProfileValidationError) as excinfo:
            CustomerProfile.from_dict({"metrics": {"salesHealth": 140}})
        assert excinfo.value.field_name == "metrics.sales_health"


class TestFieldCoercion:

    def test_null_lists_and_counts(self):
        profile = CustomerProfile.from_dict({
            "feedback": None,
            "productUsage": None,
            "arr": None,
            "integrationData": {"jira": {"openIssues": None, "criticalIssues": 1}},
        })

        assert profile.feedback == ()
        assert profile.product_usage == ()
        assert profile.arr == 0.0
        assert profile.integrations.jira.open_issues == 0

    def test_numeric_id_becomes_text(self):
        assert CustomerProfile.from_dict({"_id": 1042}).customer_id == "1042"

    def test_date_objects_accepted(self):
        profile = CustomerProfile.from_dict({"renewalDate": date(2025, 7, 1)})
        assert profile.renewal_date == datetime(2025, 7, 1, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self):
        profile = CustomerProfile.from_dict({"lastActivityAt": "2025-05-30T09:15:00"})
        assert profile.last_activity_at == datetime(2025, 5, 30, 9, 15, tzinfo=timezone.utc)

    def test_blank_renewal_likelihood_is_missing(self):
        assert CustomerProfile.from_dict({"renewalLikelihood": ""}).renewal_likelihood is None

    def test_unknown_renewal_likelihood(self):
        with pytest.raises(ProfileValidationError) as excinfo:
            CustomerProfile.from_dict({"renewalLikelihood": "maybe"})
        assert excinfo.value.field_name == "renewal_likelihood"

    @pytest.mark.parametrize("document,field_name", [
        ({"feedback": [{"rating": 4}]}, "feedback[0].date"),
        ({"healthScoreHistory": [{"date": "2025-05-01", "score": 12}]}, "health_score_history[0].score"),
        ({"sentimentTrend": [{"date": "2025-05-01", "score": -1}]}, "sentiment_trend[0].score"),
        ({"healthScore": float("nan")}, "health_score"),
        ({"socialStats": {"linkedin": -3}}, "social_stats.linkedin"),
        ({"integrationData": {"hubspot": {"totalDeals": 1, "wonDeals": 3}}}, "hubspot.won_deals"),
        ({"integrationData": {"zendesk": {"urgentTickets": -1}}}, "zendesk.urgent_tickets"),
    ])
    def test_error_names_field_path(self, document, field_name):
        with pytest.raises(ProfileValidationError) as excinfo:
            CustomerProfile.from_dict(document)
        assert excinfo.value.field_name == field_name
