"""
Regression tests for scoring behavior.

Tests that the engines keep their reference outputs on fixed scenarios
and produce deterministic, reproducible results.
"""

import pandas as pd
import pytest

from account_health import (
    AlertEngine,
    AlertType,
    BehaviorScorer,
    EngineConfig,
    HealthScoreEngine,
    RiskScorer,
    TrendAnalyzer,
)
from account_health.config import RiskConfig
from account_health.portfolio import summarize_portfolio
from account_health.profile import RenewalLikelihood
from account_health.sample import generate_sample_profiles

from conftest import NOW


class TestReferenceScenarios:
    """Reference outputs for the shared fixture customers."""

    def test_at_risk_components(self, default_config, at_risk_profile):
        result = RiskScorer(default_config).score(at_risk_profile, NOW)

        assert result.components == {
            "health": 25,
            "engagement": 20,
            "support": 20,
            "renewal": 15,
            "adoption": 6,
            "sentiment": 10,
        }
        assert result.score == 96
        assert result.level == "critical"

    def test_healthy_components(self, default_config, healthy_profile):
        result = RiskScorer(default_config).score(healthy_profile, NOW)

        assert result.components == {
            "health": 0,
            "engagement": 0,
            "support": 0,
            "renewal": 0,
            "adoption": 0,
            "sentiment": 0,
        }
        assert result.score == 0

    def test_behavior_scores(self, default_config, healthy_profile, at_risk_profile):
        scorer = BehaviorScorer(default_config)

        assert scorer.score(healthy_profile, NOW).score == 100
        assert scorer.score(at_risk_profile, NOW).score == 18

    def test_at_risk_trend_outlook(self, default_config, at_risk_profile):
        patterns = TrendAnalyzer(default_config).trend_patterns(at_risk_profile, NOW)

        # health -1.5 per step, engagement 50 - 10 - 15 = 25
        assert patterns.health.direction.value == "declining"
        assert patterns.engagement.detail["score"] == 25
        assert patterns.predicted_direction.value == "declining"

    def test_at_risk_alert_severities(self, default_config, at_risk_profile):
        alerts = {a.type: a.severity.value for a in AlertEngine(default_config).generate(at_risk_profile, NOW)}

        assert alerts == {
            AlertType.NEGATIVE_FEEDBACK: "high",
            AlertType.RENEWAL_RISK: "critical",
            AlertType.LOW_ENGAGEMENT: "high",
            AlertType.CRITICAL_ISSUES: "critical",
            AlertType.SUPPORT_OVERLOAD: "critical",
            AlertType.SALES_STAGNATION: "medium",
            AlertType.HEALTH_SCORE_DECLINE: "critical",
            AlertType.PRODUCT_ADOPTION_STAGNATION: "high",
            AlertType.ESCALATION_RISK: "critical",
        }

    def test_empty_profile_is_neutral(self, default_config, empty_profile):
        assert HealthScoreEngine(default_config).score(empty_profile).score == 5.0


class TestDeterminism:
    """Same input always produces the same output."""

    def test_sample_data_reproducible(self):
        first = generate_sample_profiles(n_customers=50, seed=7, now=NOW)
        second = generate_sample_profiles(n_customers=50, seed=7, now=NOW)

        assert first == second

    def test_different_seeds_differ(self):
        first = generate_sample_profiles(n_customers=50, seed=7, now=NOW)
        second = generate_sample_profiles(n_customers=50, seed=8, now=NOW)

        assert first != second

    def test_portfolio_frames_identical(self, sample_profiles):
        first = summarize_portfolio(sample_profiles, NOW)
        second = summarize_portfolio(sample_profiles, NOW)

        pd.testing.assert_frame_equal(first.df, second.df)
        assert first.to_dict() == second.to_dict()

    def test_separate_scorers_agree(self, sample_profiles):
        first = RiskScorer().score_portfolio(sample_profiles, NOW)
        second = RiskScorer().score_portfolio(sample_profiles, NOW)

        pd.testing.assert_series_equal(
            first.df["RISK_SCORE"],
            second.df["RISK_SCORE"],
            check_names=False,
        )

    def test_input_order_does_not_change_scores(self, sample_profiles):
        forward = summarize_portfolio(sample_profiles, NOW).df.set_index("CUSTOMER_ID")
        backward = summarize_portfolio(sample_profiles[::-1], NOW).df.set_index("CUSTOMER_ID")

        pd.testing.assert_frame_equal(forward, backward.loc[forward.index])


class TestConfigBackwardCompatibility:
    """Saved configs remain loadable."""

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "engine.yaml"
        EngineConfig().to_yaml(path)

        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_partial_config_keeps_defaults(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("risk:\n  health_max: 30\n")
        config = EngineConfig.from_yaml(path)

        assert config.risk.health_max == 30
        assert config.risk.engagement_max == RiskConfig().engagement_max
        assert config.alerts == EngineConfig().alerts

    def test_empty_file_is_default(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("")

        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_lookup_tables_from_yaml_mappings(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("priority:\n  severity_points:\n    critical: 50\n    high: 30\n    medium: 20\n    low: 10\n")
        config = EngineConfig.from_yaml(path)

        assert dict(config.priority.severity_points)["critical"] == 50
        assert EngineConfig.from_dict(config.to_dict()) == config

    def test_every_renewal_likelihood_has_a_value(self):
        config = EngineConfig()
        likelihoods = {item.value for item in RenewalLikelihood}

        assert set(dict(config.health.renewal_values)) == likelihoods
        assert set(dict(config.risk.renewal_points)) == likelihoods

    def test_shared_config_tables_are_immutable(self):
        config = EngineConfig()

        for table in (
            config.health.renewal_values,
            config.integrations.lifecycle_scores,
            config.alerts.escalation_points,
            config.priority.severity_points,
        ):
            with pytest.raises(TypeError):
                table[0] = ("high", 0)

    def test_unknown_section_rejected(self):
        with pytest.raises(ValueError, match="Unknown config sections"):
            EngineConfig.from_dict({"scoring": {}})

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown keys in 'alerts'"):
            EngineConfig.from_dict({"alerts": {"negative_feedback": 3}})
