"""
Integration health formulas.

Each formula turns one third-party system's raw metrics into a 0-100
sub-score: start at 100, apply penalties and bonuses, clamp, round.

- Development health: Jira issue metrics
- Support health: Zendesk ticket metrics
- Sales health: HubSpot CRM metrics
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .config import DEFAULT_CONFIG, IntegrationConfig
from .profile import HubspotMetrics, IntegrationMetrics, JiraMetrics, ZendeskMetrics
from .signals import clamp, round_half_up


def _finish(score: float) -> int:
    return int(clamp(round_half_up(score), 0, 100))


def development_health(
    jira: JiraMetrics, config: IntegrationConfig = DEFAULT_CONFIG.integrations
) -> int:
    """
    Score development health from issue-tracker metrics.

    Penalties:
    - 15 per open critical issue
    - (open_ratio - 0.3) x 100 when more than 30% of issues are open
    - min(30, (hours - 72) / 24 x 5) when average resolution exceeds 72h
    """
    score = 100.0
    score -= jira.critical_issues * config.critical_issue_penalty

    total = jira.open_issues + jira.resolved_issues
    if total > 0:
        open_ratio = jira.open_issues / total
        if open_ratio > config.dev_open_ratio_limit:
            score -= (open_ratio - config.dev_open_ratio_limit) * config.dev_open_ratio_factor

    if jira.avg_resolution_time > config.resolution_hours_limit:
        overdue_days = (jira.avg_resolution_time - config.resolution_hours_limit) / 24
        score -= min(config.resolution_penalty_cap, overdue_days * config.resolution_penalty_per_day)

    return _finish(score)


def support_health(
    zendesk: ZendeskMetrics, config: IntegrationConfig = DEFAULT_CONFIG.integrations
) -> int:
    """
    Score support health from ticketing metrics.

    Penalties:
    - 10 per urgent ticket
    - (open_ratio - 0.2) x 125 when more than 20% of tickets are open
    - min(25, (hours - 24) / 12 x 5) when first response exceeds 24h

    When at least one satisfaction rating exists the result is blended
    70/30 with the satisfaction score.
    """
    score = 100.0
    score -= zendesk.urgent_tickets * config.urgent_ticket_penalty

    total = zendesk.open_tickets + zendesk.solved_tickets
    if total > 0:
        open_ratio = zendesk.open_tickets / total
        if open_ratio > config.support_open_ratio_limit:
            score -= (
                (open_ratio - config.support_open_ratio_limit) * config.support_open_ratio_factor
            )

    if zendesk.avg_first_response_time > config.response_hours_limit:
        overdue = (zendesk.avg_first_response_time - config.response_hours_limit) / 12
        score -= min(config.response_penalty_cap, overdue * config.response_penalty_per_12h)

    if zendesk.total_ratings > 0 and zendesk.satisfaction_score is not None:
        weight = config.satisfaction_weight
        score = score * (1 - weight) + zendesk.satisfaction_score * weight

    return _finish(score)


def sales_health(
    hubspot: HubspotMetrics, config: IntegrationConfig = DEFAULT_CONFIG.integrations
) -> int:
    """
    Score sales health from CRM metrics.

    Starts from the lifecycle stage lookup blended 70/30 with 100, then:
    - up to -20 for inactivity beyond 30 days
    - up to +15 for open deals (5 each)
    - win rate above 0.5 adds (rate - 0.5) x 20, below 0.3 removes (0.3 - rate) x 30
    """
    stage = (hubspot.lifecycle_stage or "unknown").lower()
    lifecycle = dict(config.lifecycle_scores).get(stage, config.lifecycle_default)
    score = 100 * (1 - config.lifecycle_weight) + lifecycle * config.lifecycle_weight

    if hubspot.days_since_last_activity > config.inactivity_days_limit:
        idle = (hubspot.days_since_last_activity - config.inactivity_days_limit) / 30
        score -= min(config.inactivity_penalty_cap, idle * config.inactivity_penalty_per_30d)

    if hubspot.open_deals > 0:
        score += min(config.open_deal_bonus_cap, hubspot.open_deals * config.open_deal_bonus)

    if hubspot.total_deals > 0:
        win_rate = hubspot.won_deals / hubspot.total_deals
        if win_rate > config.high_win_rate:
            score += (win_rate - config.high_win_rate) * config.high_win_rate_factor
        elif win_rate < config.low_win_rate:
            score -= (config.low_win_rate - win_rate) * config.low_win_rate_factor

    return _finish(score)


@dataclass(frozen=True)
class IntegrationHealth:
    """Sub-scores for whichever integration sources are present."""

    development: Optional[int] = None
    support: Optional[int] = None
    sales: Optional[int] = None

    @classmethod
    def from_metrics(
        cls,
        integrations: IntegrationMetrics,
        config: IntegrationConfig = DEFAULT_CONFIG.integrations,
    ) -> "IntegrationHealth":
        return cls(
            development=(
                development_health(integrations.jira, config)
                if integrations.jira is not None else None
            ),
            support=(
                support_health(integrations.zendesk, config)
                if integrations.zendesk is not None else None
            ),
            sales=(
                sales_health(integrations.hubspot, config)
                if integrations.hubspot is not None else None
            ),
        )

    @property
    def available(self) -> Tuple[int, ...]:
        """Present sub-scores in fixed order: development, support, sales."""
        return tuple(s for s in (self.development, self.support, self.sales) if s is not None)

    def average(self) -> Optional[float]:
        """Mean of present sub-scores normalized to 0-1, None if none present."""
        values = self.available
        if not values:
            return None
        return sum(v / 100 for v in values) / len(values)
