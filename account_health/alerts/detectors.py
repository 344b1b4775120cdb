"""
Alert detectors.

Each detector inspects one aspect of a customer profile and returns a
single Alert or None. Detectors are independent of each other; the
per-customer AlertThresholds decide how sensitive each one is.
"""

import math
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..config import DEFAULT_CONFIG, AlertConfig
from ..profile import CustomerProfile, as_utc, days_since
from ..signals import AT_MOST, mean, round_half_up, tier_points
from .models import Alert, AlertType, Severity
from .thresholds import AlertThresholds

Detector = Callable[[CustomerProfile, datetime, AlertThresholds, AlertConfig], Optional[Alert]]


def _days_until(moment: datetime, now: datetime) -> int:
    """Whole days until moment, rounded up (a renewal later today is 1 day out)."""
    delta = as_utc(moment) - as_utc(now)
    return math.ceil(delta.total_seconds() / 86400)


def _alert(profile: CustomerProfile, now: datetime, **kwargs) -> Alert:
    return Alert(
        created_at=now,
        customer_id=profile.customer_id,
        customer_name=profile.name,
        **kwargs,
    )


def hubspot_inactivity(profile: CustomerProfile, unknown: int) -> int:
    """Days since the last CRM activity, or `unknown` when there is no CRM data."""
    hubspot = profile.integrations.hubspot
    if hubspot is None:
        return unknown
    return hubspot.days_since_last_activity


def engagement_score(profile: CustomerProfile, config: AlertConfig = DEFAULT_CONFIG.alerts) -> int:
    """
    Engagement score 0-100, averaged over the factors that apply.

    - Product breadth: 10 points per product, capped at 40
    - Health score: health / 10 x 30 (only when a health score is stored)
    - CRM activity: <=7 days 30, <=30 days 20, <=60 days 10 (unknown = 90 days)
    """
    score = 0.0
    factors = 0

    score += min(profile.product_count * config.engagement_product_points, config.engagement_product_cap)
    factors += 1

    if profile.health_score is not None:
        score += profile.health_score / 10 * config.engagement_health_points
        factors += 1

    inactivity = hubspot_inactivity(profile, config.engagement_unknown_activity_days)
    score += tier_points(inactivity, config.engagement_activity_tiers, AT_MOST)
    factors += 1

    return int(round_half_up(score / factors))


def negative_feedback(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Repeated low ratings within the last two weeks."""
    since = as_utc(now) - timedelta(days=config.negative_feedback_window_days)
    negative = [
        f for f in profile.feedback
        if f.date is not None
        and as_utc(f.date) >= since
        and f.rating <= config.negative_feedback_max_rating
    ]
    count = len(negative)
    if count == 0 or count < thresholds.negative_feedback_count:
        return None

    severity = Severity.CRITICAL if count >= config.negative_feedback_critical_count else Severity.HIGH
    return _alert(
        profile, now,
        type=AlertType.NEGATIVE_FEEDBACK,
        severity=severity,
        title=f"{count} negative feedback in 2 weeks",
        description=(
            f"Customer has received {count} negative feedback entries "
            f"(rating <= {config.negative_feedback_max_rating}) in the past 2 weeks. "
            "Immediate attention required."
        ),
        data={
            "count": count,
            "averageRating": round(mean([f.rating for f in negative]), 1),
            "timeframe": "2 weeks",
        },
    )


def renewal_risk(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Renewal within 90 days combined with at least one engagement warning sign."""
    if profile.renewal_date is None:
        return None

    days_until = _days_until(profile.renewal_date, now)
    if days_until <= 0 or days_until > config.renewal_window_days:
        return None

    risk_factors: List[str] = []
    if profile.product_count < config.renewal_min_products:
        risk_factors.append("low product usage")
    if profile.health_score is not None and profile.health_score < config.renewal_low_health:
        risk_factors.append("low health score")
    hubspot = profile.integrations.hubspot
    if hubspot is not None and hubspot.days_since_last_activity > config.renewal_inactive_days:
        risk_factors.append("no recent sales activity")

    if not risk_factors:
        return None

    severity = Severity.MEDIUM
    for max_days, level in config.renewal_severity_tiers:
        if days_until <= max_days:
            severity = Severity(level)
            break

    return _alert(
        profile, now,
        type=AlertType.RENEWAL_RISK,
        severity=severity,
        title=f"Renewal in {days_until} days, {' & '.join(risk_factors)}",
        description=(
            f"Customer renewal is approaching in {days_until} days with concerning "
            f"engagement indicators: {', '.join(risk_factors)}."
        ),
        data={
            "daysUntilRenewal": days_until,
            "renewalDate": as_utc(profile.renewal_date).date().isoformat(),
            "riskFactors": risk_factors,
            "healthScore": profile.health_score,
        },
    )


def low_engagement(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Low engagement score and CRM inactivity beyond the customer's tolerance."""
    score = engagement_score(profile, config)
    inactivity = hubspot_inactivity(profile, config.engagement_unknown_activity_days)
    if score >= config.low_engagement_below or inactivity <= thresholds.low_engagement_days:
        return None

    hubspot = profile.integrations.hubspot
    return _alert(
        profile, now,
        type=AlertType.LOW_ENGAGEMENT,
        severity=Severity.HIGH if score < config.low_engagement_high_below else Severity.MEDIUM,
        title=f"Low customer engagement ({score}% score)",
        description=(
            "Customer shows minimal engagement across products and services. "
            "Consider proactive outreach."
        ),
        data={
            "engagementScore": score,
            "productUsage": profile.product_count,
            "lastActivity": hubspot.days_since_last_activity if hubspot else "unknown",
        },
        action_required=False,
    )


def critical_issues(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Critical development issues in the issue tracker."""
    jira = profile.integrations.jira
    if jira is None or jira.critical_issues == 0:
        return None
    if jira.critical_issues < thresholds.critical_issues_count:
        return None

    count = jira.critical_issues
    return _alert(
        profile, now,
        type=AlertType.CRITICAL_ISSUES,
        severity=Severity.CRITICAL if count >= config.critical_issues_critical_count else Severity.HIGH,
        title=f"{count} critical development issues",
        description=(
            f"Customer has {count} critical issues in development. "
            f"Average resolution time: {jira.avg_resolution_time:g}h."
        ),
        data={
            "criticalIssues": count,
            "openIssues": jira.open_issues,
            "avgResolutionTime": jira.avg_resolution_time,
        },
    )


def support_overload(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Urgent tickets, a high open-ticket ratio, or too many open tickets."""
    zendesk = profile.integrations.zendesk
    if zendesk is None:
        return None

    total = zendesk.open_tickets + zendesk.solved_tickets
    open_ratio = zendesk.open_tickets / total if total > 0 else 0.0
    overloaded = (
        zendesk.urgent_tickets >= config.support_urgent_tickets
        or open_ratio > config.support_open_ratio
        or zendesk.open_tickets >= thresholds.support_ticket_count
    )
    if not overloaded:
        return None

    open_pct = int(round_half_up(open_ratio * 100))
    severity = (
        Severity.CRITICAL if zendesk.urgent_tickets >= config.support_critical_urgent else Severity.HIGH
    )
    return _alert(
        profile, now,
        type=AlertType.SUPPORT_OVERLOAD,
        severity=severity,
        title=f"Support overload: {zendesk.urgent_tickets} urgent tickets",
        description=(
            f"Customer has {zendesk.urgent_tickets} urgent support tickets "
            f"and {open_pct}% open ticket ratio."
        ),
        data={
            "urgentTickets": zendesk.urgent_tickets,
            "openTickets": zendesk.open_tickets,
            "openRatio": open_pct,
            "satisfactionScore": zendesk.satisfaction_score,
        },
    )


def sales_stagnation(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Long CRM silence with no open deals on a non-customer lifecycle stage."""
    hubspot = profile.integrations.hubspot
    if hubspot is None:
        return None

    stagnant = (
        hubspot.days_since_last_activity > config.sales_inactive_days
        and hubspot.open_deals == 0
        and hubspot.lifecycle_stage.lower() != "customer"
    )
    if not stagnant:
        return None

    days = hubspot.days_since_last_activity
    return _alert(
        profile, now,
        type=AlertType.SALES_STAGNATION,
        severity=Severity.MEDIUM,
        title=f"Sales stagnation: {days} days inactive",
        description=(
            f"No sales activity for {days} days, no open deals, "
            f"lifecycle stage: {hubspot.lifecycle_stage}."
        ),
        data={
            "daysSinceLastActivity": days,
            "openDeals": hubspot.open_deals,
            "lifecycleStage": hubspot.lifecycle_stage,
            "totalDealValue": hubspot.total_deal_value,
        },
        action_required=False,
    )


def health_score_decline(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """Drop across the last three health score history points."""
    history = profile.health_score_history
    if len(history) < config.decline_window:
        return None

    recent = history[-config.decline_window:]
    previous, current = recent[0].score, recent[-1].score
    # Rounded to strip float noise from score subtraction
    decline = round(previous - current, 4)
    if decline < thresholds.health_score_decline:
        return None

    if decline >= config.decline_critical:
        severity = Severity.CRITICAL
    elif decline >= config.decline_high:
        severity = Severity.HIGH
    else:
        severity = Severity.MEDIUM

    return _alert(
        profile, now,
        type=AlertType.HEALTH_SCORE_DECLINE,
        severity=severity,
        title=f"Health score declining by {decline:.1f} points",
        description=(
            f"Customer health score has declined by {decline:.1f} points over recent "
            f"period. Current score: {current:g}/10"
        ),
        data={
            "decline": round(decline, 1),
            "currentScore": current,
            "previousScore": previous,
            "trend": "declining",
        },
    )


def product_adoption_stagnation(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """High-ARR customer stuck on a single product with no recent activity."""
    idle_days = days_since(profile.last_activity_at, now)
    if idle_days is None:
        idle_days = config.unknown_activity_days

    stagnant = (
        profile.arr > config.adoption_min_arr
        and profile.product_count <= config.adoption_max_products
        and idle_days > config.adoption_inactive_days
    )
    if not stagnant:
        return None

    return _alert(
        profile, now,
        type=AlertType.PRODUCT_ADOPTION_STAGNATION,
        severity=Severity.HIGH if profile.arr > config.adoption_high_arr else Severity.MEDIUM,
        title="Low product adoption for high-value customer",
        description=(
            f"Customer with ${profile.arr:,.0f} ARR is only using "
            f"{profile.product_count} product(s). Expansion opportunity identified."
        ),
        data={
            "productCount": profile.product_count,
            "arr": profile.arr,
            "daysSinceUpdate": idle_days,
            "expansionPotential": "high",
        },
    )


def escalation_risk(
    profile: CustomerProfile,
    now: datetime,
    thresholds: AlertThresholds,
    config: AlertConfig = DEFAULT_CONFIG.alerts,
) -> Optional[Alert]:
    """
    Weighted sum of escalation indicators.

    - Critical tracker issues: +30
    - More than 2 urgent tickets: +25
    - Support satisfaction below 60: +20
    - 2+ ratings <= 2 in the past week: +25

    Fires at 50, critical at 75.
    """
    points = dict(config.escalation_points)
    risk_score = 0
    risk_factors: List[str] = []

    jira = profile.integrations.jira
    if jira is not None and jira.critical_issues > 0:
        risk_score += points["critical_issues"]
        risk_factors.append(f"{jira.critical_issues} critical Jira issues")

    zendesk = profile.integrations.zendesk
    if zendesk is not None and zendesk.urgent_tickets > config.escalation_urgent_above:
        risk_score += points["urgent_tickets"]
        risk_factors.append(f"{zendesk.urgent_tickets} urgent support tickets")

    if (
        zendesk is not None
        and zendesk.satisfaction_score is not None
        and zendesk.satisfaction_score < config.escalation_low_satisfaction
    ):
        risk_score += points["low_satisfaction"]
        risk_factors.append(f"Low satisfaction score ({zendesk.satisfaction_score:g}%)")

    since = as_utc(now) - timedelta(days=config.escalation_window_days)
    recent_negative = sum(
        1 for f in profile.feedback
        if f.date is not None
        and as_utc(f.date) > since
        and f.rating <= config.escalation_max_rating
    )
    if recent_negative >= config.escalation_min_negative:
        risk_score += points["negative_feedback"]
        risk_factors.append(f"{recent_negative} negative feedback in past week")

    if risk_score < config.escalation_trigger:
        return None

    return _alert(
        profile, now,
        type=AlertType.ESCALATION_RISK,
        severity=Severity.CRITICAL if risk_score >= config.escalation_critical else Severity.HIGH,
        title="High escalation risk detected",
        description=(
            "Customer shows multiple risk indicators that may lead to escalation. "
            f"Risk score: {risk_score}/100"
        ),
        data={
            "riskScore": risk_score,
            "riskFactors": risk_factors,
            "recommendedAction": "immediate_attention",
        },
    )


# Evaluation order of the detectors
DETECTORS: List[Detector] = [
    negative_feedback,
    renewal_risk,
    low_engagement,
    critical_issues,
    support_overload,
    sales_stagnation,
    health_score_decline,
    product_adoption_stagnation,
    escalation_risk,
]
