"""Recommended actions and one-paragraph status summaries for account teams."""

from typing import List, Sequence

from ..profile import CustomerProfile
from .models import Alert, AlertType, Severity

ALERT_ACTIONS = {
    AlertType.NEGATIVE_FEEDBACK: "schedule customer success call",
    AlertType.RENEWAL_RISK: "initiate renewal discussion",
    AlertType.CRITICAL_ISSUES: "escalate to development team",
    AlertType.SUPPORT_OVERLOAD: "assign dedicated support manager",
}

HEALTH_CHECK_BELOW = 6.0
TRAINING_BELOW_PRODUCTS = 2


def recommend_actions(profile: CustomerProfile, alerts: Sequence[Alert]) -> List[str]:
    """
    Suggested next steps, de-duplicated in first-seen order.

    Alert-driven actions come first, then health and adoption follow-ups.
    """
    actions = [ALERT_ACTIONS[a.type] for a in alerts if a.type in ALERT_ACTIONS]

    if profile.health_score is not None and profile.health_score < HEALTH_CHECK_BELOW:
        actions.append("conduct health check meeting")
    if profile.product_count < TRAINING_BELOW_PRODUCTS:
        actions.append("provide product training")

    return list(dict.fromkeys(actions))


def health_status(health_score) -> str:
    if health_score is None:
        return "Unknown"
    if health_score >= 8:
        return "Healthy"
    if health_score >= 6:
        return "At Risk"
    return "Critical"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def summarize(profile: CustomerProfile, alerts: Sequence[Alert]) -> str:
    """
    Plain-text account summary: status, integration snapshot, alerts, actions.

    Example:
        "Acme is currently in At Risk status with a health score of 6.5.
        Current status: 4 open development issues, 2 support tickets.
        1 high-priority alert needs review. Recommended actions: ..."
    """
    name = profile.name or profile.customer_id or "Customer"
    score = "unknown" if profile.health_score is None else f"{profile.health_score:g}"
    parts = [
        f"{name} is currently in {health_status(profile.health_score)} status "
        f"with a health score of {score}."
    ]

    snapshot = []
    integrations = profile.integrations
    if integrations.jira is not None:
        snapshot.append(f"{integrations.jira.open_issues} open development issues")
    if integrations.zendesk is not None:
        snapshot.append(f"{integrations.zendesk.open_tickets} support tickets")
    if integrations.hubspot is not None:
        snapshot.append(f"{integrations.hubspot.lifecycle_stage} lifecycle stage")
    if snapshot:
        parts.append(f"Current status: {', '.join(snapshot)}.")

    if alerts:
        critical = sum(1 for a in alerts if a.severity is Severity.CRITICAL)
        high = sum(1 for a in alerts if a.severity is Severity.HIGH)
        if critical:
            verb = "requires" if critical == 1 else "require"
            parts.append(f"{_plural(critical, 'critical alert')} {verb} immediate attention.")
        elif high:
            verb = "needs" if high == 1 else "need"
            parts.append(f"{_plural(high, 'high-priority alert')} {verb} review.")
    else:
        parts.append("No active alerts - customer appears stable.")

    actions = recommend_actions(profile, alerts)
    if actions:
        parts.append(f"Recommended actions: {', '.join(actions)}.")

    return " ".join(parts)
