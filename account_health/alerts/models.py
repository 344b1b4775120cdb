"""Alert value objects."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class AlertType(str, Enum):
    NEGATIVE_FEEDBACK = "negative_feedback"
    RENEWAL_RISK = "renewal_risk"
    LOW_ENGAGEMENT = "low_engagement"
    CRITICAL_ISSUES = "critical_issues"
    SUPPORT_OVERLOAD = "support_overload"
    SALES_STAGNATION = "sales_stagnation"
    HEALTH_SCORE_DECLINE = "health_score_decline"
    PRODUCT_ADOPTION_STAGNATION = "product_adoption_stagnation"
    ESCALATION_RISK = "escalation_risk"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"critical": 4, "high": 3, "medium": 2, "low": 1}[self.value]


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Alert:
    """
    One detected condition for one customer.

    priority and priority_score are filled in by AlertEngine.prioritize;
    a freshly detected alert has no priority yet.
    """

    type: AlertType
    severity: Severity
    title: str
    description: str
    created_at: datetime
    data: Dict[str, Any] = field(default_factory=dict)
    action_required: bool = True
    priority: Optional[Priority] = None
    priority_score: int = 0
    customer_id: str = ""
    customer_name: str = ""

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "data": dict(self.data),
            "actionRequired": self.action_required,
            "priority": self.priority.value if self.priority else None,
            "priorityScore": self.priority_score,
            "createdAt": self.created_at.isoformat(),
            "customerId": self.customer_id,
            "customerName": self.customer_name,
        }
