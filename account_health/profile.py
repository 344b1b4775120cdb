"""
Customer profile types.

A CustomerProfile is assembled by the data layer from stored account records
and already-fetched integration metrics. Each integration source is an
optional field: an absent source contributes no evidence to any score.

Profiles are immutable. Stored documents are parsed through pydantic
document models (camelCase or snake_case keys, range checks, ISO-8601
dates), so malformed input (out-of-range ratings, scores, negative counts,
unparseable dates) is rejected with ProfileValidationError before it can
reach a weighted sum.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, List, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


class ProfileValidationError(ValueError):
    """Raised when a customer profile contains malformed input."""

    def __init__(self, field_name: str, message: str):
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "ProfileValidationError":
        """Report the first pydantic error under its dotted field path."""
        first = error.errors()[0]
        return cls(_field_path(first["loc"]), first["msg"])


class RenewalLikelihood(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(moment: Optional[datetime], now: datetime) -> Optional[int]:
    """Whole days elapsed from moment to now (floored), or None if unknown."""
    if moment is None:
        return None
    delta = as_utc(now) - as_utc(moment)
    return int(delta.total_seconds() // 86400)


@dataclass(frozen=True)
class FeedbackEntry:
    date: datetime
    rating: float
    sentiment: Optional[str] = None
    category: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class HealthScorePoint:
    date: datetime
    score: float


@dataclass(frozen=True)
class SentimentPoint:
    date: datetime
    score: float


@dataclass(frozen=True)
class ProductUsage:
    name: str
    type: str = "Other"


@dataclass(frozen=True)
class SocialStats:
    linkedin: int = 0
    twitter: int = 0

    @property
    def total(self) -> int:
        return self.linkedin + self.twitter


@dataclass(frozen=True)
class JiraMetrics:
    """Issue-tracker metrics for one customer project."""

    open_issues: int = 0
    resolved_issues: int = 0
    critical_issues: int = 0
    avg_resolution_time: float = 0.0  # hours
    last_sync: Optional[datetime] = None


@dataclass(frozen=True)
class ZendeskMetrics:
    """
    Ticketing metrics for one customer organization.

    A freshly created ticketing cache stores satisfaction 0 with no ratings;
    that is read as unknown satisfaction rather than as 0%.
    """

    open_tickets: int = 0
    solved_tickets: int = 0
    urgent_tickets: int = 0
    avg_first_response_time: float = 0.0  # hours
    satisfaction_score: Optional[float] = None  # 0-100
    total_ratings: int = 0
    last_sync: Optional[datetime] = None

    def __post_init__(self):
        if self.satisfaction_score == 0 and self.total_ratings == 0:
            object.__setattr__(self, "satisfaction_score", None)


@dataclass(frozen=True)
class HubspotMetrics:
    """CRM metrics for one customer company."""

    lifecycle_stage: str = "unknown"
    days_since_last_activity: int = 0
    open_deals: int = 0
    total_deals: int = 0
    won_deals: int = 0
    total_deal_value: float = 0.0
    won_deal_value: float = 0.0
    last_sync: Optional[datetime] = None


@dataclass(frozen=True)
class IntegrationMetrics:
    jira: Optional[JiraMetrics] = None
    zendesk: Optional[ZendeskMetrics] = None
    hubspot: Optional[HubspotMetrics] = None

    @property
    def is_empty(self) -> bool:
        return self.jira is None and self.zendesk is None and self.hubspot is None


@dataclass(frozen=True)
class StoredHealthMetrics:
    """Integration sub-scores (0-100) last persisted on the customer record."""

    support_health: Optional[float] = None
    development_health: Optional[float] = None
    sales_health: Optional[float] = None


@dataclass(frozen=True)
class CustomerProfile:
    """
    Immutable input to every engine computation.

    Sequences are tuples; product_usage holds distinct enrollments.
    Histories (health_score_history, sentiment_trend) are chronological.
    """

    customer_id: str = ""
    name: str = ""
    health_score: Optional[float] = None
    health_score_history: Tuple[HealthScorePoint, ...] = ()
    arr: float = 0.0
    feedback: Tuple[FeedbackEntry, ...] = ()
    sentiment_trend: Tuple[SentimentPoint, ...] = ()
    ticket_volume: Optional[int] = None
    product_usage: Tuple[ProductUsage, ...] = ()
    renewal_likelihood: Optional[RenewalLikelihood] = None
    renewal_date: Optional[datetime] = None
    social_stats: Optional[SocialStats] = None
    integrations: IntegrationMetrics = field(default_factory=IntegrationMetrics)
    last_activity_at: Optional[datetime] = None
    metrics: Optional[StoredHealthMetrics] = None

    def __post_init__(self):
        # Distinct enrollments, first occurrence wins
        seen = []
        for product in self.product_usage:
            if product not in seen:
                seen.append(product)
        object.__setattr__(self, "product_usage", tuple(seen))
        if isinstance(self.renewal_likelihood, str) and not isinstance(
            self.renewal_likelihood, RenewalLikelihood
        ):
            try:
                value = RenewalLikelihood(self.renewal_likelihood.lower())
            except ValueError:
                raise ProfileValidationError(
                    "renewal_likelihood", f"unknown value {self.renewal_likelihood!r}"
                ) from None
            object.__setattr__(self, "renewal_likelihood", value)

    @property
    def product_count(self) -> int:
        return len(self.product_usage)

    def validate(self) -> "CustomerProfile":
        """
        Check every field against its declared range.

        Returns:
            self, so calls can be chained

        Raises:
            ProfileValidationError: naming the first offending field
        """
        data = asdict(self)
        data["integration_data"] = data.pop("integrations")
        try:
            CustomerDocument.model_validate(data)
        except ValidationError as e:
            raise ProfileValidationError.from_pydantic(e) from None
        return self

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomerProfile":
        """
        Build a validated profile from a stored customer document.

        Accepts camelCase keys (healthScore, integrationData, ...) or
        snake_case keys. Missing keys mean missing evidence. Integration
        metrics come from integrationData; the integrations block of a
        stored record holds connector settings and is not read.
        """
        try:
            document = CustomerDocument.model_validate(data)
        except ValidationError as e:
            raise ProfileValidationError.from_pydantic(e) from None
        return document.to_profile()


# --- Stored document models -------------------------------------------------


def _field_path(loc: Tuple[Any, ...]) -> str:
    """('integration_data', 'jira', 'open_issues') -> 'jira.open_issues'."""
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int) and parts:
            parts[-1] += f"[{item}]"
        elif item != "integration_data":
            parts.append(str(item))
    return ".".join(parts)


def _none_as_zero(value: Any) -> Any:
    return 0 if value is None else value


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


def _empty_as_none(value: Any) -> Any:
    return value or None


def _as_text(value: Any) -> Any:
    return "" if value is None else str(value)


def _coerce_date(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value


Count = Annotated[int, BeforeValidator(_none_as_zero), Field(ge=0)]
Hours = Annotated[float, BeforeValidator(_none_as_zero), Field(ge=0)]
Money = Annotated[float, BeforeValidator(_none_as_zero)]
Text = Annotated[str, BeforeValidator(_as_text)]
Timestamp = Annotated[Optional[datetime], BeforeValidator(_coerce_date)]
RequiredTimestamp = Annotated[datetime, BeforeValidator(_coerce_date)]

_TIMESTAMP = TypeAdapter(Timestamp)


def parse_datetime(value: Any, field_name: str) -> Optional[datetime]:
    """Parse an ISO-8601 string, date or datetime into an aware datetime."""
    try:
        parsed = _TIMESTAMP.validate_python(value)
    except ValidationError as e:
        raise ProfileValidationError(field_name, e.errors()[0]["msg"]) from None
    return None if parsed is None else as_utc(parsed)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return None if value is None else as_utc(value)


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        loc_by_alias=False,
        allow_inf_nan=False,
        extra="ignore",
    )


class FeedbackDocument(_Document):
    date: RequiredTimestamp
    rating: float = Field(ge=1, le=5)
    sentiment: Optional[str] = None
    category: Optional[str] = None
    comment: Optional[str] = None


class HealthPointDocument(_Document):
    date: RequiredTimestamp
    score: float = Field(ge=0, le=10)


class SentimentPointDocument(_Document):
    date: RequiredTimestamp
    score: float = Field(ge=0, le=100)


class ProductDocument(_Document):
    name: Text = ""
    type: Optional[str] = None


def _product_from_name(value: Any) -> Any:
    return {"name": value} if isinstance(value, str) else value


Product = Annotated[ProductDocument, BeforeValidator(_product_from_name)]


class SocialDocument(_Document):
    linkedin: Count = 0
    twitter: Count = 0


class JiraDocument(_Document):
    open_issues: Count = 0
    resolved_issues: Count = 0
    critical_issues: Count = 0
    avg_resolution_time: Hours = 0.0
    last_sync: Timestamp = None

    def to_metrics(self) -> JiraMetrics:
        return JiraMetrics(
            open_issues=self.open_issues,
            resolved_issues=self.resolved_issues,
            critical_issues=self.critical_issues,
            avg_resolution_time=self.avg_resolution_time,
            last_sync=_utc(self.last_sync),
        )


class ZendeskDocument(_Document):
    open_tickets: Count = 0
    solved_tickets: Count = 0
    urgent_tickets: Count = 0
    avg_first_response_time: Hours = 0.0
    satisfaction_score: Optional[float] = Field(None, ge=0, le=100)
    total_ratings: Count = 0
    last_sync: Timestamp = None

    def to_metrics(self) -> ZendeskMetrics:
        return ZendeskMetrics(
            open_tickets=self.open_tickets,
            solved_tickets=self.solved_tickets,
            urgent_tickets=self.urgent_tickets,
            avg_first_response_time=self.avg_first_response_time,
            satisfaction_score=self.satisfaction_score,
            total_ratings=self.total_ratings,
            last_sync=_utc(self.last_sync),
        )


class HubspotDocument(_Document):
    lifecycle_stage: Optional[str] = None
    days_since_last_activity: Count = 0
    open_deals: Count = 0
    total_deals: Count = 0
    won_deals: Count = 0
    total_deal_value: Money = 0.0
    won_deal_value: Money = 0.0
    last_sync: Timestamp = None

    @field_validator("won_deals")
    @classmethod
    def _won_within_total(cls, value, info):
        if value > info.data.get("total_deals", value):
            raise ValueError("exceeds total_deals")
        return value

    def to_metrics(self) -> HubspotMetrics:
        return HubspotMetrics(
            lifecycle_stage=self.lifecycle_stage or "unknown",
            days_since_last_activity=self.days_since_last_activity,
            open_deals=self.open_deals,
            total_deals=self.total_deals,
            won_deals=self.won_deals,
            total_deal_value=self.total_deal_value,
            won_deal_value=self.won_deal_value,
            last_sync=_utc(self.last_sync),
        )


class IntegrationDataDocument(_Document):
    # An empty source block means the source was never synced
    jira: Annotated[Optional[JiraDocument], BeforeValidator(_empty_as_none)] = None
    zendesk: Annotated[Optional[ZendeskDocument], BeforeValidator(_empty_as_none)] = None
    hubspot: Annotated[Optional[HubspotDocument], BeforeValidator(_empty_as_none)] = None

    def to_metrics(self) -> IntegrationMetrics:
        return IntegrationMetrics(
            jira=self.jira.to_metrics() if self.jira else None,
            zendesk=self.zendesk.to_metrics() if self.zendesk else None,
            hubspot=self.hubspot.to_metrics() if self.hubspot else None,
        )


class StoredMetricsDocument(_Document):
    support_health: Optional[float] = Field(None, ge=0, le=100)
    development_health: Optional[float] = Field(None, ge=0, le=100)
    sales_health: Optional[float] = Field(None, ge=0, le=100)


class CustomerDocument(_Document):
    """One stored customer record, as read from the persistence layer."""

    customer_id: Text = Field("", validation_alias=AliasChoices("customerId", "customer_id", "_id", "id"))
    name: Text = ""
    health_score: Optional[float] = Field(None, ge=0, le=10)
    health_score_history: Annotated[List[HealthPointDocument], BeforeValidator(_none_as_empty)] = []
    arr: Annotated[float, BeforeValidator(_none_as_zero), Field(ge=0)] = 0.0
    feedback: Annotated[List[FeedbackDocument], BeforeValidator(_none_as_empty)] = Field(
        [], validation_alias=AliasChoices("feedback", "feedbackEntries", "feedback_entries")
    )
    sentiment_trend: Annotated[List[SentimentPointDocument], BeforeValidator(_none_as_empty)] = []
    ticket_volume: Optional[int] = Field(None, ge=0)
    product_usage: Annotated[List[Product], BeforeValidator(_none_as_empty)] = []
    renewal_likelihood: Optional[RenewalLikelihood] = None
    renewal_date: Timestamp = None
    social_stats: Optional[SocialDocument] = None
    integration_data: IntegrationDataDocument = Field(
        default_factory=IntegrationDataDocument,
        validation_alias=AliasChoices(
            "integrationData", "integration_data", "integrationMetrics", "integration_metrics"
        ),
    )
    last_activity_at: Timestamp = Field(
        None,
        validation_alias=AliasChoices("lastActivityAt", "last_activity_at", "lastHealthScoreUpdate"),
    )
    metrics: Optional[StoredMetricsDocument] = None

    @field_validator("renewal_likelihood", mode="before")
    @classmethod
    def _normalize_likelihood(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @field_validator("integration_data", mode="before")
    @classmethod
    def _missing_integrations(cls, value):
        return {} if value is None else value

    def to_profile(self) -> CustomerProfile:
        social = None
        if self.social_stats is not None:
            social = SocialStats(linkedin=self.social_stats.linkedin, twitter=self.social_stats.twitter)

        metrics = None
        if self.metrics is not None:
            metrics = StoredHealthMetrics(
                support_health=self.metrics.support_health,
                development_health=self.metrics.development_health,
                sales_health=self.metrics.sales_health,
            )

        return CustomerProfile(
            customer_id=self.customer_id,
            name=self.name,
            health_score=self.health_score,
            health_score_history=tuple(
                HealthScorePoint(date=as_utc(p.date), score=p.score) for p in self.health_score_history
            ),
            arr=self.arr,
            feedback=tuple(
                FeedbackEntry(
                    date=as_utc(f.date),
                    rating=f.rating,
                    sentiment=f.sentiment,
                    category=f.category,
                    comment=f.comment,
                )
                for f in self.feedback
            ),
            sentiment_trend=tuple(
                SentimentPoint(date=as_utc(p.date), score=p.score) for p in self.sentiment_trend
            ),
            ticket_volume=self.ticket_volume,
            product_usage=tuple(
                ProductUsage(name=p.name, type=p.type or "Other") for p in self.product_usage
            ),
            renewal_likelihood=self.renewal_likelihood,
            renewal_date=_utc(self.renewal_date),
            social_stats=social,
            integrations=self.integration_data.to_metrics(),
            last_activity_at=_utc(self.last_activity_at),
            metrics=metrics,
        )
