"""
Data schema definitions for portfolio evaluation frames.

Uses Pandera for runtime validation of the per-customer frame built by
summarize_portfolio, so an out-of-range score from an engine regression
fails loudly instead of skewing portfolio aggregates.
"""

from pandera import Column, Check, DataFrameSchema


RISK_LEVELS = ["low", "medium", "high", "critical"]
BEHAVIOR_CATEGORIES = ["Champion", "Advocate", "Passive", "At Risk", "Critical"]
OUTLOOKS = [
    "improving",
    "slightly_improving",
    "stable",
    "slightly_declining",
    "declining",
    "insufficient_data",
]
RENEWAL_LIKELIHOODS = ["high", "medium", "low"]


# Schema for the per-customer portfolio frame
PORTFOLIO_FRAME_SCHEMA = DataFrameSchema(
    {
        "CUSTOMER_ID": Column(
            str,
            nullable=False,
            description="Customer identifier (may be empty for ad-hoc profiles)"
        ),
        "NAME": Column(str, nullable=False),
        "ARR": Column(
            float,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
            description="Annual recurring revenue"
        ),
        "HEALTH_SCORE": Column(
            float,
            nullable=False,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(10),
            ],
            description="Computed health score (0-10)"
        ),
        "RISK_SCORE": Column(
            int,
            nullable=False,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(100),
            ],
            description="Churn risk score (0-100)"
        ),
        "RISK_LEVEL": Column(
            str,
            nullable=False,
            checks=Check.isin(RISK_LEVELS),
        ),
        "BEHAVIOR_SCORE": Column(
            int,
            nullable=False,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(100),
            ],
        ),
        "BEHAVIOR_CATEGORY": Column(
            str,
            nullable=False,
            checks=Check.isin(BEHAVIOR_CATEGORIES),
        ),
        "OUTLOOK": Column(
            str,
            nullable=False,
            checks=Check.isin(OUTLOOKS),
            description="Combined trend outlook"
        ),
        "RENEWAL_ESTIMATE": Column(
            str,
            nullable=False,
            checks=Check.isin(RENEWAL_LIKELIHOODS),
            description="Advisory renewal likelihood"
        ),
        "ALERT_COUNT": Column(
            int,
            nullable=False,
            checks=Check.greater_than_or_equal_to(0),
        ),
    },
    strict=False,  # Allow per-severity alert columns
    coerce=True,
    description="Schema for per-customer portfolio evaluation output"
)
