"""
Weighted signal folding and tier lookups shared by every scorer.

A composite score is a fold over a declarative list of WeightedSignal
entries. Entries whose value is None carry no evidence and are skipped:
they add neither to the numerator nor to the applied weight, so the
result is always an average over the evidence that is present.
"""

import math
import operator
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class WeightedSignal:
    name: str
    value: Optional[float]  # normalized 0-1, None when absent
    weight: float

    @property
    def present(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class SignalContribution:
    """One row of a score breakdown, for explainability."""

    name: str
    value: float
    weight: float
    contribution: float


@dataclass(frozen=True)
class FoldResult:
    ratio: Optional[float]  # None when no signal was present
    applied_weight: float
    contributions: Tuple[SignalContribution, ...]


def fold_signals(signals: Iterable[WeightedSignal]) -> FoldResult:
    """
    Sum value x weight over present signals, in the order given.

    Args:
        signals: Signals in a fixed evaluation order

    Returns:
        FoldResult with total / applied_weight (or None if nothing present)
    """
    total = 0.0
    applied = 0.0
    rows = []
    for signal in signals:
        if not signal.present:
            continue
        contribution = signal.value * signal.weight
        total += contribution
        applied += signal.weight
        rows.append(SignalContribution(
            name=signal.name,
            value=signal.value,
            weight=signal.weight,
            contribution=contribution,
        ))

    ratio = total / applied if applied > 0 else None
    return FoldResult(ratio=ratio, applied_weight=applied, contributions=tuple(rows))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positives (x.5 -> x+1)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


Comparison = Callable[[float, float], bool]

ABOVE: Comparison = operator.gt
AT_LEAST: Comparison = operator.ge
BELOW: Comparison = operator.lt
AT_MOST: Comparison = operator.le


def tier_points(
    value: float,
    tiers: Sequence[Tuple[float, int]],
    compare: Comparison,
    default: int = 0,
) -> int:
    """
    Look up points from (threshold, points) tiers, first match wins.

    Example:
        >>> tier_points(5, ((4, 25), (6, 15), (8, 8)), BELOW)
        15
    """
    for threshold, points in tiers:
        if compare(value, threshold):
            return points
    return default
