import math
from dataclasses import dataclass
from datetime import date
from typing import Literal, Sequence

from clinic_api.config import settings
from clinic_api.services.series_filter import sort_series

Direction = Literal["up", "down", "stable"]


@dataclass(frozen=True)
class SeriesPoint:
    date: date
    value: float
    zone: str | None = None
    ref: str | None = None


@dataclass(frozen=True)
class Trend:
    direction: Direction
    percentage_change: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.percentage_change)

    def as_dict(self) -> dict:
        return {
            "direction": self.direction,
            "percentage_change": round(self.percentage_change, 2) if self.is_finite else None,
        }


STABLE = Trend("stable", 0.0)


def percentage_change(first: float, last: float) -> float:
    """Relative change from ``first`` to ``last`` in percent.

    A zero baseline yields ``nan`` (no change) or a signed ``inf`` instead of
    raising; callers must check before displaying.
    """
    delta = last - first
    if first == 0:
        if delta == 0:
            return math.nan
        return math.copysign(math.inf, delta)
    return delta / first * 100.0


def direction_for(change: float, threshold: float | None = None) -> Direction:
    """Classify a percentage change as up, down or stable.

    The bound is inclusive: with the default 5% threshold a move from 100 to
    105 reads as stable and 100 to 106 as up. ``nan`` (a 0 to 0 series) is
    stable.
    """
    limit = settings.trend_stable_threshold if threshold is None else threshold
    if math.isnan(change) or abs(change) <= limit:
        return "stable"
    return "up" if change > 0 else "down"


def endpoint_trend(series: Sequence[SeriesPoint], threshold: float | None = None) -> Trend:
    """Change between the earliest and the latest point."""
    if len(series) < 2:
        return STABLE
    ordered = sort_series(series)
    change = percentage_change(ordered[0].value, ordered[-1].value)
    return Trend(direction_for(change, threshold), change)


def step_trend(series: Sequence[SeriesPoint], threshold: float | None = None) -> Trend:
    """Change between the two most recent points."""
    if len(series) < 2:
        return STABLE
    ordered = sort_series(series)
    change = percentage_change(ordered[-2].value, ordered[-1].value)
    return Trend(direction_for(change, threshold), change)
