"""Functional-medicine zone classification for lab values.

A value is compared against two nested intervals: the conventional
(diagnostic) reference range and the narrower functional range. The
expected configuration is

    conventional_low <= functional_low <= functional_high <= conventional_high

but it is not enforced. Malformed ranges are evaluated exactly as given and
may produce a zone that makes no clinical sense; they never raise.
"""

from dataclasses import dataclass
from enum import Enum


class Zone(str, Enum):
    OPTIMAL = "optimal"
    FUNCTIONAL_DEVIATION = "functional_deviation"
    ABNORMAL = "abnormal"


ZONE_LABELS: dict[Zone, str] = {
    Zone.OPTIMAL: "Optimal",
    Zone.FUNCTIONAL_DEVIATION: "Functional Deviation",
    Zone.ABNORMAL: "Abnormal",
}


@dataclass(frozen=True)
class ReferenceRanges:
    conventional_low: float | None = None
    conventional_high: float | None = None
    functional_low: float | None = None
    functional_high: float | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.conventional_low,
            self.conventional_high,
            self.functional_low,
            self.functional_high,
        )

    @classmethod
    def from_record(cls, record) -> "ReferenceRanges":
        """Build from anything carrying the ``*_range_low/high`` attributes of a lab result."""
        return cls(
            conventional_low=record.conventional_range_low,
            conventional_high=record.conventional_range_high,
            functional_low=record.functional_range_low,
            functional_high=record.functional_range_high,
        )


def classify(
    value: float,
    conventional_low: float,
    conventional_high: float,
    functional_low: float,
    functional_high: float,
) -> Zone:
    if functional_low <= value <= functional_high:
        return Zone.OPTIMAL
    if value < conventional_low or value > conventional_high:
        return Zone.ABNORMAL
    return Zone.FUNCTIONAL_DEVIATION


def classify_ranges(value: float, ranges: ReferenceRanges) -> Zone | None:
    if not ranges.is_complete:
        return None
    return classify(
        value,
        ranges.conventional_low,
        ranges.conventional_high,
        ranges.functional_low,
        ranges.functional_high,
    )


def resolve_zone(value: float | None, ranges: ReferenceRanges, stored_zone: str | None = None) -> Zone | None:
    """Zone for a stored result.

    The raw ranges are the source of truth; a stored zone is only used when a
    boundary is missing and the value cannot be reclassified.
    """
    if value is not None:
        computed = classify_ranges(value, ranges)
        if computed is not None:
            return computed
    if stored_zone:
        try:
            return Zone(stored_zone)
        except ValueError:
            return None
    return None
