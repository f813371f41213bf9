"""Map a lab series onto a 2D chart coordinate space.

Points are spaced evenly by index rather than by date so that clustered
results stay legible. The y axis is inverted because the chart origin is the
top-left corner. Drawing is left to the front-end; this module only produces
coordinates, background zone bands and the trend summary.
"""

from dataclasses import asdict, dataclass, field
from typing import Sequence

from clinic_api.config import settings
from clinic_api.services.series_filter import sort_series
from clinic_api.services.trend_analyzer import SeriesPoint, Trend, endpoint_trend, step_trend
from clinic_api.services.zone_classifier import ReferenceRanges, Zone, classify_ranges


@dataclass(frozen=True)
class ChartPoint:
    x: float
    y: float


@dataclass(frozen=True)
class ZoneBand:
    low: float
    high: float
    zone: Zone


@dataclass
class ChartModel:
    width: float
    height: float
    y_min: float
    y_max: float
    points: list[dict] = field(default_factory=list)
    bands: list[ZoneBand] = field(default_factory=list)
    endpoint_trend: Trend | None = None
    step_trend: Trend | None = None

    def as_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "y_min": self.y_min,
            "y_max": self.y_max,
            "points": self.points,
            "bands": [{"low": b.low, "high": b.high, "zone": b.zone.value} for b in self.bands],
            "endpoint_trend": self.endpoint_trend.as_dict() if self.endpoint_trend else None,
            "step_trend": self.step_trend.as_dict() if self.step_trend else None,
        }


def map_to_chart_space(
    values: Sequence[float],
    width: float,
    height: float,
    y_min: float,
    y_max: float,
) -> list[ChartPoint]:
    count = len(values)
    span = (count - 1) or 1
    y_span = (y_max - y_min) or 1.0
    return [
        ChartPoint(
            x=index / span * width,
            y=height - (value - y_min) / y_span * height,
        )
        for index, value in enumerate(values)
    ]


def y_bounds(
    values: Sequence[float],
    reference_low: float | None = None,
    reference_high: float | None = None,
    padding_ratio: float | None = None,
    min_padding: float | None = None,
) -> tuple[float, float]:
    """Axis extent covering the values and the reference bounds, with padding.

    When every input is identical the raw range is 0 and ``min_padding`` is
    used instead so the chart never collapses to zero height.
    """
    ratio = settings.chart_padding_ratio if padding_ratio is None else padding_ratio
    fallback = settings.chart_min_padding if min_padding is None else min_padding

    lows = [*values, *([reference_low] if reference_low is not None else [])]
    highs = [*values, *([reference_high] if reference_high is not None else [])]
    if not lows or not highs:
        return 0.0 - fallback, 0.0 + fallback

    raw_min = min(lows)
    raw_max = max(highs)
    raw_range = raw_max - raw_min
    padding = raw_range * ratio if raw_range > 0 else fallback
    return raw_min - padding, raw_max + padding


def zone_bands(ranges: ReferenceRanges, y_min: float, y_max: float) -> list[ZoneBand]:
    if not ranges.is_complete:
        return []
    conv_low, conv_high = ranges.conventional_low, ranges.conventional_high
    func_low, func_high = ranges.functional_low, ranges.functional_high

    candidates = [
        (y_min, conv_low, Zone.ABNORMAL),
        (conv_high, y_max, Zone.ABNORMAL),
        (conv_low, func_low, Zone.FUNCTIONAL_DEVIATION),
        (func_high, conv_high, Zone.FUNCTIONAL_DEVIATION),
        (func_low, func_high, Zone.OPTIMAL),
    ]
    bands = []
    for low, high, zone in candidates:
        low, high = max(low, y_min), min(high, y_max)
        if high > low:
            bands.append(ZoneBand(low=low, high=high, zone=zone))
    return bands


def build_chart(
    points: Sequence[SeriesPoint],
    ranges: ReferenceRanges,
    width: float = 800,
    height: float = 300,
) -> ChartModel:
    ordered = sort_series(points)
    values = [p.value for p in ordered]
    y_min, y_max = y_bounds(values, ranges.conventional_low, ranges.conventional_high)
    coords = map_to_chart_space(values, width, height, y_min, y_max)

    mapped = []
    for point, coord in zip(ordered, coords):
        # Points carry their own zone when their ranges differ from the chart's.
        zone = point.zone
        if zone is None:
            computed = classify_ranges(point.value, ranges)
            zone = computed.value if computed else None
        mapped.append(
            {
                **asdict(coord),
                "date": point.date.isoformat(),
                "value": point.value,
                "zone": zone,
                "ref": point.ref,
            }
        )

    return ChartModel(
        width=width,
        height=height,
        y_min=y_min,
        y_max=y_max,
        points=mapped,
        bands=zone_bands(ranges, y_min, y_max),
        endpoint_trend=endpoint_trend(ordered),
        step_trend=step_trend(ordered),
    )
