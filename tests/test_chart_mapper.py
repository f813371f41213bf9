from datetime import date

import pytest

from clinic_api.services.chart_mapper import build_chart, map_to_chart_space, y_bounds, zone_bands
from clinic_api.services.trend_analyzer import SeriesPoint
from clinic_api.services.zone_classifier import ReferenceRanges, Zone

GLUCOSE = ReferenceRanges(conventional_low=65, conventional_high=99, functional_low=75, functional_high=86)


def test_single_point_maps_to_origin_x():
    [point] = map_to_chart_space([5.0], width=800, height=300, y_min=0, y_max=10)
    assert point.x == 0
    assert point.y == 150


def test_points_span_width_and_invert_y():
    points = map_to_chart_space([0.0, 5.0, 10.0], width=800, height=300, y_min=0, y_max=10)
    assert [p.x for p in points] == [0, 400, 800]
    assert [p.y for p in points] == [300, 150, 0]


def test_y_bounds_pads_ten_percent():
    assert y_bounds([10.0, 20.0]) == pytest.approx((9.0, 21.0))


def test_y_bounds_includes_reference_range():
    assert y_bounds([50.0], reference_low=40, reference_high=60) == pytest.approx((38.0, 62.0))


def test_y_bounds_never_collapses():
    assert y_bounds([5.0, 5.0]) == pytest.approx((4.0, 6.0))
    assert y_bounds([]) == pytest.approx((-1.0, 1.0))


def test_zone_bands_cover_axis():
    bands = zone_bands(GLUCOSE, 60, 105)
    assert [(b.low, b.high, b.zone) for b in bands] == [
        (60, 65, Zone.ABNORMAL),
        (99, 105, Zone.ABNORMAL),
        (65, 75, Zone.FUNCTIONAL_DEVIATION),
        (86, 99, Zone.FUNCTIONAL_DEVIATION),
        (75, 86, Zone.OPTIMAL),
    ]


def test_zone_bands_are_clipped():
    bands = zone_bands(GLUCOSE, 70, 90)
    assert [(b.low, b.high, b.zone) for b in bands] == [
        (70, 75, Zone.FUNCTIONAL_DEVIATION),
        (86, 90, Zone.FUNCTIONAL_DEVIATION),
        (75, 86, Zone.OPTIMAL),
    ]
    assert zone_bands(ReferenceRanges(), 0, 10) == []


def test_build_chart_sorts_and_classifies():
    points = [
        SeriesPoint(date=date(2024, 3, 1), value=100.0),
        SeriesPoint(date=date(2024, 1, 1), value=80.0),
    ]
    chart = build_chart(points, GLUCOSE, width=400, height=200)
    data = chart.as_dict()

    assert [p["date"] for p in data["points"]] == ["2024-01-01", "2024-03-01"]
    assert data["points"][0]["x"] == 0
    assert data["points"][1]["x"] == 400
    assert [p["zone"] for p in data["points"]] == ["optimal", "abnormal"]
    assert data["y_min"] == pytest.approx(61.5)
    assert data["y_max"] == pytest.approx(103.5)
    assert data["endpoint_trend"] == {"direction": "up", "percentage_change": 25.0}
    assert data["bands"]


def test_build_chart_keeps_point_zone():
    points = [SeriesPoint(date=date(2024, 1, 1), value=80.0, zone="abnormal")]
    chart = build_chart(points, GLUCOSE)
    assert chart.points[0]["zone"] == "abnormal"
