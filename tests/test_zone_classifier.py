import pytest

from clinic_api.services.zone_classifier import ReferenceRanges, Zone, classify, resolve_zone

GLUCOSE = ReferenceRanges(conventional_low=65, conventional_high=99, functional_low=75, functional_high=86)


@pytest.mark.parametrize(
    "value, expected",
    [
        (80, Zone.OPTIMAL),
        (75, Zone.OPTIMAL),
        (86, Zone.OPTIMAL),
        (70, Zone.FUNCTIONAL_DEVIATION),
        (90, Zone.FUNCTIONAL_DEVIATION),
        (99, Zone.FUNCTIONAL_DEVIATION),
        (65, Zone.FUNCTIONAL_DEVIATION),
        (64.9, Zone.ABNORMAL),
        (120, Zone.ABNORMAL),
    ],
)
def test_classify_glucose(value, expected):
    assert classify(value, 65, 99, 75, 86) == expected


def test_malformed_ranges_are_evaluated_as_given():
    # functional range sits entirely above the conventional range
    assert classify(25, 0, 10, 20, 30) == Zone.OPTIMAL
    assert classify(15, 0, 10, 20, 30) == Zone.ABNORMAL
    assert classify(5, 0, 10, 20, 30) == Zone.FUNCTIONAL_DEVIATION


def test_resolve_zone_prefers_ranges_over_stored_zone():
    assert resolve_zone(120, GLUCOSE, stored_zone="optimal") == Zone.ABNORMAL


def test_resolve_zone_falls_back_to_stored_zone_when_ranges_incomplete():
    partial = ReferenceRanges(conventional_low=65, conventional_high=99)
    assert not partial.is_complete
    assert resolve_zone(80, partial, stored_zone="functional_deviation") == Zone.FUNCTIONAL_DEVIATION
    assert resolve_zone(80, partial, stored_zone="bogus") is None
    assert resolve_zone(80, partial) is None
