"""
Tests for monthly trip aggregation
"""
from datetime import date

import pytest

from tankerfleet.services.trip_aggregator import (
    OTHER_TRIP_TYPE,
    TripEntry,
    aggregate_month,
    entries_in_month,
    monthly_totals,
)

ENTRIES = [
    TripEntry("Lake → Sector 4", 2, date(2024, 3, 5)),
    TripEntry("Lake → Sector 4", 1, date(2024, 3, 5)),
    TripEntry("Well → Market", 3, date(2024, 3, 1)),
    TripEntry("Lake → Sector 4", 4, date(2024, 2, 29)),
    TripEntry("Old Route", 1, date(2024, 3, 9)),
]
TYPES = ["Lake → Sector 4", "Well → Market"]


class TestAggregateMonth:

    def test_total_and_per_day(self):
        result = aggregate_month(ENTRIES, "2024-03", driver_id=7, trip_types=TYPES)
        assert result.total_trips == 7
        assert result.driver_id == 7
        assert result.per_day == {
            date(2024, 3, 1): {"Well → Market": 3},
            date(2024, 3, 5): {"Lake → Sector 4": 3},
            date(2024, 3, 9): {OTHER_TRIP_TYPE: 1},
        }

    def test_days_are_sorted(self):
        result = aggregate_month(ENTRIES, "2024-03", trip_types=TYPES)
        assert list(result.per_day) == sorted(result.per_day)

    def test_without_trip_types_keeps_every_type(self):
        result = aggregate_month(ENTRIES, "2024-03")
        assert result.per_day[date(2024, 3, 9)] == {"Old Route": 1}

    def test_idempotent(self):
        first = aggregate_month(ENTRIES, "2024-03", trip_types=TYPES)
        second = aggregate_month(list(reversed(ENTRIES)), "2024-03", trip_types=TYPES)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_empty_month(self):
        result = aggregate_month(ENTRIES, "2024-04")
        assert result.total_trips == 0
        assert result.per_day == {}

    def test_invalid_month_key(self):
        with pytest.raises(ValueError):
            aggregate_month(ENTRIES, "2024-13")

    def test_to_dict_uses_iso_days(self):
        data = aggregate_month(ENTRIES, "2024-02").to_dict()
        assert data == {
            'driver_id': None,
            'month': '2024-02',
            'total_trips': 4,
            'per_day': {'2024-02-29': {"Lake → Sector 4": 4}},
        }


def test_entries_in_month():
    assert len(entries_in_month(ENTRIES, "2024-02")) == 1


def test_monthly_totals():
    assert monthly_totals(ENTRIES) == {"2024-02": 4, "2024-03": 7}
