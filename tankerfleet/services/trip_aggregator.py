"""
Monthly trip aggregation feeding the slab matcher.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from tankerfleet.utils.timezone_utils import month_key as to_month_key, parse_month_key

OTHER_TRIP_TYPE = "other"


@dataclass(frozen=True)
class TripEntry:
    trip_type: str
    trip_count: int
    date: date

    def to_dict(self):
        return {'trip_type': self.trip_type, 'trip_count': self.trip_count, 'date': self.date.isoformat()}


@dataclass(frozen=True)
class MonthlyAggregate:
    month_key: str
    total_trips: int
    per_day: Dict[date, Dict[str, int]] = field(default_factory=dict)
    driver_id: Optional[int] = None

    def to_dict(self):
        return {
            'driver_id': self.driver_id,
            'month': self.month_key,
            'total_trips': self.total_trips,
            'per_day': {day.isoformat(): dict(counts) for day, counts in self.per_day.items()},
        }


def entries_in_month(entries: Iterable[TripEntry], month_key: str) -> List[TripEntry]:
    parse_month_key(month_key)
    return [e for e in entries if to_month_key(e.date) == month_key]


def aggregate_month(entries: Iterable[TripEntry], month_key: str, driver_id=None,
                    trip_types: Optional[Iterable[str]] = None) -> MonthlyAggregate:
    """
    Sum a driver's trip entries for one calendar month.

    Entry dates must already be calendar dates in the reporting timezone.
    When `trip_types` is given, counts for any other type are summed under
    "other" rather than dropped. Days and types are emitted in sorted order
    so repeated runs produce identical output.
    """
    recognised = set(trip_types) if trip_types is not None else None
    per_day: Dict[date, Dict[str, int]] = {}
    total = 0

    for entry in entries_in_month(entries, month_key):
        bucket = entry.trip_type
        if recognised is not None and bucket not in recognised:
            bucket = OTHER_TRIP_TYPE
        day_counts = per_day.setdefault(entry.date, {})
        day_counts[bucket] = day_counts.get(bucket, 0) + entry.trip_count
        total += entry.trip_count

    ordered = {
        day: {trip_type: per_day[day][trip_type] for trip_type in sorted(per_day[day])}
        for day in sorted(per_day)
    }
    return MonthlyAggregate(month_key=month_key, total_trips=total, per_day=ordered, driver_id=driver_id)


def monthly_totals(entries: Iterable[TripEntry]) -> Dict[str, int]:
    """Total trip count per 'YYYY-MM', in month order."""
    totals: Dict[str, int] = {}
    for entry in entries:
        key = to_month_key(entry.date)
        totals[key] = totals.get(key, 0) + entry.trip_count
    return {key: totals[key] for key in sorted(totals)}
