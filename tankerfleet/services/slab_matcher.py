"""
Payout slab matching.

A slab table maps monthly trip-count ranges to a fixed payout. These
functions are pure: they take a trip total and any iterable of slab-like
objects (anything with ``min_trips``, ``max_trips`` and ``payout_amount``)
and never touch the database.
"""

from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional


class Slab(NamedTuple):
    min_trips: int
    max_trips: int
    payout_amount: float

    def describe(self):
        return f"{self.min_trips}-{self.max_trips} trips (₹{self.payout_amount:g})"


@dataclass(frozen=True)
class PayoutResult:
    total_trips: int
    estimated_payout: float
    current_slab: Optional[Slab]
    next_slab: Optional[Slab]
    trips_needed: Optional[int]
    progress_percent: float

    def to_dict(self):
        return {
            'total_trips': self.total_trips,
            'estimated_payout': self.estimated_payout,
            'current_slab': self.current_slab._asdict() if self.current_slab else None,
            'next_slab': self.next_slab._asdict() if self.next_slab else None,
            'trips_needed': self.trips_needed,
            'progress_percent': self.progress_percent,
        }


def _as_slab(slab):
    if isinstance(slab, Slab):
        return slab
    return Slab(slab.min_trips, slab.max_trips, slab.payout_amount)


def sort_slabs(slabs: Iterable) -> List[Slab]:
    """Slabs ordered by min_trips ascending. Stable, so input order breaks ties."""
    return sorted((_as_slab(s) for s in slabs), key=lambda s: s.min_trips)


def match_current_slab(total_trips: int, slabs: Iterable) -> Optional[Slab]:
    """
    The slab whose [min_trips, max_trips] range contains `total_trips`.

    Returns None when the total falls in a gap, below every range, or the
    table is empty. Overlapping slabs resolve to the lowest min_trips.
    """
    for slab in sort_slabs(slabs):
        if slab.min_trips <= total_trips <= slab.max_trips:
            return slab
    return None


def match_next_slab(total_trips: int, slabs: Iterable) -> Optional[Slab]:
    """
    The slab with the smallest min_trips strictly above `total_trips`, or
    None when the driver is already in (or above) the highest slab.
    """
    for slab in sort_slabs(slabs):
        if slab.min_trips > total_trips:
            return slab
    return None


def compute_payout(total_trips: int, slabs: Iterable) -> PayoutResult:
    """
    Estimated payout and progress toward the next slab for a monthly total.

    progress_percent is total/next.min_trips*100 while a next slab exists,
    and 100 once there is nothing left to reach (including an empty table).
    """
    slabs = sort_slabs(slabs)
    current = match_current_slab(total_trips, slabs)
    nxt = match_next_slab(total_trips, slabs)

    if nxt is not None:
        trips_needed = nxt.min_trips - total_trips
        progress = (total_trips / nxt.min_trips) * 100
    else:
        trips_needed = None
        progress = 100.0

    return PayoutResult(
        total_trips=total_trips,
        estimated_payout=current.payout_amount if current else 0,
        current_slab=current,
        next_slab=nxt,
        trips_needed=trips_needed,
        progress_percent=progress,
    )


def find_slab_conflicts(slabs: Iterable) -> List[str]:
    """
    Describe configuration problems in a slab table: inverted ranges,
    overlaps between neighbours, gaps between neighbours, and a table that
    does not start at 0. An empty list means the table is contiguous.
    """
    ordered = sort_slabs(slabs)
    problems = []
    if ordered and ordered[0].min_trips > 0:
        problems.append(f"No slab covers 0-{ordered[0].min_trips - 1} trips")
    for slab in ordered:
        if slab.max_trips < slab.min_trips:
            problems.append(f"Slab {slab.min_trips}-{slab.max_trips} has max_trips below min_trips")
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.min_trips <= prev.max_trips:
            problems.append(
                f"Slab {cur.min_trips}-{cur.max_trips} overlaps {prev.min_trips}-{prev.max_trips}")
        elif cur.min_trips > prev.max_trips + 1:
            problems.append(f"No slab covers {prev.max_trips + 1}-{cur.min_trips - 1} trips")
    return problems


def describe_current_slab(result: PayoutResult) -> str:
    if result.current_slab is None:
        return f"No slab matched yet for {result.total_trips} trips."
    return f"You are currently in the {result.current_slab.describe()} slab."


def describe_next_slab(result: PayoutResult) -> str:
    if result.next_slab is None:
        return "You have reached the highest payout slab."
    return f"The next slab is {result.next_slab.describe()}."


def describe_progress(result: PayoutResult) -> str:
    if result.next_slab is not None:
        return (f"You need {result.trips_needed} more trips to reach the "
                f"{result.next_slab.min_trips} trips slab (₹{result.next_slab.payout_amount:g}).")
    if result.current_slab is not None:
        return "You have reached the highest payout slab! Keep up the great work."
    return f"You are currently at {result.total_trips} trips."
