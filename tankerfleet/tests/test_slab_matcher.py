"""
Tests for payout slab matching
"""
import random

from tankerfleet.services.slab_matcher import (
    Slab,
    compute_payout,
    describe_current_slab,
    describe_next_slab,
    describe_progress,
    find_slab_conflicts,
    match_current_slab,
    match_next_slab,
    sort_slabs,
)

SLABS = [Slab(0, 49, 0), Slab(50, 99, 50000), Slab(100, 149, 100000), Slab(150, 9999, 150000)]


class TestComputePayout:

    def test_middle_slab(self):
        result = compute_payout(100, SLABS)
        assert result.current_slab == Slab(100, 149, 100000)
        assert result.estimated_payout == 100000
        assert result.next_slab == Slab(150, 9999, 150000)
        assert result.trips_needed == 50
        assert round(result.progress_percent, 2) == 66.67

    def test_highest_slab(self):
        result = compute_payout(160, SLABS)
        assert result.current_slab == Slab(150, 9999, 150000)
        assert result.next_slab is None
        assert result.trips_needed is None
        assert result.progress_percent == 100

    def test_zero_trips(self):
        result = compute_payout(0, SLABS)
        assert result.current_slab == Slab(0, 49, 0)
        assert result.estimated_payout == 0
        assert result.next_slab == Slab(50, 99, 50000)
        assert result.trips_needed == 50
        assert result.progress_percent == 0

    def test_empty_table(self):
        result = compute_payout(12, [])
        assert result.current_slab is None
        assert result.next_slab is None
        assert result.estimated_payout == 0
        assert result.progress_percent == 100

    def test_total_in_gap(self):
        slabs = [Slab(0, 9, 0), Slab(20, 29, 1000)]
        result = compute_payout(15, slabs)
        assert result.current_slab is None
        assert result.estimated_payout == 0
        assert result.next_slab == Slab(20, 29, 1000)
        assert result.trips_needed == 5

    def test_below_lowest_slab(self):
        result = compute_payout(3, [Slab(10, 19, 500)])
        assert result.current_slab is None
        assert result.next_slab == Slab(10, 19, 500)

    def test_boundaries_are_inclusive(self):
        assert match_current_slab(49, SLABS) == Slab(0, 49, 0)
        assert match_current_slab(50, SLABS) == Slab(50, 99, 50000)
        assert match_current_slab(9999, SLABS) == Slab(150, 9999, 150000)
        assert match_current_slab(10000, SLABS) is None

    def test_overlap_resolves_to_lowest_min(self):
        slabs = [Slab(10, 30, 2000), Slab(0, 20, 1000)]
        assert match_current_slab(15, slabs) == Slab(0, 20, 1000)

    def test_accepts_slab_like_objects(self):
        class Row:
            def __init__(self, lo, hi, amount):
                self.min_trips, self.max_trips, self.payout_amount = lo, hi, amount

        result = compute_payout(60, [Row(50, 99, 50000), Row(0, 49, 0)])
        assert result.current_slab == Slab(50, 99, 50000)

    def test_to_dict(self):
        data = compute_payout(160, SLABS).to_dict()
        assert data['current_slab'] == {'min_trips': 150, 'max_trips': 9999, 'payout_amount': 150000}
        assert data['next_slab'] is None
        assert data['trips_needed'] is None


class TestSlabProperties:

    def test_sort_invariance(self):
        rng = random.Random(7)
        for total in range(0, 200, 7):
            expected = compute_payout(total, SLABS)
            shuffled = SLABS[:]
            rng.shuffle(shuffled)
            assert compute_payout(total, shuffled) == expected

    def test_contiguous_table_always_matches(self):
        for total in range(0, 300):
            assert match_current_slab(total, SLABS) is not None

    def test_trips_needed_positive_when_next_exists(self):
        for total in range(0, 200):
            result = compute_payout(total, SLABS)
            if result.next_slab is not None:
                assert result.trips_needed > 0
                assert result.next_slab.min_trips > total

    def test_sort_is_stable(self):
        a, b = Slab(0, 10, 1), Slab(0, 20, 2)
        assert sort_slabs([b, a]) == [b, a]

    def test_match_next_slab_above_all(self):
        assert match_next_slab(150, SLABS) is None
        assert match_next_slab(149, SLABS) == Slab(150, 9999, 150000)


class TestFindSlabConflicts:

    def test_contiguous_table_has_no_problems(self):
        assert find_slab_conflicts(SLABS) == []

    def test_empty_table(self):
        assert find_slab_conflicts([]) == []

    def test_gap_reported(self):
        problems = find_slab_conflicts([Slab(0, 9, 0), Slab(20, 29, 1000)])
        assert problems == ["No slab covers 10-19 trips"]

    def test_overlap_reported(self):
        problems = find_slab_conflicts([Slab(0, 20, 0), Slab(10, 29, 1000)])
        assert problems == ["Slab 10-29 overlaps 0-20"]

    def test_table_not_starting_at_zero(self):
        problems = find_slab_conflicts([Slab(5, 9, 0)])
        assert problems == ["No slab covers 0-4 trips"]


class TestDescriptions:

    def test_current_slab_description(self):
        assert describe_current_slab(compute_payout(100, SLABS)) == \
            "You are currently in the 100-149 trips (₹100000) slab."
        assert describe_current_slab(compute_payout(5, [])) == "No slab matched yet for 5 trips."

    def test_next_slab_description(self):
        assert describe_next_slab(compute_payout(160, SLABS)) == "You have reached the highest payout slab."

    def test_progress_description(self):
        assert describe_progress(compute_payout(100, SLABS)) == \
            "You need 50 more trips to reach the 150 trips slab (₹150000)."
        assert "highest payout slab" in describe_progress(compute_payout(160, SLABS))
        assert describe_progress(compute_payout(3, [])) == "You are currently at 3 trips."
