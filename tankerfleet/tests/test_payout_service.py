"""
Tests for payout calculation against stored trips and slabs
"""
from datetime import datetime

import pytest

from tankerfleet.services.errors import NotFoundError
from tankerfleet.services.payout_service import PayoutService
from tankerfleet.services.slab_service import SlabService
from tankerfleet.tests.conftest import make_driver, make_owner, make_route, make_slabs, make_trip


class TestDriverPayout:

    def test_month_uses_display_timezone(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        make_slabs(owner)
        # 20:00 UTC on 31 March is already 1 April in Asia/Kolkata
        make_trip(driver, route, datetime(2024, 3, 31, 20, 0), count=60)
        make_trip(driver, route, datetime(2024, 3, 15, 4, 0), count=10)

        april = PayoutService.driver_payout(driver.id, "2024-04")
        march = PayoutService.driver_payout(driver.id, "2024-03")
        assert april['aggregate']['total_trips'] == 60
        assert april['payout']['estimated_payout'] == 50000
        assert march['aggregate']['total_trips'] == 10
        assert march['payout']['estimated_payout'] == 0
        assert march['payout']['trips_needed'] == 40

    def test_trip_types_are_route_labels(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner, "Well", ["Market"])
        make_trip(driver, route, datetime(2024, 5, 2, 6, 0), count=2)
        result = PayoutService.driver_payout(driver.id, "2024-05")
        assert result['aggregate']['per_day'] == {'2024-05-02': {'Well → Market': 2}}

    def test_other_drivers_trips_excluded(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        other = make_driver(owner, "Mahesh")
        route = make_route(owner)
        make_trip(other, route, datetime(2024, 5, 2, 6, 0), count=5)
        assert PayoutService.driver_payout(driver.id, "2024-05")['aggregate']['total_trips'] == 0

    def test_unknown_driver(self, db):
        with pytest.raises(NotFoundError):
            PayoutService.driver_payout(404, "2024-05")


def test_past_month_summaries(db):
    owner = make_owner()
    driver = make_driver(owner)
    route = make_route(owner)
    make_slabs(owner)
    make_trip(driver, route, datetime(2024, 4, 10, 6, 0), count=120)
    make_trip(driver, route, datetime(2024, 2, 10, 6, 0), count=55)

    summaries = PayoutService.past_month_summaries(driver, "2024-05", 3, SlabService.slab_table(owner.id))
    assert summaries == [
        {'month': '2024-04', 'total_trips': 120, 'payout': 100000},
        {'month': '2024-02', 'total_trips': 55, 'payout': 50000},
    ]
