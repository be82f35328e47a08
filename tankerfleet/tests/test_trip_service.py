"""
Tests for the trip recorder and ledger queries
"""
from datetime import datetime, timezone

import pytest

from tankerfleet.models.trip import Trip
from tankerfleet.services.errors import NotFoundError
from tankerfleet.services.job_service import JobService
from tankerfleet.services.route_service import RouteService
from tankerfleet.services.trip_service import TripService
from tankerfleet.tests.conftest import make_driver, make_owner, make_route, make_trip


class TestManualTrips:

    def test_record_manual_trip(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        trip = TripService.record_manual_trip(driver.id, route.id, datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc), 3)
        assert trip.count == 3
        assert trip.job_id is None
        assert trip.owner_id == owner.id
        assert trip.date == datetime(2024, 6, 1, 9, 0)
        assert trip.events == []

    def test_route_of_another_owner(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        foreign_route = make_route(make_owner("Other Owner"))
        with pytest.raises(NotFoundError):
            TripService.record_manual_trip(driver.id, foreign_route.id, datetime(2024, 6, 1), 1)

    def test_unknown_driver(self, db):
        owner = make_owner()
        route = make_route(owner)
        with pytest.raises(NotFoundError):
            TripService.record_manual_trip(404, route.id, datetime(2024, 6, 1), 1)


class TestListTrips:

    def test_newest_first_and_filters(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        other = make_driver(owner, "Mahesh")
        route = make_route(owner)
        second_route = make_route(owner, "Well", ["Market"])
        older = make_trip(driver, route, datetime(2024, 6, 1, 6, 0))
        newer = make_trip(driver, second_route, datetime(2024, 6, 3, 6, 0))
        make_trip(other, route, datetime(2024, 6, 2, 6, 0))

        assert [t.id for t in TripService.list_trips(owner.id, driver_id=driver.id)] == [newer.id, older.id]
        assert [t.id for t in TripService.list_trips(owner.id, route_id=second_route.id)] == [newer.id]
        window = TripService.list_trips(owner.id, start=datetime(2024, 6, 2), end=datetime(2024, 6, 3))
        assert [t.driver_id for t in window] == [other.id]

    def test_owner_scoping(self, db):
        owner = make_owner()
        make_trip(make_driver(owner), make_route(owner), datetime(2024, 6, 1))
        assert TripService.list_trips(make_owner("Other Owner").id) == []

    def test_to_entries(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner, "Well", ["Market"])
        trip = make_trip(driver, route, datetime(2024, 6, 30, 19, 0), count=2)
        entry = TripService.to_entries([trip])[0]
        assert entry.trip_type == "Well → Market"
        assert entry.trip_count == 2
        # 19:00 UTC is past midnight in Asia/Kolkata
        assert entry.date.isoformat() == "2024-07-01"

    def test_type_survives_route_edit(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner, "Well", ["Market"])
        trip = TripService.record_manual_trip(driver.id, route.id, datetime(2024, 6, 1, 9, 0), 1)
        RouteService.update(owner.id, route.id, {'source': "New Well", 'destinations': ["Market", "Depot"]})
        assert trip.trip_type == "Well → Market"
        assert TripService.to_entries([trip])[0].trip_type == "Well → Market"


class TestJobTrips:

    def test_recorder_does_not_deduplicate(self, db):
        owner = make_owner()
        driver = make_driver(owner)
        route = make_route(owner)
        job = JobService.assign(owner.id, driver.id, route.id, now=datetime(2024, 6, 1, 6, 0))
        first = TripService.record_trip_on_job_completion(job)
        second = TripService.record_trip_on_job_completion(job)
        assert first.id != second.id
        assert Trip.query.filter_by(job_id=job.id).count() == 2
        assert first.trip_type == "Lake Pump → Sector 4, Sector 9"
        assert first.date == datetime(2024, 6, 1, 6, 0)
