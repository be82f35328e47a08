import logging
from sqlalchemy.exc import SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.driver import Driver
from tankerfleet.models.route import Route
from tankerfleet.models.trip import Trip
from tankerfleet.services.errors import NotFoundError, ServiceError
from tankerfleet.services.job_lifecycle import TimelineEvent
from tankerfleet.services.trip_aggregator import TripEntry
from tankerfleet.utils.timezone_utils import as_naive_utc, local_date

logger = logging.getLogger(__name__)

class TripService:
    """Trip recorder and trip ledger queries.

    Trips are never updated or deleted here. Each record_* call adds a new
    row; callers are responsible for invoking it once per completed job.
    """

    @staticmethod
    def record_trip_on_job_completion(job, route=None, commit=True):
        """
        Record the trip for a completed job: count 1, dated at the job's
        assignment time so it lands in the month the work was dispatched,
        with the job timeline archived on the trip.
        """
        route = route or job.route
        trip = Trip(
            owner_id=job.owner_id,
            driver_id=job.driver_id,
            route_id=route.id if route else job.route_id,
            job_id=job.id,
            trip_type=job.route_name,
            count=1,
            date=job.assigned_at,
            events=[TimelineEvent.from_model(e).to_dict() for e in job.events],
        )
        db.session.add(trip)
        if commit:
            TripService._commit("Could not record trip. Please try again later.")
        return trip

    @staticmethod
    def record_manual_trip(driver_id, route_id, date, count):
        """Log trips a driver made outside the job flow."""
        driver = db.session.get(Driver, driver_id)
        if not driver:
            raise NotFoundError("Driver not found")
        route = db.session.get(Route, route_id)
        if not route or route.owner_id != driver.owner_id:
            raise NotFoundError("Route not found")

        trip = Trip(
            owner_id=driver.owner_id,
            driver_id=driver.id,
            route_id=route.id,
            job_id=None,
            trip_type=route.label,
            count=count,
            date=as_naive_utc(date),
            events=[],
        )
        db.session.add(trip)
        TripService._commit("Could not log trip. Please try again later.")
        logger.info(f"Manual trip logged: driver={driver.id} route={route.id} count={count}")
        return trip

    @staticmethod
    def _commit(error_message):
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error saving trip: {e}", exc_info=True)
            raise ServiceError(error_message)

    @staticmethod
    def list_trips(owner_id, driver_id=None, route_id=None, start=None, end=None):
        """
        Trips for an owner, newest first. `start`/`end` are naive UTC bounds
        (start inclusive, end exclusive).
        """
        try:
            query = Trip.query.filter(Trip.owner_id == owner_id)
            if driver_id is not None:
                query = query.filter(Trip.driver_id == driver_id)
            if route_id is not None:
                query = query.filter(Trip.route_id == route_id)
            if start is not None:
                query = query.filter(Trip.date >= start)
            if end is not None:
                query = query.filter(Trip.date < end)
            return query.order_by(Trip.date.desc(), Trip.id.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching trips: {e}", exc_info=True)
            raise ServiceError("Could not fetch trips. Please try again later.")

    @staticmethod
    def to_entries(trips):
        """TripEntry per trip, dated in the reporting timezone."""
        entries = []
        for trip in trips:
            entries.append(TripEntry(trip_type=trip.trip_type, trip_count=trip.count, date=local_date(trip.date)))
        return entries
