import logging
from collections import namedtuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.driver import Driver
from tankerfleet.models.job import Job, JobStatus
from tankerfleet.models.job_event import EventKind, JobEvent
from tankerfleet.models.route import Route
from tankerfleet.services import job_lifecycle
from tankerfleet.services.errors import NotFoundError, ServiceError
from tankerfleet.services.job_lifecycle import JobSnapshot, Rejection
from tankerfleet.services.push_notification_service import PushNotificationService
from tankerfleet.services.trip_service import TripService
from tankerfleet.utils.timezone_utils import as_naive_utc, utc_now

# outcome is a job_lifecycle.LifecycleOutcome; trip is set only on completion
JobActionResult = namedtuple('JobActionResult', ['job', 'outcome', 'trip'])


def job_stops(job):
    return job_lifecycle.route_stops(job.source, job.destinations or [])


class JobService:
    @staticmethod
    def get_by_id(job_id):
        try:
            return db.session.get(Job, job_id)
        except SQLAlchemyError as e:
            logging.error(f"Error fetching job: {e}", exc_info=True)
            raise ServiceError("Could not fetch job. Please try again later.")

    @staticmethod
    def list_for_owner(owner_id, statuses=None):
        try:
            query = Job.query.filter(Job.owner_id == owner_id)
            if statuses:
                query = query.filter(Job.status.in_([s.value for s in statuses]))
            return query.order_by(Job.assigned_at.desc()).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching jobs for owner: {e}", exc_info=True)
            raise ServiceError("Could not fetch jobs. Please try again later.")

    @staticmethod
    def list_for_driver(driver_id, statuses=None):
        try:
            query = Job.query.filter(Job.driver_id == driver_id)
            if statuses:
                query = query.filter(Job.status.in_([s.value for s in statuses]))
            return query.order_by(Job.assigned_at.desc()).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching jobs for driver: {e}", exc_info=True)
            raise ServiceError("Could not fetch jobs. Please try again later.")

    @staticmethod
    def _load_driver_and_route(owner_id, driver_id, route_id):
        driver = db.session.get(Driver, driver_id)
        if not driver or driver.owner_id != owner_id or not driver.is_active:
            raise NotFoundError("Driver not found")
        route = db.session.get(Route, route_id)
        if not route or route.owner_id != owner_id or not route.is_active:
            raise NotFoundError("Route not found")
        return driver, route

    @staticmethod
    def _create(owner_id, driver, route, status, now):
        job = Job(
            owner_id=owner_id,
            driver_id=driver.id,
            route_id=route.id,
            route_name=route.label,
            source=route.source,
            destinations=list(route.destinations or []),
            status=status.value,
            assigned_at=as_naive_utc(now or utc_now()),
            version=0,
        )
        try:
            db.session.add(job)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating job: {e}", exc_info=True)
            raise ServiceError("Could not create job. Please try again later.")
        return job

    @staticmethod
    def assign(owner_id, driver_id, route_id, now=None):
        """Owner dispatches a driver on a route. The job starts out ASSIGNED."""
        driver, route = JobService._load_driver_and_route(owner_id, driver_id, route_id)
        job = JobService._create(owner_id, driver, route, JobStatus.ASSIGNED, now)
        logging.info(f"Job {job.id} assigned to driver {driver.id} on route {route.id}")
        PushNotificationService.notify_job_assigned(driver, job)
        return job

    @staticmethod
    def request(driver_id, route_id, now=None):
        """Driver asks to run a route; the owner has to approve it."""
        driver = db.session.get(Driver, driver_id)
        if not driver or not driver.is_active:
            raise NotFoundError("Driver not found")
        driver, route = JobService._load_driver_and_route(driver.owner_id, driver_id, route_id)
        job = JobService._create(driver.owner_id, driver, route, JobStatus.REQUESTED, now)
        logging.info(f"Job {job.id} requested by driver {driver.id} on route {route.id}")
        return job

    @staticmethod
    def _persist(job, outcome):
        """
        Write an accepted outcome with a compare-and-set on (id, version).

        Returns False when another writer got there first; the session is
        rolled back and the job left untouched.
        """
        values = {Job.status: outcome.snapshot.status.value, Job.version: job.version + 1}
        if outcome.snapshot.status == JobStatus.COMPLETED:
            values[Job.completed_at] = as_naive_utc(outcome.appended[-1].timestamp)

        updated = (
            Job.query
            .filter(Job.id == job.id, Job.version == job.version)
            .update(values, synchronize_session='evaluate')
        )
        if updated != 1:
            db.session.rollback()
            return False

        next_sequence = len(job.events)
        for offset, event in enumerate(outcome.appended):
            job.events.append(JobEvent(
                sequence=next_sequence + offset,
                timestamp=as_naive_utc(event.timestamp),
                stop_index=event.stop_index,
                location=event.location,
                kind=event.kind.value,
                action=event.action,
                notes=event.notes,
            ))
        return True

    @staticmethod
    def _apply(job, outcome):
        """Persist `outcome` for `job` and commit. Returns a JobActionResult."""
        if not outcome.changed:
            return JobActionResult(job, outcome, None)
        try:
            if not JobService._persist(job, outcome):
                db.session.refresh(job)
                return JobActionResult(job, job_lifecycle.reject(JobSnapshot.from_job(job), Rejection.CONCURRENT_UPDATE), None)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            db.session.refresh(job)
            return JobActionResult(job, job_lifecycle.reject(JobSnapshot.from_job(job), Rejection.CONCURRENT_UPDATE), None)
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating job {job.id}: {e}", exc_info=True)
            raise ServiceError("Could not update job. Please try again later.")
        return JobActionResult(job, outcome, None)

    @staticmethod
    def _get_for_driver(job_id, driver_id):
        job = db.session.get(Job, job_id)
        if not job:
            return None, None
        if job.driver_id != driver_id:
            outcome = job_lifecycle.reject(JobSnapshot.from_job(job), Rejection.NOT_ASSIGNED_DRIVER)
            return job, JobActionResult(job, outcome, None)
        return job, None

    @staticmethod
    def approve(job_id, owner_id):
        """Owner approves a driver's request: REQUESTED -> ASSIGNED."""
        job = db.session.get(Job, job_id)
        if not job:
            return None
        snapshot = JobSnapshot.from_job(job)
        if job.owner_id != owner_id:
            return JobActionResult(job, job_lifecycle.reject(snapshot, Rejection.NOT_JOB_OWNER), None)
        result = JobService._apply(job, job_lifecycle.approve_request(snapshot))
        if result.outcome.changed:
            logging.info(f"Job {job.id} request approved by owner {owner_id}")
            PushNotificationService.notify_job_assigned(job.driver, job)
        return result

    @staticmethod
    def accept(job_id, driver_id):
        job, rejected = JobService._get_for_driver(job_id, driver_id)
        if job is None or rejected:
            return rejected
        return JobService._apply(job, job_lifecycle.accept_job(JobSnapshot.from_job(job)))

    @staticmethod
    def start(job_id, driver_id):
        """Called when the assigned driver opens the job."""
        job, rejected = JobService._get_for_driver(job_id, driver_id)
        if job is None or rejected:
            return rejected
        return JobService._apply(job, job_lifecycle.start_job(JobSnapshot.from_job(job)))

    @staticmethod
    def log_action(job_id, driver_id, stop_index, kind, notes="", now=None):
        job, rejected = JobService._get_for_driver(job_id, driver_id)
        if job is None or rejected:
            return rejected
        outcome = job_lifecycle.log_stop_action(
            JobSnapshot.from_job(job), job_stops(job), stop_index, EventKind(kind),
            now or utc_now(), notes)
        result = JobService._apply(job, outcome)
        if result.outcome.changed:
            event = result.outcome.appended[0]
            logging.info(f"Job {job.id}: {event.action} at {event.location}")
        return result

    @staticmethod
    def complete(job_id, driver_id, now=None):
        """
        Finish the job once every stop is confirmed and record its trip.

        The completion event, the status change and the trip are written in
        one transaction guarded by the job version, so a job yields at most
        one trip no matter how many completion attempts race.
        """
        job, rejected = JobService._get_for_driver(job_id, driver_id)
        if job is None or rejected:
            return rejected

        outcome = job_lifecycle.complete_job(JobSnapshot.from_job(job), job_stops(job), now or utc_now())
        if not outcome.accepted:
            return JobActionResult(job, outcome, None)

        try:
            if not JobService._persist(job, outcome):
                db.session.refresh(job)
                return JobActionResult(job, job_lifecycle.reject(JobSnapshot.from_job(job), Rejection.CONCURRENT_UPDATE), None)
            trip = TripService.record_trip_on_job_completion(job, job.route, commit=False)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            db.session.refresh(job)
            return JobActionResult(job, job_lifecycle.reject(JobSnapshot.from_job(job), Rejection.CONCURRENT_UPDATE), None)
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error completing job {job.id}: {e}", exc_info=True)
            raise ServiceError("Could not complete job. Please try again later.")

        logging.info(f"Job {job.id} completed, trip {trip.id} recorded")
        return JobActionResult(job, outcome, trip)

    @staticmethod
    def timeline(job):
        """Job timeline and per-stop progress for display."""
        snapshot = JobSnapshot.from_job(job)
        stops = job_stops(job)
        return {
            'events': [e.to_dict() for e in snapshot.events],
            'stops': job_lifecycle.stop_progress(stops, snapshot.events),
            'can_complete': (snapshot.status == JobStatus.IN_PROGRESS
                             and job_lifecycle.all_stops_complete(stops, snapshot.events)),
        }
