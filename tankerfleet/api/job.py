from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.models.job import JobStatus
from tankerfleet.schemas.job_schema import JobActionSchema, JobAssignSchema, JobRequestSchema, JobSchema
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.job_lifecycle import Rejection
from tankerfleet.services.job_service import JobService
from tankerfleet.utils.actor import actor_required, subscription_required

job_bp = Blueprint('job', __name__)
schema = JobSchema()
schema_many = JobSchema(many=True, exclude=('events',))
assign_schema = JobAssignSchema()
request_schema = JobRequestSchema()
action_schema = JobActionSchema()

FORBIDDEN_REJECTIONS = (Rejection.NOT_JOB_OWNER, Rejection.NOT_ASSIGNED_DRIVER)


def _result_response(result, status_code=200):
    """HTTP response for a JobActionResult; rejections map to 403/409."""
    if result is None:
        return jsonify({'error': 'Job not found'}), 404
    rejection = result.outcome.rejection
    if rejection is not None:
        code = 403 if rejection in FORBIDDEN_REJECTIONS else 409
        return jsonify({
            'error': rejection.message,
            'reason': rejection.name.lower(),
            'status': result.job.status,
        }), code
    body = {'job': schema.dump(result.job), 'changed': result.outcome.changed}
    if result.trip is not None:
        body['trip_id'] = result.trip.id
    return jsonify(body), status_code


def _parse_statuses():
    raw = request.args.get('status')
    if not raw:
        return None
    return [JobStatus(value.strip()) for value in raw.split(',') if value.strip()]


@job_bp.route('/jobs', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def list_jobs():
    try:
        try:
            statuses = _parse_statuses()
        except ValueError:
            return jsonify({'error': 'Invalid status filter'}), 400
        if g.actor.role == 'owner':
            jobs = JobService.list_for_owner(g.actor.id, statuses)
        else:
            jobs = JobService.list_for_driver(g.actor.id, statuses)
        return jsonify(schema_many.dump(jobs)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_jobs: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def get_job(job_id):
    try:
        job = JobService.get_by_id(job_id)
        if not job:
            return jsonify({'error': 'Job not found'}), 404
        if (g.actor.role == 'owner' and job.owner_id != g.actor.id) or \
                (g.actor.role == 'driver' and job.driver_id != g.actor.id):
            return jsonify({'error': 'Job not found'}), 404
        body = schema.dump(job)
        body['timeline'] = JobService.timeline(job)
        return jsonify(body), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs', methods=['POST'])
@actor_required('owner')
@subscription_required
def assign_job():
    try:
        data = request.get_json() or {}
        errors = assign_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = assign_schema.load(data)
        job = JobService.assign(g.actor.id, data['driver_id'], data['route_id'])
        return jsonify(schema.dump(job)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in assign_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/requests', methods=['POST'])
@actor_required('driver')
@subscription_required
def request_job():
    try:
        data = request.get_json() or {}
        errors = request_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        job = JobService.request(g.actor.id, request_schema.load(data)['route_id'])
        return jsonify(schema.dump(job)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in request_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>/approve', methods=['POST'])
@actor_required('owner')
@subscription_required
def approve_job(job_id):
    try:
        return _result_response(JobService.approve(job_id, g.actor.id))
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in approve_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>/accept', methods=['POST'])
@actor_required('driver')
@subscription_required
def accept_job(job_id):
    try:
        return _result_response(JobService.accept(job_id, g.actor.id))
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in accept_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>/start', methods=['POST'])
@actor_required('driver')
@subscription_required
def start_job(job_id):
    try:
        return _result_response(JobService.start(job_id, g.actor.id))
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in start_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>/actions', methods=['POST'])
@actor_required('driver')
@subscription_required
def log_job_action(job_id):
    try:
        data = request.get_json() or {}
        errors = action_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = action_schema.load(data)
        result = JobService.log_action(job_id, g.actor.id, data['stop_index'], data['kind'], data['notes'])
        return _result_response(result)
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in log_job_action: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@job_bp.route('/jobs/<int:job_id>/complete', methods=['POST'])
@actor_required('driver')
@subscription_required
def complete_job(job_id):
    try:
        return _result_response(JobService.complete(job_id, g.actor.id))
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in complete_job: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
