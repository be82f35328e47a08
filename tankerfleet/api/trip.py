from datetime import date
from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.schemas.trip_schema import ManualTripSchema, TripSchema
from tankerfleet.services.driver_service import DriverService
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.trip_service import TripService
from tankerfleet.utils.actor import actor_required, acting_owner_id, subscription_required
from tankerfleet.utils.timezone_utils import day_bounds_utc, parse_datetime_string

trip_bp = Blueprint('trip', __name__)
schema = TripSchema()
schema_many = TripSchema(many=True, exclude=('events',))
manual_schema = ManualTripSchema()


def _date_range_bounds():
    """Naive UTC bounds for the optional start_date/end_date (YYYY-MM-DD) query args."""
    start_arg = request.args.get('start_date')
    end_arg = request.args.get('end_date')
    if not start_arg and not end_arg:
        return None, None
    start_day = date.fromisoformat(start_arg) if start_arg else date(1970, 1, 1)
    end_day = date.fromisoformat(end_arg) if end_arg else date(9998, 12, 31)
    return day_bounds_utc(start_day, end_day)


@trip_bp.route('/trips', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def list_trips():
    try:
        try:
            start, end = _date_range_bounds()
        except ValueError:
            return jsonify({'error': 'Dates must be in YYYY-MM-DD format'}), 400
        driver_id = request.args.get('driver_id', type=int)
        if g.actor.role == 'driver':
            driver_id = g.actor.id
        trips = TripService.list_trips(
            acting_owner_id(),
            driver_id=driver_id,
            route_id=request.args.get('route_id', type=int),
            start=start,
            end=end,
        )
        return jsonify(schema_many.dump(trips)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_trips: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@trip_bp.route('/trips', methods=['POST'])
@actor_required('owner', 'driver')
@subscription_required
def log_trip():
    try:
        data = request.get_json() or {}
        if g.actor.role == 'driver':
            data.setdefault('driver_id', g.actor.id)
        errors = manual_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = manual_schema.load(data)
        if g.actor.role == 'driver' and data['driver_id'] != g.actor.id:
            return jsonify({'error': 'Drivers can only log their own trips'}), 403
        if g.actor.role == 'owner':
            if not DriverService.get_by_id(g.actor.id, data['driver_id']):
                return jsonify({'error': 'Driver not found'}), 404
        trip = TripService.record_manual_trip(
            data['driver_id'], data['route_id'], parse_datetime_string(data['date']), data['count'])
        return jsonify(schema.dump(trip)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in log_trip: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
