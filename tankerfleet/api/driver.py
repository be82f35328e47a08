from flask import Blueprint, current_app, g, jsonify, request
import logging

from tankerfleet.extensions import db, limiter
from tankerfleet.models.driver import Driver
from tankerfleet.schemas.driver_schema import DriverLocationSchema, DriverSchema, LocationSchema
from tankerfleet.services.driver_service import DriverService
from tankerfleet.services.errors import ServiceError
from tankerfleet.utils.actor import actor_required, can_view_driver, subscription_required

driver_bp = Blueprint('driver', __name__)
schema = DriverSchema(session=db.session)
schema_many = DriverSchema(many=True, session=db.session)
location_schema = LocationSchema()
fleet_schema = DriverLocationSchema(many=True)


def location_rate_limit():
    return current_app.config['LOCATION_UPDATE_RATE_LIMIT']


@driver_bp.route('/drivers', methods=['GET'])
@actor_required('owner')
@subscription_required
def list_drivers():
    try:
        include_inactive = request.args.get('include_inactive', 'false').lower() == 'true'
        drivers = DriverService.get_all(g.actor.id, include_inactive=include_inactive)
        return jsonify(schema_many.dump(drivers)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_drivers: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/drivers/<int:driver_id>', methods=['GET'])
@actor_required('owner', 'driver')
def get_driver(driver_id):
    try:
        driver = db.session.get(Driver, driver_id)
        if not driver or not can_view_driver(driver):
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(schema.dump(driver)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/drivers', methods=['POST'])
@actor_required('owner')
@subscription_required
def create_driver():
    try:
        data = request.get_json() or {}
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        driver = DriverService.create(g.actor.id, data)
        return jsonify(schema.dump(driver)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/drivers/<int:driver_id>', methods=['PUT'])
@actor_required('owner')
@subscription_required
def update_driver(driver_id):
    try:
        data = request.get_json() or {}
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        driver = DriverService.update(g.actor.id, driver_id, data)
        if not driver:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(schema.dump(driver)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/drivers/<int:driver_id>', methods=['DELETE'])
@actor_required('owner')
@subscription_required
def deactivate_driver(driver_id):
    try:
        driver = DriverService.deactivate(g.actor.id, driver_id)
        if not driver:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({'message': 'Driver deactivated'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in deactivate_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/drivers/<int:driver_id>/location', methods=['PUT'])
@limiter.limit(location_rate_limit)
@actor_required('driver')
def update_location(driver_id):
    try:
        if g.actor.id != driver_id:
            return jsonify({'error': 'Access forbidden'}), 403
        data = request.get_json() or {}
        errors = location_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        fix = location_schema.load(data)
        driver = DriverService.update_location(driver_id, fix['latitude'], fix['longitude'], fix.get('heading'))
        if not driver:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({'message': 'Location updated'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_location: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@driver_bp.route('/fleet/locations', methods=['GET'])
@actor_required('owner')
@subscription_required
def fleet_locations():
    try:
        return jsonify(fleet_schema.dump(DriverService.fleet_locations(g.actor.id))), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in fleet_locations: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
