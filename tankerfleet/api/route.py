from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.extensions import db
from tankerfleet.schemas.route_schema import RouteSchema
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.route_service import RouteService
from tankerfleet.utils.actor import actor_required, acting_owner_id, subscription_required

route_bp = Blueprint('route', __name__)
schema = RouteSchema(session=db.session)
schema_many = RouteSchema(many=True, session=db.session)


@route_bp.route('/routes', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def list_routes():
    try:
        include_inactive = (g.actor.role == 'owner'
                            and request.args.get('include_inactive', 'false').lower() == 'true')
        routes = RouteService.get_all(acting_owner_id(), include_inactive=include_inactive)
        return jsonify(schema_many.dump(routes)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_routes: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@route_bp.route('/routes/<int:route_id>', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def get_route(route_id):
    try:
        route = RouteService.get_by_id(acting_owner_id(), route_id)
        if not route:
            return jsonify({'error': 'Route not found'}), 404
        return jsonify(schema.dump(route)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_route: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@route_bp.route('/routes', methods=['POST'])
@actor_required('owner')
@subscription_required
def create_route():
    try:
        data = request.get_json() or {}
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = schema.load(data)
        route = RouteService.create(g.actor.id, data)
        return jsonify(schema.dump(route)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_route: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@route_bp.route('/routes/<int:route_id>', methods=['PUT'])
@actor_required('owner')
@subscription_required
def update_route(route_id):
    try:
        data = request.get_json() or {}
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        data = schema.load(data, partial=True)
        route = RouteService.update(g.actor.id, route_id, data)
        if not route:
            return jsonify({'error': 'Route not found'}), 404
        return jsonify(schema.dump(route)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_route: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@route_bp.route('/routes/<int:route_id>', methods=['DELETE'])
@actor_required('owner')
@subscription_required
def deactivate_route(route_id):
    try:
        route = RouteService.deactivate(g.actor.id, route_id)
        if not route:
            return jsonify({'error': 'Route not found'}), 404
        return jsonify({'message': 'Route deactivated'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in deactivate_route: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
