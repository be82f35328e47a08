from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.extensions import db
from tankerfleet.schemas.payout_slab_schema import PayoutSlabSchema
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.slab_service import SlabService
from tankerfleet.utils.actor import actor_required, acting_owner_id, subscription_required

payout_slab_bp = Blueprint('payout_slab', __name__)
schema = PayoutSlabSchema(session=db.session)
schema_many = PayoutSlabSchema(many=True, session=db.session)


@payout_slab_bp.route('/payout_slabs', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def list_payout_slabs():
    try:
        return jsonify(schema_many.dump(SlabService.get_for_owner(acting_owner_id()))), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_payout_slabs: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payout_slab_bp.route('/payout_slabs', methods=['POST'])
@actor_required('owner')
@subscription_required
def create_payout_slab():
    try:
        data = request.get_json() or {}
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = schema.load(data)
        slab = SlabService.create(g.actor.id, data)
        return jsonify(schema.dump(slab)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_payout_slab: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payout_slab_bp.route('/payout_slabs/<int:slab_id>', methods=['PUT'])
@actor_required('owner')
@subscription_required
def update_payout_slab(slab_id):
    try:
        data = request.get_json() or {}
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        data = schema.load(data, partial=True)
        slab = SlabService.update(g.actor.id, slab_id, data)
        if not slab:
            return jsonify({'error': 'Payout slab not found'}), 404
        return jsonify(schema.dump(slab)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_payout_slab: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payout_slab_bp.route('/payout_slabs/<int:slab_id>', methods=['DELETE'])
@actor_required('owner')
@subscription_required
def delete_payout_slab(slab_id):
    try:
        if not SlabService.delete(g.actor.id, slab_id):
            return jsonify({'error': 'Payout slab not found'}), 404
        return jsonify({'message': 'Payout slab deleted'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_payout_slab: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payout_slab_bp.route('/payout_slabs/validation', methods=['GET'])
@actor_required('owner')
@subscription_required
def validate_payout_slabs():
    try:
        return jsonify(SlabService.validate(g.actor.id)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in validate_payout_slabs: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
