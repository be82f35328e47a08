from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.extensions import db
from tankerfleet.schemas.subscription_schema import OwnerSchema, RenewSchema, SubscriptionKeySchema
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.owner_service import OwnerService
from tankerfleet.services.subscription_service import SubscriptionService
from tankerfleet.utils.actor import actor_required

admin_bp = Blueprint('admin', __name__)
owner_schema = OwnerSchema(session=db.session)
owner_schema_many = OwnerSchema(many=True, session=db.session)
key_schema = SubscriptionKeySchema()
renew_schema = RenewSchema()


@admin_bp.route('/admin/owners', methods=['GET'])
@actor_required('admin')
def list_owners():
    try:
        return jsonify(owner_schema_many.dump(OwnerService.get_all())), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_owners: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@admin_bp.route('/admin/owners', methods=['POST'])
@actor_required('admin')
def create_owner():
    try:
        data = request.get_json() or {}
        errors = owner_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        owner = OwnerService.create(data)
        return jsonify(owner_schema.dump(owner)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_owner: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@admin_bp.route('/admin/subscription-keys', methods=['POST'])
@actor_required('admin')
def issue_subscription_key():
    try:
        return jsonify(key_schema.dump(SubscriptionService.issue_key())), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in issue_subscription_key: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@admin_bp.route('/admin/owners/<int:owner_id>/activate', methods=['POST'])
@actor_required('admin')
def activate_owner(owner_id):
    try:
        owner = SubscriptionService.activate(owner_id)
        return jsonify(owner_schema.dump(owner)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in activate_owner: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@admin_bp.route('/subscription', methods=['GET'])
@actor_required('owner')
def subscription_status():
    try:
        owner = OwnerService.get_by_id(g.actor.id)
        if not owner:
            return jsonify({'error': 'Owner not found'}), 404
        body = owner_schema.dump(owner)
        body['active'] = SubscriptionService.is_active(owner.id)
        return jsonify(body), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in subscription_status: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@admin_bp.route('/subscription/renew', methods=['POST'])
@actor_required('owner')
def renew_subscription():
    try:
        data = request.get_json() or {}
        errors = renew_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        owner = SubscriptionService.renew(g.actor.id, data['subscription_key'])
        return jsonify(owner_schema.dump(owner)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in renew_subscription: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
