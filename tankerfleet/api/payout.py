from flask import Blueprint, jsonify, request
import logging

from tankerfleet.services.errors import ServiceError
from tankerfleet.services.insights.service import InsightsService
from tankerfleet.services.payout_service import PayoutService
from tankerfleet.utils.actor import actor_required, can_view_driver, subscription_required
from tankerfleet.utils.timezone_utils import month_key, parse_month_key, utc_now

payout_bp = Blueprint('payout', __name__)


def _requested_month():
    """`month` query arg (YYYY-MM), defaulting to the current reporting month."""
    key = request.args.get('month') or month_key(utc_now())
    parse_month_key(key)
    return key


@payout_bp.route('/drivers/<int:driver_id>/payout', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def driver_payout(driver_id):
    try:
        try:
            key = _requested_month()
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        if not can_view_driver(PayoutService.get_driver(driver_id)):
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(PayoutService.driver_payout(driver_id, key)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in driver_payout: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payout_bp.route('/drivers/<int:driver_id>/payout-insights', methods=['GET'])
@actor_required('owner', 'driver')
@subscription_required
def driver_payout_insights(driver_id):
    try:
        try:
            key = _requested_month()
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        if not can_view_driver(PayoutService.get_driver(driver_id)):
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(InsightsService.driver_insights(driver_id, key)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in driver_payout_insights: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
