from flask import Blueprint, g, jsonify, request
import logging

from tankerfleet.schemas.report_schema import SettlementRequestSchema
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.report_service import ReportService
from tankerfleet.utils.actor import actor_required, subscription_required
from tankerfleet.utils.timezone_utils import month_key, parse_month_key, utc_now

reports_bp = Blueprint('reports', __name__)
settlement_schema = SettlementRequestSchema()


@reports_bp.route('/reports/settlement', methods=['POST'])
@actor_required('owner')
@subscription_required
def settlement_report():
    try:
        data = request.get_json() or {}
        errors = settlement_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        data = settlement_schema.load(data)
        report = ReportService.settlement(
            g.actor.id,
            data['start_date'],
            data['end_date'],
            driver_id=data.get('driver_id'),
            route_id=data.get('route_id'),
            deductions=data['deductions'],
            paid_amounts=data['paid_amounts'],
        )
        return jsonify(report), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in settlement_report: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@reports_bp.route('/reports/drivers/<int:driver_id>/monthly-summary', methods=['GET'])
@actor_required('owner')
@subscription_required
def monthly_driver_summary(driver_id):
    try:
        key = request.args.get('month') or month_key(utc_now())
        try:
            parse_month_key(key)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        with_narrative = request.args.get('narrative', 'true').lower() != 'false'
        summary = ReportService.monthly_driver_summary(g.actor.id, driver_id, key, with_narrative)
        if summary is None:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(summary), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in monthly_driver_summary: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
