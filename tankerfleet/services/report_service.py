"""
Owner reports: settlement over a date range and the monthly driver summary.
"""

import logging

from tankerfleet.models.driver import Driver
from tankerfleet.services.insights.service import InsightsService
from tankerfleet.services.trip_service import TripService
from tankerfleet.utils.timezone_utils import day_bounds_utc, format_datetime_for_api

logger = logging.getLogger(__name__)


def _trip_line(trip):
    rate = trip.route.rate_per_trip if trip.route else 0.0
    return {
        'trip_id': trip.id,
        'job_id': trip.job_id,
        'date': format_datetime_for_api(trip.date),
        'route': trip.trip_type,
        'count': trip.count,
        'rate': rate,
        'subtotal': trip.count * rate,
    }


class ReportService:
    @staticmethod
    def settlement(owner_id, start_day, end_day, driver_id=None, route_id=None,
                   deductions=None, paid_amounts=None):
        """
        Earnings per driver for trips between `start_day` and `end_day`
        (inclusive, reporting-timezone dates): trip count times the route's
        rate. `deductions` and `paid_amounts` map driver id to an amount and
        are taken off the driver's earnings.
        """
        deductions = deductions or {}
        paid_amounts = paid_amounts or {}
        start, end = day_bounds_utc(start_day, end_day)
        trips = TripService.list_trips(owner_id, driver_id=driver_id, route_id=route_id, start=start, end=end)

        by_driver = {}
        for trip in trips:
            by_driver.setdefault(trip.driver_id, []).append(trip)

        drivers = {d.id: d for d in Driver.query.filter(Driver.id.in_(list(by_driver))).all()} if by_driver else {}
        settlements = []
        for d_id in sorted(by_driver, key=lambda i: drivers[i].name if i in drivers else ''):
            if d_id not in drivers:
                continue
            lines = [_trip_line(t) for t in by_driver[d_id]]
            earnings = sum(line['subtotal'] for line in lines)
            deduction = deductions.get(d_id, 0.0)
            paid = paid_amounts.get(d_id, 0.0)
            settlements.append({
                'driver_id': d_id,
                'driver_name': drivers[d_id].name,
                'total_trips': sum(line['count'] for line in lines),
                'total_earnings': earnings,
                'deductions': deduction,
                'paid': paid,
                'payable': earnings - deduction - paid,
                'trips': lines,
            })

        total_revenue = sum(s['total_earnings'] for s in settlements)
        total_deductions = sum(deductions.values())
        total_paid = sum(paid_amounts.values())
        logger.debug(f"Settlement for owner {owner_id} {start_day}..{end_day}: "
                     f"{len(settlements)} drivers, revenue={total_revenue}")
        return {
            'start_date': start_day.isoformat(),
            'end_date': end_day.isoformat(),
            'driver_settlements': settlements,
            'total_trips': sum(s['total_trips'] for s in settlements),
            'total_revenue': total_revenue,
            'total_deductions': total_deductions,
            'total_paid': total_paid,
            'net_payable': total_revenue - total_deductions - total_paid,
        }

    @staticmethod
    def monthly_driver_summary(owner_id, driver_id, month_key, with_narrative=True):
        return InsightsService.monthly_summary(owner_id, driver_id, month_key, with_narrative)
