import logging

from tankerfleet.extensions import db
from tankerfleet.models.driver import Driver
from tankerfleet.models.route import Route
from tankerfleet.services.errors import NotFoundError
from tankerfleet.services.slab_matcher import compute_payout
from tankerfleet.services.slab_service import SlabService
from tankerfleet.services.trip_aggregator import aggregate_month
from tankerfleet.services.trip_service import TripService
from tankerfleet.utils.timezone_utils import month_bounds_utc, shift_month

logger = logging.getLogger(__name__)


class PayoutService:
    """Reads a driver's trips and slab table and runs the payout calculation."""

    @staticmethod
    def get_driver(driver_id):
        driver = db.session.get(Driver, driver_id)
        if not driver:
            raise NotFoundError("Driver not found")
        return driver

    @staticmethod
    def month_entries(driver, month_key):
        start, end = month_bounds_utc(month_key)
        trips = TripService.list_trips(driver.owner_id, driver_id=driver.id, start=start, end=end)
        return TripService.to_entries(trips)

    @staticmethod
    def monthly_aggregate(driver, month_key, entries=None):
        if entries is None:
            entries = PayoutService.month_entries(driver, month_key)
        route_labels = [r.label for r in Route.query.filter_by(owner_id=driver.owner_id).all()]
        return aggregate_month(entries, month_key, driver_id=driver.id, trip_types=route_labels)

    @staticmethod
    def driver_payout(driver_id, month_key):
        """Aggregate and payout for one driver and month."""
        driver = PayoutService.get_driver(driver_id)
        aggregate = PayoutService.monthly_aggregate(driver, month_key)
        payout = compute_payout(aggregate.total_trips, SlabService.slab_table(driver.owner_id))
        logger.debug(
            f"Payout for driver {driver.id} {month_key}: trips={aggregate.total_trips} "
            f"payout={payout.estimated_payout}")
        return {
            'driver_id': driver.id,
            'month': month_key,
            'aggregate': aggregate.to_dict(),
            'payout': payout.to_dict(),
        }

    @staticmethod
    def past_month_summaries(driver, month_key, months, slabs):
        """
        {month, total_trips, payout} for each of the `months` months before
        `month_key`, most recent first, skipping months with no trips.
        """
        summaries = []
        for offset in range(1, months + 1):
            key = shift_month(month_key, -offset)
            total = PayoutService.monthly_aggregate(driver, key).total_trips
            if total > 0:
                payout = compute_payout(total, slabs)
                summaries.append({'month': key, 'total_trips': total, 'payout': payout.estimated_payout})
        return summaries
