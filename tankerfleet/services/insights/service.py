import logging

from flask import current_app

from tankerfleet.services.insights.client import InsightsClient
from tankerfleet.services.insights.models import (
    DriverInsightsRequest, MonthlyReportRequest, MonthSummary, PastMonthSummary, TripEntryPayload,
)
from tankerfleet.services.payout_service import PayoutService
from tankerfleet.services.slab_matcher import (
    compute_payout, describe_current_slab, describe_next_slab, describe_progress,
)
from tankerfleet.services.slab_service import SlabService
from tankerfleet.utils.timezone_utils import month_key as to_month_key, shift_month, utc_now

logger = logging.getLogger(__name__)


def slab_label(payout):
    return payout.current_slab.describe() if payout.current_slab else "No slab"


class InsightsService:
    """Payout insight records for drivers and monthly summaries for owners.

    The calculated figures always come from the slab matcher; the
    generative collaborator only adds suggestions or a narrative on top and
    may return nothing.
    """

    @staticmethod
    def client():
        return InsightsClient.from_config(current_app.config)

    @staticmethod
    def driver_insights(driver_id, month_key=None, client=None):
        driver = PayoutService.get_driver(driver_id)
        month_key = month_key or to_month_key(utc_now())
        slabs = SlabService.slab_table(driver.owner_id)

        entries = PayoutService.month_entries(driver, month_key)
        total = PayoutService.monthly_aggregate(driver, month_key, entries).total_trips
        payout = compute_payout(total, slabs)
        past = PayoutService.past_month_summaries(
            driver, month_key, current_app.config.get('PAST_MONTHS_FOR_INSIGHTS', 3), slabs)

        request = DriverInsightsRequest(
            driver_id=driver.id,
            current_month_total_trips=total,
            current_slab_description=describe_current_slab(payout),
            estimated_payout=payout.estimated_payout,
            next_slab_description=describe_next_slab(payout),
            trips_needed_for_next_slab=payout.trips_needed,
            current_month_trip_entries=[TripEntryPayload(**e.to_dict()) for e in entries],
            past_month_summaries=[PastMonthSummary(**p) for p in past],
        )
        suggestions = (client or InsightsService.client()).suggest(request)

        next_target = None
        if payout.next_slab is not None:
            next_target = dict(payout.next_slab._asdict(), trips_needed=payout.trips_needed)
        return {
            'driver_id': driver.id,
            'month': month_key,
            'current_month_total_trips': total,
            'current_slab': payout.current_slab._asdict() if payout.current_slab else None,
            'estimated_payout': payout.estimated_payout,
            'progress_percent': payout.progress_percent,
            'progress_to_next_slab': describe_progress(payout),
            'next_slab_target': next_target,
            'past_month_summaries': past,
            'ai_insights': suggestions,
        }

    @staticmethod
    def _month_summary(driver, month_key, slabs):
        total = PayoutService.monthly_aggregate(driver, month_key).total_trips
        payout = compute_payout(total, slabs)
        return MonthSummary(month=month_key, total_trips=total, slab_matched=slab_label(payout),
                            payout=payout.estimated_payout)

    @staticmethod
    def monthly_summary(owner_id, driver_id, month_key, with_narrative=True, client=None):
        """Current vs previous month for one of the owner's drivers."""
        driver = PayoutService.get_driver(driver_id)
        if driver.owner_id != owner_id:
            return None
        slabs = SlabService.slab_table(owner_id)
        current = InsightsService._month_summary(driver, month_key, slabs)
        previous = InsightsService._month_summary(driver, shift_month(month_key, -1), slabs)
        if previous.total_trips == 0:
            previous = None

        narrative = ""
        if with_narrative:
            request = MonthlyReportRequest(driver_name=driver.name, current=current, previous=previous)
            narrative = (client or InsightsService.client()).summarize(request)
        return {
            'driver_id': driver.id,
            'driver_name': driver.name,
            'current': current.model_dump(),
            'previous': previous.model_dump() if previous else None,
            'summary': narrative,
        }
