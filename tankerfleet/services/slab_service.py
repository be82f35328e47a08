import logging
from sqlalchemy.exc import SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.payout_slab import PayoutSlab
from tankerfleet.services.errors import ServiceError
from tankerfleet.services.slab_matcher import find_slab_conflicts, sort_slabs


def _overlapping(slab_range, others):
    low, high = slab_range
    return [s for s in others if s.min_trips <= high and low <= s.max_trips]


class SlabService:
    """Owner-managed payout slab table.

    Writes that would make two slabs overlap are refused. Gaps are allowed
    (an owner may pay nothing between two bands) and are reported by
    `validate`.
    """

    @staticmethod
    def get_for_owner(owner_id):
        try:
            return PayoutSlab.query.filter_by(owner_id=owner_id).order_by(PayoutSlab.min_trips).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching payout slabs: {e}", exc_info=True)
            raise ServiceError("Could not fetch payout slabs. Please try again later.")

    @staticmethod
    def slab_table(owner_id):
        """Plain Slab values for the matcher."""
        return sort_slabs(s.to_slab() for s in SlabService.get_for_owner(owner_id))

    @staticmethod
    def _check_overlap(owner_id, min_trips, max_trips, exclude_id=None):
        others = [s for s in SlabService.get_for_owner(owner_id) if s.id != exclude_id]
        clashes = _overlapping((min_trips, max_trips), others)
        if clashes:
            clash = clashes[0]
            raise ServiceError(
                f"Slab {min_trips}-{max_trips} overlaps existing slab {clash.min_trips}-{clash.max_trips}.")

    @staticmethod
    def create(owner_id, data):
        SlabService._check_overlap(owner_id, data['min_trips'], data['max_trips'])
        try:
            slab = PayoutSlab(owner_id=owner_id, **data)
            db.session.add(slab)
            db.session.commit()
            return slab
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating payout slab: {e}", exc_info=True)
            raise ServiceError("Could not create payout slab. Please try again later.")

    @staticmethod
    def update(owner_id, slab_id, data):
        slab = db.session.get(PayoutSlab, slab_id)
        if not slab or slab.owner_id != owner_id:
            return None
        min_trips = data.get('min_trips', slab.min_trips)
        max_trips = data.get('max_trips', slab.max_trips)
        if max_trips < min_trips:
            raise ServiceError("max_trips must be greater than or equal to min_trips.")
        SlabService._check_overlap(owner_id, min_trips, max_trips, exclude_id=slab.id)
        try:
            for key, value in data.items():
                setattr(slab, key, value)
            db.session.commit()
            return slab
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating payout slab: {e}", exc_info=True)
            raise ServiceError("Could not update payout slab. Please try again later.")

    @staticmethod
    def delete(owner_id, slab_id):
        slab = db.session.get(PayoutSlab, slab_id)
        if not slab or slab.owner_id != owner_id:
            return False
        try:
            db.session.delete(slab)
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error deleting payout slab: {e}", exc_info=True)
            raise ServiceError("Could not delete payout slab. Please try again later.")

    @staticmethod
    def validate(owner_id):
        problems = find_slab_conflicts(SlabService.slab_table(owner_id))
        return {'valid': not problems, 'problems': problems}
