from tankerfleet.extensions import db
from tankerfleet.services.slab_matcher import Slab


class PayoutSlab(db.Model):
    __tablename__ = 'payout_slab'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='CASCADE'), nullable=False, index=True)
    min_trips = db.Column(db.Integer, nullable=False)
    max_trips = db.Column(db.Integer, nullable=False)
    payout_amount = db.Column(db.Float, nullable=False)

    __table_args__ = (
        db.CheckConstraint('min_trips >= 0', name='check_slab_min_non_negative'),
        db.CheckConstraint('max_trips >= min_trips', name='check_slab_range'),
        db.CheckConstraint('payout_amount >= 0', name='check_slab_payout_non_negative'),
    )

    def to_slab(self):
        return Slab(min_trips=self.min_trips, max_trips=self.max_trips, payout_amount=self.payout_amount)
