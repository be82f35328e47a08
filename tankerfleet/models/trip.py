from sqlalchemy.types import JSON
from tankerfleet.extensions import db


class Trip(db.Model):
    """Immutable ledger record of one completed delivery run (or a manual log entry)."""
    __tablename__ = 'trip'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='CASCADE'), nullable=False, index=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    route_id = db.Column(db.Integer, db.ForeignKey('route.id', ondelete='SET NULL'), nullable=True, index=True)
    job_id = db.Column(db.Integer, db.ForeignKey('job.id', ondelete='SET NULL'), nullable=True, index=True)
    # Route label at the time the trip was written
    trip_type = db.Column(db.String(256), nullable=False)
    count = db.Column(db.Integer, nullable=False, default=1)
    # Naive UTC; for job trips this is the job's assignment time
    date = db.Column(db.DateTime, nullable=False, index=True)
    # Archived copy of the job timeline
    events = db.Column(JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    route = db.relationship('Route', lazy='select')

    __table_args__ = (
        db.CheckConstraint('count > 0', name='check_trip_count_positive'),
    )
