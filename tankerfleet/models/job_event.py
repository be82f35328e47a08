from enum import Enum
from tankerfleet.extensions import db


class EventKind(Enum):
    ARRIVED = "arrived"
    FULFILLED = "fulfilled"
    NOTE_ADDED = "note_added"
    COMPLETED = "completed"


class JobEvent(db.Model):
    __tablename__ = 'job_event'
    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey('job.id', ondelete='CASCADE'), nullable=False, index=True)
    # Insertion order within the job timeline
    sequence = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)
    # Position in the route's stop list (0 = source); None for the completion event
    stop_index = db.Column(db.Integer, nullable=True)
    location = db.Column(db.String(256), nullable=False)
    kind = db.Column(db.String(32), nullable=False)
    action = db.Column(db.String(128), nullable=False)
    notes = db.Column(db.Text, nullable=False, default='')

    job = db.relationship('Job', back_populates='events')

    __table_args__ = (
        db.UniqueConstraint('job_id', 'sequence', name='uq_job_event_sequence'),
        db.CheckConstraint(
            f"kind IN ({', '.join([repr(kind.value) for kind in EventKind])})",
            name='check_job_event_kind'
        ),
    )

    @property
    def event_kind(self):
        return EventKind(self.kind)
