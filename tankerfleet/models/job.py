from enum import Enum
from sqlalchemy.types import JSON
from tankerfleet.extensions import db


class JobStatus(Enum):
    REQUESTED = "requested"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Status graph. ACCEPTED is optional: a driver acting on an ASSIGNED job
# moves it straight to IN_PROGRESS.
ALLOWED_TRANSITIONS = {
    JobStatus.REQUESTED: {JobStatus.ASSIGNED},
    JobStatus.ASSIGNED: {JobStatus.ACCEPTED, JobStatus.IN_PROGRESS},
    JobStatus.ACCEPTED: {JobStatus.IN_PROGRESS},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED},
    JobStatus.COMPLETED: set(),
}


class Job(db.Model):
    __tablename__ = 'job'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='CASCADE'), nullable=False, index=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    route_id = db.Column(db.Integer, db.ForeignKey('route.id', ondelete='CASCADE'), nullable=False, index=True)
    route_name = db.Column(db.String(256), nullable=False)
    # Stops as dispatched; later route edits do not reach running jobs
    source = db.Column(db.String(256), nullable=False)
    destinations = db.Column(JSON, nullable=False, default=list)
    status = db.Column(db.String(32), nullable=False, default=JobStatus.ASSIGNED.value, index=True)
    # Naive UTC. For requested jobs this is the request time.
    assigned_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    # Bumped on every write; conditional updates compare against it
    version = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    driver = db.relationship('Driver', lazy='select')
    route = db.relationship('Route', lazy='select')
    events = db.relationship(
        'JobEvent',
        back_populates='job',
        order_by='JobEvent.sequence',
        cascade='all, delete-orphan',
        lazy='select',
    )

    __table_args__ = (
        db.CheckConstraint(
            f"status IN ({', '.join([repr(status.value) for status in JobStatus])})",
            name='check_job_status'
        ),
    )

    @property
    def job_status(self):
        return JobStatus(self.status)

    @property
    def is_terminal(self):
        return self.status == JobStatus.COMPLETED.value

    def __repr__(self):
        return f"<Job id={self.id} status={self.status} version={self.version}>"
