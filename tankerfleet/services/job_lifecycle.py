"""
Job lifecycle state machine.

A job walks REQUESTED -> ASSIGNED -> (ACCEPTED) -> IN_PROGRESS -> COMPLETED.
While in progress the driver confirms each stop of the route (the source,
then every destination in order) with an ARRIVED and a FULFILLED event;
NOTE_ADDED events may be logged freely. Completion is only allowed once
every stop has both confirmations.

Everything here works on immutable snapshots and returns a
LifecycleOutcome: either the next snapshot plus the events to append, or a
typed Rejection with the snapshot left as it was. Persistence lives in
JobService.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from tankerfleet.models.job import ALLOWED_TRANSITIONS, JobStatus
from tankerfleet.models.job_event import EventKind


class StopType(Enum):
    SOURCE = "source"
    DESTINATION = "destination"


ACTION_LABELS = {
    (StopType.SOURCE, EventKind.ARRIVED): "Arrived at Source",
    (StopType.SOURCE, EventKind.FULFILLED): "Water Filled",
    (StopType.DESTINATION, EventKind.ARRIVED): "Arrived at Destination",
    (StopType.DESTINATION, EventKind.FULFILLED): "Water Delivered",
}
NOTE_LABEL = "Note Added"
COMPLETION_LABEL = "Job Completed"

# Confirmations every stop needs before the job can be completed
REQUIRED_KINDS = (EventKind.ARRIVED, EventKind.FULFILLED)
LOGGABLE_KINDS = REQUIRED_KINDS + (EventKind.NOTE_ADDED,)


@dataclass(frozen=True)
class Stop:
    index: int
    name: str
    stop_type: StopType

    def label_for(self, kind: EventKind) -> str:
        if kind == EventKind.NOTE_ADDED:
            return NOTE_LABEL
        return ACTION_LABELS[(self.stop_type, kind)]


def route_stops(source: str, destinations: Sequence[str]) -> Tuple[Stop, ...]:
    """Source first, then destinations in route order."""
    stops = [Stop(0, source, StopType.SOURCE)]
    stops.extend(Stop(i, name, StopType.DESTINATION) for i, name in enumerate(destinations, start=1))
    return tuple(stops)


@dataclass(frozen=True)
class TimelineEvent:
    timestamp: datetime
    stop_index: Optional[int]
    location: str
    kind: EventKind
    action: str
    notes: str = ""

    @classmethod
    def from_model(cls, event):
        return cls(
            timestamp=event.timestamp,
            stop_index=event.stop_index,
            location=event.location,
            kind=EventKind(event.kind),
            action=event.action,
            notes=event.notes or "",
        )

    def to_dict(self):
        return {
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'stop_index': self.stop_index,
            'location': self.location,
            'kind': self.kind.value,
            'action': self.action,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class JobSnapshot:
    status: JobStatus
    events: Tuple[TimelineEvent, ...] = ()

    @classmethod
    def from_job(cls, job):
        return cls(
            status=JobStatus(job.status),
            events=tuple(TimelineEvent.from_model(e) for e in job.events),
        )


class Rejection(Enum):
    INVALID_TRANSITION = "The job cannot move to that status from its current status."
    JOB_COMPLETED = "The job is already completed."
    STOPS_INCOMPLETE = "Every stop must be confirmed before the job can be completed."
    UNKNOWN_STOP = "That stop is not part of this job's route."
    UNSUPPORTED_ACTION = "That action cannot be logged at a stop."
    EMPTY_NOTE = "A note cannot be empty."
    NOT_JOB_OWNER = "Only the owner who manages this job can do that."
    NOT_ASSIGNED_DRIVER = "Only the driver assigned to this job can do that."
    CONCURRENT_UPDATE = "The job was updated at the same time. Please reload and try again."

    @property
    def message(self):
        return self.value


@dataclass(frozen=True)
class LifecycleOutcome:
    snapshot: JobSnapshot
    previous_status: JobStatus
    appended: Tuple[TimelineEvent, ...] = ()
    rejection: Optional[Rejection] = None

    @property
    def accepted(self):
        return self.rejection is None

    @property
    def changed(self):
        return self.accepted and (bool(self.appended) or self.snapshot.status != self.previous_status)


def reject(snapshot: JobSnapshot, reason: Rejection) -> LifecycleOutcome:
    return LifecycleOutcome(snapshot=snapshot, previous_status=snapshot.status, rejection=reason)


def _unchanged(snapshot: JobSnapshot) -> LifecycleOutcome:
    return LifecycleOutcome(snapshot=snapshot, previous_status=snapshot.status)


def _advance(snapshot: JobSnapshot, status: JobStatus, appended=()) -> LifecycleOutcome:
    appended = tuple(appended)
    return LifecycleOutcome(
        snapshot=JobSnapshot(status=status, events=snapshot.events + appended),
        previous_status=snapshot.status,
        appended=appended,
    )


def _transition(snapshot: JobSnapshot, target: JobStatus) -> LifecycleOutcome:
    if snapshot.status == JobStatus.COMPLETED:
        return reject(snapshot, Rejection.JOB_COMPLETED)
    if target not in ALLOWED_TRANSITIONS[snapshot.status]:
        return reject(snapshot, Rejection.INVALID_TRANSITION)
    return _advance(snapshot, target)


def approve_request(snapshot: JobSnapshot) -> LifecycleOutcome:
    """Owner approval of a driver's request: REQUESTED -> ASSIGNED."""
    return _transition(snapshot, JobStatus.ASSIGNED)


def accept_job(snapshot: JobSnapshot) -> LifecycleOutcome:
    """Explicit driver acceptance: ASSIGNED -> ACCEPTED."""
    return _transition(snapshot, JobStatus.ACCEPTED)


def start_job(snapshot: JobSnapshot) -> LifecycleOutcome:
    """
    The assigned driver opened the job. ASSIGNED/ACCEPTED -> IN_PROGRESS;
    a job already in progress is left as it is.
    """
    if snapshot.status == JobStatus.IN_PROGRESS:
        return _unchanged(snapshot)
    return _transition(snapshot, JobStatus.IN_PROGRESS)


def is_action_logged(events: Sequence[TimelineEvent], stop_index: int, kind: EventKind) -> bool:
    return any(e.stop_index == stop_index and e.kind == kind for e in events)


def is_stop_complete(events: Sequence[TimelineEvent], stop: Stop) -> bool:
    return all(is_action_logged(events, stop.index, kind) for kind in REQUIRED_KINDS)


def missing_actions(stops: Sequence[Stop], events: Sequence[TimelineEvent]) -> List[Tuple[Stop, EventKind]]:
    """Required (stop, kind) confirmations not yet logged, in route order."""
    return [
        (stop, kind)
        for stop in stops
        for kind in REQUIRED_KINDS
        if not is_action_logged(events, stop.index, kind)
    ]


def all_stops_complete(stops: Sequence[Stop], events: Sequence[TimelineEvent]) -> bool:
    return not missing_actions(stops, events)


def stop_progress(stops: Sequence[Stop], events: Sequence[TimelineEvent]) -> List[dict]:
    """Per-stop view of the timeline for the presentation layer."""
    progress = []
    for stop in stops:
        logged = {kind: is_action_logged(events, stop.index, kind) for kind in REQUIRED_KINDS}
        progress.append({
            'index': stop.index,
            'name': stop.name,
            'type': stop.stop_type.value,
            'actions': [
                {'kind': kind.value, 'label': stop.label_for(kind), 'logged': logged[kind]}
                for kind in REQUIRED_KINDS
            ],
            'complete': all(logged.values()),
        })
    return progress


def log_stop_action(snapshot: JobSnapshot, stops: Sequence[Stop], stop_index: int, kind: EventKind,
                    timestamp: datetime, notes: str = "") -> LifecycleOutcome:
    """
    Record a driver action at a stop.

    Logging on an ASSIGNED/ACCEPTED job starts it. Re-logging an arrival or
    fulfilment that is already on the timeline changes nothing.
    """
    if snapshot.status == JobStatus.COMPLETED:
        return reject(snapshot, Rejection.JOB_COMPLETED)
    if snapshot.status == JobStatus.REQUESTED:
        return reject(snapshot, Rejection.INVALID_TRANSITION)
    if kind not in LOGGABLE_KINDS:
        return reject(snapshot, Rejection.UNSUPPORTED_ACTION)
    if not 0 <= stop_index < len(stops):
        return reject(snapshot, Rejection.UNKNOWN_STOP)

    notes = (notes or "").strip()
    if kind == EventKind.NOTE_ADDED and not notes:
        return reject(snapshot, Rejection.EMPTY_NOTE)
    if kind in REQUIRED_KINDS and is_action_logged(snapshot.events, stop_index, kind):
        return _unchanged(snapshot)

    stop = stops[stop_index]
    event = TimelineEvent(
        timestamp=timestamp,
        stop_index=stop.index,
        location=stop.name,
        kind=kind,
        action=stop.label_for(kind),
        notes=notes,
    )
    return _advance(snapshot, JobStatus.IN_PROGRESS, (event,))


def complete_job(snapshot: JobSnapshot, stops: Sequence[Stop], timestamp: datetime) -> LifecycleOutcome:
    """IN_PROGRESS -> COMPLETED once every stop is confirmed; appends the completion event."""
    if snapshot.status == JobStatus.COMPLETED:
        return reject(snapshot, Rejection.JOB_COMPLETED)
    if snapshot.status != JobStatus.IN_PROGRESS:
        return reject(snapshot, Rejection.INVALID_TRANSITION)
    if not all_stops_complete(stops, snapshot.events):
        return reject(snapshot, Rejection.STOPS_INCOMPLETE)

    final_stop = stops[-1]
    event = TimelineEvent(
        timestamp=timestamp,
        stop_index=None,
        location=final_stop.name,
        kind=EventKind.COMPLETED,
        action=COMPLETION_LABEL,
    )
    return _advance(snapshot, JobStatus.COMPLETED, (event,))
