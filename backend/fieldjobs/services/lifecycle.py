from __future__ import annotations
"""Job status lifecycle engine.

One status update runs these steps in order, each after the previous one
has finished:

  1. validate input (status value, location range)   no datastore access yet
  2. read the job                                      NotFound / DatastoreError
  3. authorize the actor against the job               Forbidden
  4. validate the transition                           InvalidTransition
  5. write status + timestamp column                   Conflict / DatastoreError
  6. append status history                             best-effort
  7. publish notifications                             best-effort, per channel
  8. load recent history for the response              best-effort

Steps 1-5 are authoritative; an error there leaves the job untouched. Steps
6-8 only ever change flags in the response metadata.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fieldjobs.models.job import Job
from fieldjobs.services.dispatch import DispatchReport, SideEffectDispatcher
from fieldjobs.services.history import HistoryRecorder
from fieldjobs.services.outcome import Outcome, authoritative, best_effort
from fieldjobs.services.policy import Actor, assert_job_access
from fieldjobs.services.transitions import JOB_FSM, timestamp_field_for
from fieldjobs.utils.serialize import history_json, iso, job_json
from fieldjobs.utils.validation import validate_location, validate_notes, validate_status
from fieldjobs.config.pagination import DEFAULT_HISTORY_LIMIT

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StatusUpdateResult:
    job: Job
    status_history: List[Any]
    metadata: Dict[str, Any]
    history_outcome: Optional[Outcome] = None
    dispatch_report: DispatchReport = field(default_factory=DispatchReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'job': job_json(self.job),
            'status_history': [history_json(h) for h in self.status_history],
            'metadata': dict(self.metadata),
        }


class JobStatusEngine:
    def __init__(self, store, recorder: HistoryRecorder, dispatcher: SideEffectDispatcher,
                 history_limit: int = DEFAULT_HISTORY_LIMIT, clock: Callable[[], datetime] = utcnow,
                 authorize: Callable[[Actor, Job], None] = assert_job_access):
        self.store = store
        self.recorder = recorder
        self.dispatcher = dispatcher
        self.history_limit = history_limit
        self.clock = clock
        self.authorize = authorize

    def update_status(self, job_id: str, requested_status: Any, actor: Actor, location: Any = None,
                      notes: Any = None, extra_fields: Optional[Dict[str, Any]] = None) -> StatusUpdateResult:
        new_status = validate_status(requested_status, Job.ALL_STATUSES)
        point = validate_location(location)
        notes = validate_notes(notes)

        job = self.store.read_job(job_id)
        self.authorize(actor, job)
        previous_status = job.status
        JOB_FSM.assert_can_transition(previous_status, new_status)

        now = self.clock()
        fields: Dict[str, Any] = dict(extra_fields or {})
        fields.update({'status': new_status, 'updated_at': now})
        ts_field = timestamp_field_for(new_status)
        if ts_field:
            fields[ts_field] = now
        authoritative(self.store.update_job, job, fields, previous_status).raise_if_fatal()
        logger.info('Job %s status %s -> %s by user %s', job.id, previous_status, new_status, actor.user_id)

        history_outcome = self.recorder.record(job.id, new_status, actor.user_id, point, notes, created_at=now)
        report = self.dispatcher.dispatch(job, new_status, actor.user_id, now, point)
        recent = best_effort(f'Loading status history for job {job.id}', self.store.query_history, job.id, self.history_limit)

        metadata = {
            'previous_status': previous_status,
            'new_status': new_status,
            'transition_valid': True,
            'timestamp_field_set': ts_field,
            'timestamp_recorded': iso(now) if ts_field else None,
            'location_recorded': point is not None and history_outcome.succeeded,
            'history_recorded': history_outcome.succeeded,
            'broadcast_sent': report.broadcast_sent,
        }
        return StatusUpdateResult(
            job=job,
            status_history=recent.value if recent.succeeded else [],
            metadata=metadata,
            history_outcome=history_outcome,
            dispatch_report=report,
        )


__all__ = ['JobStatusEngine', 'StatusUpdateResult', 'utcnow']
