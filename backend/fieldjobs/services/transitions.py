from __future__ import annotations
from types import MappingProxyType
from typing import Optional

from fieldjobs.models.job import Job
from fieldjobs.utils.fsm import TransitionValidator

JOB_TRANSITIONS = MappingProxyType({
    Job.STATUS_PENDING: frozenset({Job.STATUS_ASSIGNED, Job.STATUS_CANCELLED}),
    Job.STATUS_ASSIGNED: frozenset({Job.STATUS_ACCEPTED, Job.STATUS_CANCELLED}),
    Job.STATUS_ACCEPTED: frozenset({Job.STATUS_TRAVELLING, Job.STATUS_CANCELLED}),
    Job.STATUS_TRAVELLING: frozenset({Job.STATUS_ONSITE, Job.STATUS_CANCELLED}),
    Job.STATUS_ONSITE: frozenset({Job.STATUS_COMPLETED, Job.STATUS_CANCELLED}),
    Job.STATUS_COMPLETED: frozenset(),
    Job.STATUS_CANCELLED: frozenset(),
})

JOB_FSM = TransitionValidator(JOB_TRANSITIONS, order=Job.ALL_STATUSES)

# Entering a status listed here stamps the named column with the transition time.
# pending, travelling and cancelled have no dedicated column.
TIMESTAMP_FIELDS = MappingProxyType({
    Job.STATUS_ASSIGNED: 'assigned_at',
    Job.STATUS_ACCEPTED: 'accepted_at',
    Job.STATUS_ONSITE: 'started_at',
    Job.STATUS_COMPLETED: 'completed_at',
})


def timestamp_field_for(status: str) -> Optional[str]:
    return TIMESTAMP_FIELDS.get(status)


def terminal_statuses():
    return tuple(s for s in Job.ALL_STATUSES if JOB_FSM.is_terminal(s))


__all__ = ['JOB_TRANSITIONS', 'JOB_FSM', 'TIMESTAMP_FIELDS', 'timestamp_field_for', 'terminal_statuses']
