from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from fieldjobs.models.job import Job
from fieldjobs.services.broadcast import (
    Broadcaster, job_channel, engineer_channel,
    EVENT_STATUS_UPDATE, EVENT_START_TRACKING, EVENT_STOP_TRACKING,
)
from fieldjobs.services.outcome import Outcome, best_effort

STOP_TRACKING_STATUSES = (Job.STATUS_COMPLETED, Job.STATUS_CANCELLED)


@dataclass
class DispatchReport:
    """Outcome per published event, keyed ``<channel>/<event>``."""
    outcomes: Dict[str, Outcome] = field(default_factory=dict)

    @property
    def broadcast_sent(self) -> bool:
        return any(k.endswith('/' + EVENT_STATUS_UPDATE) and o.succeeded for k, o in self.outcomes.items())

    @property
    def failed(self):
        return sorted(k for k, o in self.outcomes.items() if not o.succeeded)


def _iso(ts: datetime) -> str:
    return ts.isoformat().replace('+00:00', 'Z')


class SideEffectDispatcher:
    """Publish the notifications that follow a committed status change.

    Each event is sent independently: a failed publish is logged and the
    remaining events are still attempted.
    """

    def __init__(self, broadcaster: Broadcaster):
        self.broadcaster = broadcaster

    def _send(self, report: DispatchReport, channel: str, event: str, payload):
        key = f'{channel}/{event}'
        report.outcomes[key] = best_effort(f'Broadcast {key}', self.broadcaster.publish, channel, event, payload)

    def dispatch(self, job: Job, new_status: str, changed_by: Optional[int], timestamp: datetime,
                 location: Optional[Tuple[float, float]] = None) -> DispatchReport:
        report = DispatchReport()
        ts = _iso(timestamp)
        self._send(report, job_channel(job.id), EVENT_STATUS_UPDATE, {
            'job_id': job.id,
            'status': new_status,
            'timestamp': ts,
            'location': {'lat': location[0], 'lng': location[1]} if location else None,
            'changed_by': changed_by,
        })
        engineer_id = job.assigned_engineer_id
        if engineer_id is None:
            return report
        if new_status == Job.STATUS_TRAVELLING:
            self._send(report, engineer_channel(engineer_id), EVENT_START_TRACKING, {
                'job_id': job.id,
                'job_number': job.job_number,
                'timestamp': ts,
            })
        elif new_status in STOP_TRACKING_STATUSES:
            self._send(report, engineer_channel(engineer_id), EVENT_STOP_TRACKING, {
                'job_id': job.id,
                'timestamp': ts,
            })
        return report


__all__ = ['SideEffectDispatcher', 'DispatchReport', 'STOP_TRACKING_STATUSES']
