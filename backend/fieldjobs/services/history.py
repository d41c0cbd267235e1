from __future__ import annotations
from datetime import datetime
from typing import Optional, Tuple

from fieldjobs.models.job_status_history import JobStatusHistory
from fieldjobs.services.outcome import Outcome, best_effort


def location_point(location: Optional[Tuple[float, float]]):
    """Convert ``(lat, lng)`` into a GeoJSON point (longitude first)."""
    if location is None:
        return None
    lat, lng = location
    return {'type': 'Point', 'coordinates': [lng, lat]}


class HistoryRecorder:
    """Append one JobStatusHistory row per accepted transition.

    Recording is best-effort: a failed insert is logged and reported as an
    ``IGNORED`` outcome. The job's status change has already been committed
    by then and stays in place.
    """

    def __init__(self, store):
        self.store = store

    def record(self, job_id: str, status: str, changed_by: Optional[int], location: Optional[Tuple[float, float]] = None,
               notes: Optional[str] = None, created_at: Optional[datetime] = None) -> Outcome:
        entry = JobStatusHistory(
            job_id=job_id,
            status=status,
            changed_by=changed_by,
            location=location_point(location),
            notes=notes or None,
        )
        if created_at is not None:
            entry.created_at = created_at
        return best_effort(f'Recording status history for job {job_id}', self.store.append_history, entry)


__all__ = ['HistoryRecorder', 'location_point']
