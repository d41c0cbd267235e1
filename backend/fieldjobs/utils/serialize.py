from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional


def iso(dt: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with a trailing Z; naive values (SQLite) are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def job_json(j):
    return {
        'id': j.id,
        'job_number': j.job_number,
        'agency_id': j.agency_id,
        'assigned_engineer_id': j.assigned_engineer_id,
        'client_name': j.client_name,
        'job_type': j.job_type,
        'status': j.status,
        'urgency': j.urgency,
        'assigned_at': iso(j.assigned_at),
        'accepted_at': iso(j.accepted_at),
        'started_at': iso(j.started_at),
        'completed_at': iso(j.completed_at),
        'created_at': iso(j.created_at),
        'updated_at': iso(j.updated_at),
    }


def history_json(h):
    return {
        'id': h.id,
        'job_id': h.job_id,
        'status': h.status,
        'changed_by': h.changed_by,
        'location': h.location,
        'notes': h.notes,
        'created_at': iso(h.created_at),
    }

__all__ = ['iso', 'job_json', 'history_json']
