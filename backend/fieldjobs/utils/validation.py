from __future__ import annotations
"""Reusable validation helpers for request input.

All helpers raise ``ValidationFailed`` (or ``InvalidId``) with field level
details, and run before any datastore access.
"""
import re
from typing import Any, Iterable, Optional, Tuple

from fieldjobs.errors import InvalidId, ValidationFailed

UUID_RE = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)


def validate_status(new_status: Any, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is present and inside allowed.

    Returns the status (to enable inline usage) or raises ValidationFailed.
    """
    allowed = tuple(allowed)
    if not new_status:
        raise ValidationFailed('Missing required field', {field_name: [f'{field_name.capitalize()} is required']})
    if new_status not in allowed:
        raise ValidationFailed(f'Invalid {field_name} value', {field_name: [f"{field_name.capitalize()} must be one of: {', '.join(allowed)}"]})
    return new_status


def _is_number(value: Any) -> bool:
    # bool is an int subclass; true/false are not coordinates
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_location(location: Any) -> Optional[Tuple[float, float]]:
    """Return ``(lat, lng)`` for a ``{"lat": .., "lng": ..}`` mapping, ``None`` when absent.

    Latitude must lie in [-90, 90] and longitude in [-180, 180].
    """
    if location is None:
        return None
    if not isinstance(location, dict):
        raise ValidationFailed('Invalid location coordinates', {'location': ['Location must be an object with lat and lng']})
    lat, lng = location.get('lat'), location.get('lng')
    if not (_is_number(lat) and _is_number(lng)) or not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        raise ValidationFailed(
            'Invalid location coordinates',
            {'location': ['Location must have valid lat (-90 to 90) and lng (-180 to 180)']},
        )
    return float(lat), float(lng)


def validate_notes(notes: Any) -> Optional[str]:
    if notes is None or notes == '':
        return None
    if not isinstance(notes, str):
        raise ValidationFailed('Invalid notes', {'notes': ['Notes must be a string']})
    return notes


def validate_uuid(value: str, label: str = 'job') -> str:
    if not isinstance(value, str) or not UUID_RE.match(value):
        raise InvalidId(f'Invalid {label} ID format')
    return value.lower()

__all__ = ['validate_status', 'validate_location', 'validate_notes', 'validate_uuid']
