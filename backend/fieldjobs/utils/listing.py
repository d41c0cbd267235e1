from __future__ import annotations
from typing import Iterable, Optional, Tuple
from flask import request, make_response, jsonify
from sqlalchemy.orm import Query
from fieldjobs.config.pagination import normalize_pagination
from fieldjobs.errors import ValidationFailed
import hashlib
from datetime import datetime, timezone, timedelta
from email.utils import parsedate_to_datetime, format_datetime

TIMESTAMP_TOLERANCE = timedelta(seconds=1)

def canonicalize_timestamp(dt: datetime) -> datetime:
    """Return UTC tz-aware timestamp truncated to whole seconds (microseconds removed)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)

def _iso_z(dt: datetime) -> str:
    return dt.isoformat().replace('+00:00', 'Z')

def http_date(dt: datetime) -> str:
    """Return RFC1123 HTTP-date string in GMT."""
    return format_datetime(dt, usegmt=True)

def read_pagination() -> Tuple[int, int]:
    try:
        return normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        raise ValidationFailed(str(e), {'limit': ['must be int'], 'offset': ['must be int']})

def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    limit, offset = read_pagination()
    total = q.count()
    return q.offset(offset).limit(limit), total, limit, offset

def compute_etag(ids: Iterable, total: int, limit: int, offset: int, latest_ts: Optional[str] = '') -> str:
    seed = f"{list(ids)}|{total}|{limit}|{offset}|{latest_ts or ''}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]

def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }

def _set_validators(resp, etag: str, latest: Optional[datetime]):
    resp.headers['ETag'] = etag
    if latest:
        resp.headers['Last-Modified'] = http_date(latest)
        # canonical ISO in a secondary header for clients that prefer it
        resp.headers['X-Last-Modified-ISO'] = _iso_z(latest)
    return resp

def latest_of(values: Iterable[Optional[datetime]]) -> Optional[datetime]:
    present = [canonicalize_timestamp(v) for v in values if isinstance(v, datetime)]
    return max(present) if present else None

def make_cached_list_response(rows: list, total: int, limit: int, offset: int, latest_ts: Optional[datetime] = None):
    ids = [r.get('id') for r in rows]
    latest_c = canonicalize_timestamp(latest_ts) if isinstance(latest_ts, datetime) else None
    etag = compute_etag(ids, total, limit, offset, _iso_z(latest_c) if latest_c else '')
    resp = make_response(jsonify(build_list_payload(rows, total, limit, offset)))
    return _set_validators(resp, etag, latest_c), etag

def make_cached_item_response(body: dict, latest_ts: Optional[datetime] = None):
    latest_c = canonicalize_timestamp(latest_ts) if isinstance(latest_ts, datetime) else None
    etag = compute_etag([body.get('id')], 1, 1, 0, _iso_z(latest_c) if latest_c else '')
    resp = make_response(jsonify(body))
    return _set_validators(resp, etag, latest_c), etag

def _parse_if_modified_since(header_val: str) -> Optional[datetime]:
    if not header_val:
        return None
    # Try ISO 8601 first
    try:
        dt = datetime.fromisoformat(header_val.replace('Z', '+00:00'))
    except ValueError:
        # Then HTTP-date (RFC 1123)
        try:
            dt = parsedate_to_datetime(header_val)
        except (TypeError, ValueError):
            return None
    if dt and dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def handle_conditional(etag_value: str, latest_ts: Optional[datetime]):
    """Evaluate conditional request headers.

    Precedence: If-None-Match over If-Modified-Since (per RFC 9110 semantics).
    Returns a 304 response object if conditions satisfied, else None.
    """
    latest_c = canonicalize_timestamp(latest_ts) if isinstance(latest_ts, datetime) else None
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag_value:
        return _set_validators(make_response('', 304), etag_value, latest_c)
    # Only evaluate If-Modified-Since if If-None-Match was not a match / absent
    ims_dt = _parse_if_modified_since(request.headers.get('If-Modified-Since'))
    if ims_dt and latest_c and latest_c <= canonicalize_timestamp(ims_dt) + TIMESTAMP_TOLERANCE:
        return _set_validators(make_response('', 304), etag_value, latest_c)
    return None
