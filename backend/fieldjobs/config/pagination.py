DEFAULT_LIMIT = 50
MAX_LIMIT = 200
# Recent status history attached to a status update response
DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100

def normalize_pagination(limit_raw, offset_raw, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT):
    try:
        limit = int(limit_raw) if limit_raw is not None else default_limit
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    limit = max(1, min(limit, max_limit))
    offset = max(0, offset)
    return limit, offset


def normalize_history_limit(raw) -> int:
    """Clamp a configured history window into [1, MAX_HISTORY_LIMIT]."""
    try:
        value = int(raw) if raw is not None else DEFAULT_HISTORY_LIMIT
    except (TypeError, ValueError):
        value = DEFAULT_HISTORY_LIMIT
    return max(1, min(value, MAX_HISTORY_LIMIT))
