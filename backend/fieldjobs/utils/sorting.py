from __future__ import annotations
from sqlalchemy import case
from fieldjobs.errors import ValidationFailed


def rank_expression(column, ranks: dict):
    """Order an enum-like column by an explicit rank instead of alphabetically.

    Values missing from ``ranks`` sort after every ranked value.
    """
    return case(ranks, value=column, else_=len(ranks))


def apply_multi_sort(query, sort_expr: str | None, allowed: dict, tie_breaker):
    """Apply multi-field sort to a SQLAlchemy query.
    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: mapping of field key -> column (or column expression).
    tie_breaker: column to append for deterministic ordering.
    """
    if not sort_expr:
        return query.order_by(tie_breaker.asc())
    clauses = []
    for raw in sort_expr.split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        col = allowed.get(key)
        if col is None:
            raise ValidationFailed(f'Invalid sort field {key}', {'sort': [f"Allowed fields: {', '.join(allowed)}"]})
        clauses.append(col.desc() if desc else col.asc())
    clauses.append(tie_breaker.asc())
    return query.order_by(*clauses)
