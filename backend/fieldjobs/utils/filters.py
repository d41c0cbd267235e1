from __future__ import annotations
from typing import Any, Dict
from fieldjobs.errors import ValidationFailed

def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]):
    """Generic filter builder.

    specs: { param_name: { 'op': callable(query, value)->query, 'coerce': type/func, 'choices': iterable(optional) } }
    Empty or missing params are skipped.
    """
    for name, meta in specs.items():
        val = params.get(name)
        if val is None or val == '':
            continue
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                raise ValidationFailed(f'{name} invalid', {name: ['Could not parse value']})
        choices = meta.get('choices')
        if choices is not None and val not in choices:
            raise ValidationFailed(f'{name} invalid', {name: [f"Must be one of: {', '.join(choices)}"]})
        query = meta['op'](query, val)
    return query
