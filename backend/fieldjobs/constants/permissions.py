"""Central enum-like definitions to avoid typos in permission/service strings.
Extend cautiously; never rename codes silently. Tokens carry the expanded codes
for the user's role, so a change here only takes effect on the next login.
"""
from __future__ import annotations
from typing import List, Dict

SERVICES = ['AGENCY', 'ENGINEER', 'JOB', 'PAYMENT', 'USER', 'ANALYTICS', 'SETTINGS']

SERVICE_ACTIONS = {
    'AGENCY': ['READ', 'WRITE', 'DELETE'],
    'ENGINEER': ['READ', 'WRITE', 'DELETE'],
    'JOB': ['READ', 'WRITE', 'ASSIGN', 'DELETE'],
    'PAYMENT': ['READ', 'WRITE'],
    'USER': ['READ', 'WRITE', 'DELETE'],
    'ANALYTICS': ['READ'],
    'SETTINGS': ['READ', 'WRITE'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    'admin': ['*'],
    # manager runs day-to-day operations but cannot dispatch engineers
    'manager': [
        'AGENCY.READ',
        'ENGINEER.READ', 'ENGINEER.WRITE',
        'JOB.READ', 'JOB.WRITE',
        'PAYMENT.READ',
        'ANALYTICS.READ',
        'SETTINGS.READ',
    ],
    'viewer': ['AGENCY.READ', 'ENGINEER.READ', 'JOB.READ', 'PAYMENT.READ', 'ANALYTICS.READ'],
    'engineer': ['JOB.READ', 'JOB.WRITE'],
}


def permissions_for_role(role: str) -> List[str]:
    """Expand a role preset into concrete permission codes (sorted). Unknown roles get nothing."""
    codes = ROLE_PRESETS.get(role, [])
    if '*' in codes:
        return sorted(ALL_PERMISSION_CODES)
    return sorted(c for c in codes if c in ALL_PERMISSION_CODES)
