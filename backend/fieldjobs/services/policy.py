from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Set
from sqlalchemy import false
from flask_jwt_extended import get_jwt, get_jwt_identity
from fieldjobs.errors import Forbidden
from fieldjobs.models.authz import AGENCY_ROLES, ROLE_ENGINEER
from fieldjobs.models.job import Job


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as resolved from token claims."""
    user_id: int
    role: str
    agency_id: Optional[int] = None

    @property
    def is_engineer(self) -> bool:
        return self.role == ROLE_ENGINEER

    @property
    def is_agency_user(self) -> bool:
        return self.role in AGENCY_ROLES


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def has_permissions(*codes: str) -> bool:
    perms = current_permissions()
    return all(c in perms for c in codes)


def current_actor() -> Actor:
    claims = get_jwt()
    return Actor(user_id=int(get_jwt_identity()), role=claims.get('role', ''), agency_id=claims.get('agency_id'))


def can_access_job(actor: Actor, job: Job) -> bool:
    if actor.is_agency_user:
        return actor.agency_id is not None and job.agency_id == actor.agency_id
    if actor.is_engineer:
        return job.assigned_engineer_id == actor.user_id
    return False


def assert_job_access(actor: Actor, job: Job):
    if not can_access_job(actor, job):
        raise Forbidden('You do not have access to this job')


def assert_agency_owns_job(actor: Actor, job: Job):
    """Stricter variant for agency-only operations such as dispatching an engineer."""
    if not actor.is_agency_user or job.agency_id != actor.agency_id:
        raise Forbidden('You do not have access to this job')


def scope_jobs_query(query, actor: Actor):
    """Restrict a Job query to what the actor may see."""
    if actor.is_engineer:
        return query.filter(Job.assigned_engineer_id == actor.user_id)
    if actor.is_agency_user and actor.agency_id is not None:
        return query.filter(Job.agency_id == actor.agency_id)
    return query.filter(false())
