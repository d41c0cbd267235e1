from __future__ import annotations
from flask import Blueprint, request, current_app
from sqlalchemy import select
from fieldjobs import get_db, get_broadcaster
from fieldjobs.decorators.auth import require_permissions
from fieldjobs.errors import Conflict, NotFound, ValidationFailed
from fieldjobs.models.authz import User, ROLE_ENGINEER
from fieldjobs.models.job import Job
from fieldjobs.services.datastore import JobStore
from fieldjobs.services.dispatch import SideEffectDispatcher
from fieldjobs.services.history import HistoryRecorder
from fieldjobs.services.lifecycle import JobStatusEngine
from fieldjobs.services.policy import assert_job_access, assert_agency_owns_job, scope_jobs_query
from fieldjobs.utils.filters import apply_filters
from fieldjobs.utils.listing import (
    make_cached_list_response, make_cached_item_response, handle_conditional,
    apply_pagination, read_pagination, latest_of,
)
from fieldjobs.utils.serialize import job_json, history_json
from fieldjobs.utils.sorting import apply_multi_sort, rank_expression
from fieldjobs.utils.validation import validate_uuid

jobs_bp = Blueprint('jobs', __name__)

JOB_FILTERS = {
    'status': {'op': lambda q, v: q.filter(Job.status == v), 'choices': Job.ALL_STATUSES},
    'urgency': {'op': lambda q, v: q.filter(Job.urgency == v), 'choices': Job.ALL_URGENCIES},
    'engineer_id': {'op': lambda q, v: q.filter(Job.assigned_engineer_id == v), 'coerce': int},
}

JOB_SORTS = {
    'job_number': Job.job_number,
    'status': Job.status,
    # emergency first when ascending
    'urgency': rank_expression(Job.urgency, Job.URGENCY_RANK),
    'updated_at': Job.updated_at,
    'id': Job.id,
}


def build_status_engine(session=None) -> JobStatusEngine:
    store = JobStore(session or get_db())
    return JobStatusEngine(
        store,
        HistoryRecorder(store),
        SideEffectDispatcher(get_broadcaster()),
        history_limit=current_app.config['STATUS_HISTORY_LIMIT'],
    )


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    return data


@jobs_bp.get('')
@require_permissions('JOB.READ')
def list_jobs(actor):
    session = get_db()
    q = scope_jobs_query(session.query(Job), actor)
    q = apply_filters(q, JOB_FILTERS, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), JOB_SORTS, Job.id)
    paged_q, total, limit, offset = apply_pagination(q)
    rows = paged_q.all()
    latest_ts = latest_of(j.updated_at for j in rows)
    resp, etag = make_cached_list_response([job_json(j) for j in rows], total, limit, offset, latest_ts)
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    return resp


@jobs_bp.route('/<job_id>', methods=['GET', 'HEAD'])
@require_permissions('JOB.READ')
def get_job(job_id: str, actor):
    job = JobStore(get_db()).read_job(validate_uuid(job_id))
    assert_job_access(actor, job)
    resp, etag = make_cached_item_response(job_json(job), job.updated_at)
    cond = handle_conditional(etag, job.updated_at)
    if cond:
        return cond
    if request.method == 'HEAD':
        resp.set_data(b'')
    return resp


@jobs_bp.get('/<job_id>/history')
@require_permissions('JOB.READ')
def job_history(job_id: str, actor):
    store = JobStore(get_db())
    job = store.read_job(validate_uuid(job_id))
    assert_job_access(actor, job)
    limit, offset = read_pagination()
    rows = store.query_history(job.id, limit, offset)
    total = store.count_history(job.id)
    latest_ts = latest_of(h.created_at for h in rows)
    resp, etag = make_cached_list_response([history_json(h) for h in rows], total, limit, offset, latest_ts)
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    return resp


@jobs_bp.patch('/<job_id>/status')
@require_permissions('JOB.WRITE')
def update_job_status(job_id: str, actor):
    job_id = validate_uuid(job_id)
    data = _json_body()
    result = build_status_engine().update_status(
        job_id,
        data.get('status'),
        actor,
        location=data.get('location'),
        notes=data.get('notes'),
    )
    return result.to_dict()


@jobs_bp.post('/<job_id>/assign')
@require_permissions('JOB.ASSIGN')
def assign_engineer(job_id: str, actor):
    job_id = validate_uuid(job_id)
    data = _json_body()
    engineer_id = data.get('engineer_id')
    if isinstance(engineer_id, bool) or not isinstance(engineer_id, int):
        raise ValidationFailed('Invalid request data', {'engineer_id': ['Engineer ID must be an integer']})
    session = get_db()
    engine = build_status_engine(session)
    job = engine.store.read_job(job_id)
    assert_agency_owns_job(actor, job)
    if job.assigned_engineer_id is not None:
        raise Conflict('Job is already assigned to an engineer', {'job': ['This job has already been assigned']})
    engineer = session.execute(select(User).where(User.id == engineer_id)).scalar_one_or_none()
    if engineer is None or engineer.role != ROLE_ENGINEER:
        raise NotFound('Engineer not found')
    if engineer.agency_id != job.agency_id:
        raise ValidationFailed('Engineer does not belong to this agency', {'engineer_id': ['Engineer must belong to the job agency']})
    if not engineer.is_active:
        raise ValidationFailed('Engineer is not available', {'engineer_id': ['Engineer is inactive']})
    result = engine.update_status(
        job.id,
        Job.STATUS_ASSIGNED,
        actor,
        notes=data.get('notes'),
        extra_fields={'assigned_engineer_id': engineer.id},
    )
    return result.to_dict()
