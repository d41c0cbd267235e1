from fieldjobs.models.job import Job
from tests.test_lifecycle_helpers import headers_for, patch_status, assert_transition, assert_error, exercise_full_lifecycle
from tests.test_utils_seed import seed_agency_team, create_job, reload_job, history_rows

BOGUS_ID = '22222222-2222-2222-2222-222222222222'


def test_engineer_walks_job_to_completion(client, app_instance, broadcaster):
    agency, users = seed_agency_team('Api')
    eng = users['engineer']
    job = create_job(agency.id)
    exercise_full_lifecycle(client, job.id, headers_for(app_instance, users['admin']),
                            headers_for(app_instance, eng), eng.id)
    fresh = reload_job(job.id)
    assert fresh.status == 'completed'
    assert fresh.assigned_engineer_id == eng.id
    for column in ('assigned_at', 'accepted_at', 'started_at', 'completed_at'):
        assert getattr(fresh, column) is not None
    assert [h.status for h in history_rows(job.id)] == ['assigned', 'accepted', 'travelling', 'onsite', 'completed']
    engineer_events = [e for e, _ in broadcaster.on_channel(f'engineer:{eng.id}')]
    assert engineer_events == ['start_location_tracking', 'stop_location_tracking']
    assert len(broadcaster.on_channel(f'job:{job.id}')) == 5


def test_response_shape(client, app_instance):
    agency, users = seed_agency_team('Api')
    job = create_job(agency.id, status='onsite', engineer_id=users['engineer'].id)
    resp = assert_transition(client, job.id, headers_for(app_instance, users['engineer']), 'completed',
                             location={'lat': 51.5, 'lng': -0.12}, notes='Replaced compressor')
    body = resp.get_json()
    assert set(body) == {'job', 'status_history', 'metadata'}
    assert body['job']['completed_at'].endswith('Z')
    assert body['metadata']['timestamp_field_set'] == 'completed_at'
    assert body['metadata']['timestamp_recorded'] == body['job']['completed_at']
    assert body['metadata']['location_recorded'] is True
    latest = body['status_history'][0]
    assert latest['status'] == 'completed'
    assert latest['notes'] == 'Replaced compressor'
    assert latest['location'] == {'type': 'Point', 'coordinates': [-0.12, 51.5]}


def test_invalid_transition_response(client, app_instance):
    agency, users = seed_agency_team('Api')
    job = create_job(agency.id)
    resp = patch_status(client, job.id, headers_for(app_instance, users['admin']), 'onsite')
    err = assert_error(resp, 400, 'INVALID_TRANSITION')
    assert err['detail'] == "Invalid status transition from 'pending' to 'onsite'. Allowed transitions: assigned, cancelled"
    assert err['details'] == {'allowed_transitions': ['assigned', 'cancelled']}
    assert reload_job(job.id).status == 'pending'


def test_same_status_is_invalid_transition(client, app_instance):
    agency, users = seed_agency_team('Api')
    job = create_job(agency.id)
    resp = patch_status(client, job.id, headers_for(app_instance, users['admin']), 'pending')
    assert_error(resp, 400, 'INVALID_TRANSITION')


def test_validation_errors(client, app_instance):
    agency, users = seed_agency_team('Api')
    job = create_job(agency.id)
    h = headers_for(app_instance, users['admin'])
    missing = client.patch(f'/jobs/{job.id}/status', json={}, headers=h)
    err = assert_error(missing, 400, 'VALIDATION_ERROR')
    assert err['details'] == {'status': ['Status is required']}
    unknown = patch_status(client, job.id, h, 'done')
    assert assert_error(unknown, 400, 'VALIDATION_ERROR')['detail'] == 'Invalid status value'
    bad_loc = patch_status(client, job.id, h, 'cancelled', location={'lat': 100, 'lng': 0})
    assert assert_error(bad_loc, 400, 'VALIDATION_ERROR')['detail'] == 'Invalid location coordinates'
    not_object = client.patch(f'/jobs/{job.id}/status', json=['cancelled'], headers=h)
    assert_error(not_object, 400, 'VALIDATION_ERROR')
    assert reload_job(job.id).status == 'pending'


def test_invalid_and_unknown_ids(client, app_instance):
    _, users = seed_agency_team('Api')
    h = headers_for(app_instance, users['admin'])
    assert_error(patch_status(client, 'not-a-uuid', h, 'cancelled'), 400, 'INVALID_ID')
    assert_error(patch_status(client, BOGUS_ID, h, 'cancelled'), 404, 'NOT_FOUND')


def test_authentication_required(client):
    resp = client.patch(f'/jobs/{BOGUS_ID}/status', json={'status': 'cancelled'})
    assert_error(resp, 401, 'UNAUTHORIZED')
    bad = client.patch(f'/jobs/{BOGUS_ID}/status', json={'status': 'cancelled'}, headers={'Authorization': 'Bearer nope'})
    assert_error(bad, 401, 'UNAUTHORIZED')


def test_access_rules(client, app_instance):
    agency, users = seed_agency_team('Api')
    _, rivals = seed_agency_team('Api Rival')
    job = create_job(agency.id, status='assigned', engineer_id=users['engineer'].id)
    # viewer lacks JOB.WRITE
    assert_error(patch_status(client, job.id, headers_for(app_instance, users['viewer']), 'cancelled'), 403, 'FORBIDDEN')
    # other agency
    assert_error(patch_status(client, job.id, headers_for(app_instance, rivals['manager']), 'cancelled'), 403, 'FORBIDDEN')
    # engineer not assigned to the job
    assert_error(patch_status(client, job.id, headers_for(app_instance, rivals['engineer']), 'accepted'), 403, 'FORBIDDEN')
    assert reload_job(job.id).status == 'assigned'
    # manager of the owning agency may cancel
    assert_transition(client, job.id, headers_for(app_instance, users['manager']), Job.STATUS_CANCELLED)


def test_history_write_failure_is_not_an_error(client, app_instance, monkeypatch):
    from fieldjobs.services.datastore import JobStore
    agency, users = seed_agency_team('Api')
    job = create_job(agency.id)

    def refuse(self, entry):
        raise RuntimeError('history table unavailable')
    monkeypatch.setattr(JobStore, 'append_history', refuse)
    resp = assert_transition(client, job.id, headers_for(app_instance, users['admin']), 'cancelled', location={'lat': 0, 'lng': 0})
    meta = resp.get_json()['metadata']
    assert meta['history_recorded'] is False
    assert meta['location_recorded'] is False
    assert reload_job(job.id).status == 'cancelled'
