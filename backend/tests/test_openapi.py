def test_openapi_document(client):
    resp = client.get('/openapi.json')
    assert resp.status_code == 200
    spec = resp.get_json()
    assert spec['info']['title'] == 'Field Jobs API'
    for path in ('/auth/login', '/auth/me', '/jobs', '/jobs/{job_id}', '/jobs/{job_id}/history',
                 '/jobs/{job_id}/status', '/jobs/{job_id}/assign'):
        assert path in spec['paths'], path
    patch = spec['paths']['/jobs/{job_id}/status']['patch']
    assert patch['x-required-permissions'] == ['JOB.WRITE']
    assert set(patch['responses']) >= {'200', '400', '401', '403', '404', '409'}
    assert patch['operationId'] == 'auto_patch_jobs_job_id_status'


def test_openapi_publishes_lifecycle_tables(client):
    schemas = client.get('/openapi.json').get_json()['components']['schemas']
    job = schemas['Job']
    assert job['properties']['status']['enum'] == ['pending', 'assigned', 'accepted', 'travelling', 'onsite', 'completed', 'cancelled']
    assert job['x-transitions']['onsite'] == ['completed', 'cancelled']
    assert job['x-timestamp-fields']['onsite'] == 'started_at'
    assert 'StatusUpdateResult' in schemas


def test_openapi_is_deterministic(client):
    assert client.get('/openapi.json').data == client.get('/openapi.json').data


def test_docs_page(client):
    resp = client.get('/docs')
    assert resp.status_code == 200
    assert b'/openapi.json' in resp.data
