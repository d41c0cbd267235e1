from fieldjobs.services.transitions import TIMESTAMP_FIELDS, timestamp_field_for
import pytest


@pytest.mark.parametrize('status,column', [
    ('assigned', 'assigned_at'),
    ('accepted', 'accepted_at'),
    ('onsite', 'started_at'),
    ('completed', 'completed_at'),
])
def test_status_with_timestamp_column(status, column):
    assert timestamp_field_for(status) == column


@pytest.mark.parametrize('status', ['pending', 'travelling', 'cancelled', 'bogus'])
def test_status_without_timestamp_column(status):
    assert timestamp_field_for(status) is None


def test_timestamp_columns_exist_on_job():
    from fieldjobs.models.job import Job
    for column in TIMESTAMP_FIELDS.values():
        assert column in Job.__table__.columns
