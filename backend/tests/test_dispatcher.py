from datetime import datetime, timezone
from types import SimpleNamespace
from fieldjobs.services.broadcast import InMemoryBroadcaster, build_broadcaster, LoggingBroadcaster
from fieldjobs.services.dispatch import SideEffectDispatcher
import pytest

TS = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def _job(engineer_id=7):
    return SimpleNamespace(id='job-1', job_number='JOB-0001', assigned_engineer_id=engineer_id)


class FlakyBroadcaster(InMemoryBroadcaster):
    """Fails every publish on the listed channels."""
    def __init__(self, broken_channels):
        super().__init__()
        self.broken = set(broken_channels)

    def publish(self, channel, event, payload):
        if channel in self.broken:
            raise ConnectionError(f'{channel} unreachable')
        super().publish(channel, event, payload)


def test_status_update_payload():
    b = InMemoryBroadcaster()
    report = SideEffectDispatcher(b).dispatch(_job(), 'accepted', 7, TS, (1.5, 2.5))
    assert report.broadcast_sent
    assert b.on_channel('job:job-1') == [('status_update', {
        'job_id': 'job-1',
        'status': 'accepted',
        'timestamp': '2025-03-01T09:30:00Z',
        'location': {'lat': 1.5, 'lng': 2.5},
        'changed_by': 7,
    })]
    # no control signal for accepted
    assert b.on_channel('engineer:7') == []


def test_travelling_starts_tracking():
    b = InMemoryBroadcaster()
    SideEffectDispatcher(b).dispatch(_job(), 'travelling', 7, TS)
    assert b.on_channel('engineer:7') == [('start_location_tracking', {
        'job_id': 'job-1', 'job_number': 'JOB-0001', 'timestamp': '2025-03-01T09:30:00Z',
    })]


@pytest.mark.parametrize('status', ['completed', 'cancelled'])
def test_terminal_status_stops_tracking(status):
    b = InMemoryBroadcaster()
    SideEffectDispatcher(b).dispatch(_job(), status, 7, TS)
    assert b.on_channel('engineer:7') == [('stop_location_tracking', {
        'job_id': 'job-1', 'timestamp': '2025-03-01T09:30:00Z',
    })]


def test_no_engineer_means_no_control_signals():
    b = InMemoryBroadcaster()
    SideEffectDispatcher(b).dispatch(_job(engineer_id=None), 'cancelled', 3, TS)
    assert [c for c, _, _ in b.events] == ['job:job-1']


def test_failed_channel_does_not_block_other():
    b = FlakyBroadcaster(['job:job-1'])
    report = SideEffectDispatcher(b).dispatch(_job(), 'travelling', 7, TS)
    assert not report.broadcast_sent
    assert report.failed == ['job:job-1/status_update']
    assert b.on_channel('engineer:7')[0][0] == 'start_location_tracking'


def test_failed_control_signal_keeps_broadcast_flag():
    b = FlakyBroadcaster(['engineer:7'])
    report = SideEffectDispatcher(b).dispatch(_job(), 'completed', 7, TS)
    assert report.broadcast_sent
    assert report.failed == ['engineer:7/stop_location_tracking']


def test_build_broadcaster_backends():
    assert isinstance(build_broadcaster('log'), LoggingBroadcaster)
    assert isinstance(build_broadcaster('MEMORY'), InMemoryBroadcaster)
    with pytest.raises(ValueError):
        build_broadcaster('carrier-pigeon')
