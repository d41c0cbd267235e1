from __future__ import annotations
"""Realtime broadcast channels.

A broadcaster is built once by ``create_app`` (see ``init_broadcaster``) and
handed to the dispatcher; nothing reaches for a module level instance.

Channel naming:
  job:<job_id>             status updates for subscribers of one job
  engineer:<engineer_id>   control signals for one engineer's device
"""
import atexit
import logging
import threading
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

EVENT_STATUS_UPDATE = 'status_update'
EVENT_START_TRACKING = 'start_location_tracking'
EVENT_STOP_TRACKING = 'stop_location_tracking'


def job_channel(job_id: str) -> str:
    return f'job:{job_id}'


def engineer_channel(engineer_id) -> str:
    return f'engineer:{engineer_id}'


class Broadcaster:
    """Fire-and-forget publisher. No delivery guarantee is assumed by callers."""

    def publish(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class LoggingBroadcaster(Broadcaster):
    """Default when no realtime backend is configured: events only reach the log."""

    def publish(self, channel, event, payload):
        logger.info('broadcast %s %s %s', channel, event, payload)


class InMemoryBroadcaster(Broadcaster):
    """Keeps every published event; used for local development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def publish(self, channel, event, payload):
        with self._lock:
            self.events.append((channel, event, dict(payload)))

    def on_channel(self, channel: str):
        with self._lock:
            return [(e, p) for c, e, p in self.events if c == channel]

    def clear(self):
        with self._lock:
            self.events.clear()

    close = clear


BACKENDS = {
    'log': LoggingBroadcaster,
    'memory': InMemoryBroadcaster,
}


def build_broadcaster(name: str) -> Broadcaster:
    try:
        return BACKENDS[(name or 'log').lower()]()
    except KeyError:
        raise ValueError(f"Unknown BROADCAST_BACKEND '{name}' (expected one of: {', '.join(sorted(BACKENDS))})")


def init_broadcaster(app) -> Broadcaster:
    """Build the configured broadcaster, store it on ``app.extensions`` and close it at process exit."""
    broadcaster = build_broadcaster(app.config.get('BROADCAST_BACKEND', 'log'))
    app.extensions['broadcaster'] = broadcaster
    atexit.register(broadcaster.close)
    return broadcaster


__all__ = [
    'Broadcaster', 'LoggingBroadcaster', 'InMemoryBroadcaster', 'build_broadcaster', 'init_broadcaster',
    'job_channel', 'engineer_channel',
    'EVENT_STATUS_UPDATE', 'EVENT_START_TRACKING', 'EVENT_STOP_TRACKING',
]
