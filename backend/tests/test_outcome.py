from fieldjobs.services.outcome import Outcome, OK, IGNORED, FATAL, best_effort, authoritative
import logging
import pytest


def test_best_effort_success_wraps_value():
    out = best_effort('add', lambda a, b: a + b, 2, 3)
    assert out.kind == OK
    assert out.succeeded
    assert out.value == 5


def test_best_effort_failure_is_logged_and_ignored(caplog):
    def boom():
        raise RuntimeError('nope')
    with caplog.at_level(logging.ERROR, logger='fieldjobs.services.outcome'):
        out = best_effort('Exploding step', boom)
    assert out.kind == IGNORED
    assert not out.succeeded
    assert not out.is_fatal
    assert isinstance(out.error, RuntimeError)
    assert 'Exploding step failed' in caplog.text
    # ignored outcomes never raise
    assert out.raise_if_fatal() is out


def test_authoritative_failure_reraises_on_demand():
    def boom():
        raise KeyError('missing')
    out = authoritative(boom)
    assert out.kind == FATAL
    with pytest.raises(KeyError):
        out.raise_if_fatal()


def test_outcome_is_immutable():
    out = Outcome.ok(1)
    with pytest.raises(Exception):
        out.kind = FATAL
