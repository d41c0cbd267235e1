from fieldjobs.errors import InvalidTransition
from fieldjobs.models.job import Job
from fieldjobs.services.transitions import JOB_FSM, JOB_TRANSITIONS, terminal_statuses
from fieldjobs.utils.fsm import TransitionValidator
import itertools
import pytest

EXPECTED_VALID = {
    ('pending', 'assigned'), ('pending', 'cancelled'),
    ('assigned', 'accepted'), ('assigned', 'cancelled'),
    ('accepted', 'travelling'), ('accepted', 'cancelled'),
    ('travelling', 'onsite'), ('travelling', 'cancelled'),
    ('onsite', 'completed'), ('onsite', 'cancelled'),
}


def test_transition_validator_allows_valid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    assert fsm.assert_can_transition('A', 'B') is True


def test_transition_validator_blocks_invalid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    with pytest.raises(InvalidTransition) as exc:
        fsm.assert_can_transition('A', 'C')
    assert exc.value.allowed == ['B']
    assert exc.value.current == 'A' and exc.value.requested == 'C'


def test_unknown_current_status_has_no_targets():
    fsm = TransitionValidator({'A': {'B'}})
    assert fsm.allowed('Z') == []
    assert fsm.is_terminal('Z')
    check = fsm.validate('Z', 'A')
    assert not check.valid


def test_graph_is_read_only():
    with pytest.raises(TypeError):
        JOB_FSM.graph['pending'] = frozenset({'completed'})


@pytest.mark.parametrize('current,target', list(itertools.product(Job.ALL_STATUSES, repeat=2)))
def test_every_status_pair(current, target):
    check = JOB_FSM.validate(current, target)
    assert check.valid is ((current, target) in EXPECTED_VALID)
    if check.valid:
        assert check.error is None
    else:
        assert check.error.startswith(f"Invalid status transition from '{current}' to '{target}'.")


def test_self_transition_rejected():
    for status in Job.ALL_STATUSES:
        assert not JOB_FSM.validate(status, status).valid


def test_terminal_statuses():
    assert terminal_statuses() == ('completed', 'cancelled')
    assert JOB_TRANSITIONS['completed'] == frozenset()
    check = JOB_FSM.validate('completed', 'pending')
    assert check.error == "Invalid status transition from 'completed' to 'pending'. Allowed transitions: "


def test_error_message_lists_allowed_in_lifecycle_order():
    check = JOB_FSM.validate('pending', 'completed')
    assert check.error == "Invalid status transition from 'pending' to 'completed'. Allowed transitions: assigned, cancelled"


def test_validate_status_helper(client):
    # The OpenAPI document publishes the same transition table
    resp = client.get('/openapi.json')
    body = resp.get_json()
    job_schema = body['components']['schemas']['Job']
    assert job_schema['x-transitions']['pending'] == ['assigned', 'cancelled']
    assert job_schema['x-transitions']['completed'] == []
