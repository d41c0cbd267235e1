from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Usage:
    from fieldjobs.utils.fsm import TransitionValidator
    FSM = TransitionValidator({
        'pending': {'assigned', 'cancelled'},
        'assigned': {'accepted', 'cancelled'},
        'cancelled': set(),
    }, order=('pending', 'assigned', 'accepted', 'cancelled'))
    FSM.validate(current_status, target_status)           # -> TransitionCheck
    FSM.assert_can_transition(current_status, target_status)

The graph is frozen on construction and never mutated, so one validator
instance can be shared by every request. A status is never reachable from
itself unless the graph says so explicitly.
"""
from types import MappingProxyType
from typing import Iterable, List, Mapping, NamedTuple, Optional, Sequence

from fieldjobs.errors import InvalidTransition


class TransitionCheck(NamedTuple):
    valid: bool
    error: Optional[str] = None


class TransitionValidator:
    def __init__(self, graph: Mapping[str, Iterable[str]], field_name: str = 'status', order: Optional[Sequence[str]] = None):
        self.graph = MappingProxyType({src: frozenset(dst) for src, dst in graph.items()})
        self.field_name = field_name
        # ordering used when listing allowed targets in messages
        self.order = tuple(order) if order else tuple(self.graph.keys())

    def allowed(self, current: str) -> List[str]:
        targets = self.graph.get(current, frozenset())
        ranked = [s for s in self.order if s in targets]
        return ranked + sorted(targets.difference(ranked))

    def is_terminal(self, status: str) -> bool:
        return not self.graph.get(status)

    def validate(self, current: str, target: str) -> TransitionCheck:
        allowed = self.allowed(current)
        if target not in allowed:
            return TransitionCheck(
                False,
                f"Invalid {self.field_name} transition from '{current}' to '{target}'. "
                f"Allowed transitions: {', '.join(allowed)}",
            )
        return TransitionCheck(True)

    def assert_can_transition(self, current: str, target: str):
        check = self.validate(current, target)
        if not check.valid:
            raise InvalidTransition(check.error, current, target, self.allowed(current))
        return True


__all__ = ['TransitionValidator', 'TransitionCheck']
