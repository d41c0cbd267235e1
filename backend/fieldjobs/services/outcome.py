from __future__ import annotations
"""Result type separating authoritative failures from advisory ones.

Only the job write may end a status update with an error. History recording
and notification publishing are advisory: they report ``IGNORED`` and the
request carries on.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

OK = 'ok'
IGNORED = 'ignored'
FATAL = 'fatal'


@dataclass(frozen=True)
class Outcome:
    kind: str
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: Any = None) -> 'Outcome':
        return cls(OK, value=value)

    @classmethod
    def ignored(cls, error: BaseException) -> 'Outcome':
        return cls(IGNORED, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> 'Outcome':
        return cls(FATAL, error=error)

    @property
    def succeeded(self) -> bool:
        return self.kind == OK

    @property
    def is_fatal(self) -> bool:
        return self.kind == FATAL

    def raise_if_fatal(self):
        if self.is_fatal:
            raise self.error
        return self


def best_effort(label: str, fn: Callable[..., Any], *args, **kwargs) -> Outcome:
    """Run ``fn`` and downgrade any exception to a logged ``IGNORED`` outcome."""
    try:
        return Outcome.ok(fn(*args, **kwargs))
    except Exception as exc:
        logger.exception('%s failed; continuing', label)
        return Outcome.ignored(exc)


def authoritative(fn: Callable[..., Any], *args, **kwargs) -> Outcome:
    """Run ``fn``; any exception becomes a ``FATAL`` outcome for the caller to raise."""
    try:
        return Outcome.ok(fn(*args, **kwargs))
    except Exception as exc:
        return Outcome.fatal(exc)


__all__ = ['Outcome', 'OK', 'IGNORED', 'FATAL', 'best_effort', 'authoritative']
