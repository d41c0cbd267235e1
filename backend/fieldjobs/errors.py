from __future__ import annotations
"""Error taxonomy shared by the status engine and the HTTP layer.

Every failure a caller can observe is one of these classes. Each carries a
stable machine readable ``code`` plus the HTTP status the error handler in
``fieldjobs.create_app`` renders it with, so route handlers simply raise and
never build error payloads themselves.
"""
from typing import Dict, List, Optional


class ApiError(Exception):
    code = 'INTERNAL_ERROR'
    status = 500
    title = 'Internal Server Error'

    def __init__(self, message: str, details: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, object]:
        body: Dict[str, object] = {
            'status': self.status,
            'code': self.code,
            'title': self.title,
            'detail': self.message,
        }
        if self.details:
            body['details'] = self.details
        return body


class ValidationFailed(ApiError):
    code = 'VALIDATION_ERROR'
    status = 400
    title = 'Bad Request'


class InvalidId(ApiError):
    code = 'INVALID_ID'
    status = 400
    title = 'Bad Request'


class InvalidTransition(ApiError):
    code = 'INVALID_TRANSITION'
    status = 400
    title = 'Bad Request'

    def __init__(self, message: str, current: str, requested: str, allowed: List[str]):
        super().__init__(message, details={'allowed_transitions': list(allowed)})
        self.current = current
        self.requested = requested
        self.allowed = list(allowed)


class Unauthorized(ApiError):
    code = 'UNAUTHORIZED'
    status = 401
    title = 'Unauthorized'


class Forbidden(ApiError):
    code = 'FORBIDDEN'
    status = 403
    title = 'Forbidden'


class NotFound(ApiError):
    code = 'NOT_FOUND'
    status = 404
    title = 'Not Found'


class Conflict(ApiError):
    code = 'CONFLICT'
    status = 409
    title = 'Conflict'


class DatastoreError(ApiError):
    code = 'DATABASE_ERROR'
    status = 500
    title = 'Internal Server Error'


__all__ = [
    'ApiError', 'ValidationFailed', 'InvalidId', 'InvalidTransition', 'Unauthorized',
    'Forbidden', 'NotFound', 'Conflict', 'DatastoreError',
]
