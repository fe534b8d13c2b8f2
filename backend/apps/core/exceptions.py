"""
Record lifecycle errors and their mapping to API responses.

All three errors are expected, recoverable outcomes for the caller.
Anything else (database or cache failures) propagates untouched.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class RecordError(Exception):
    """Base class for lifecycle outcomes the caller is expected to handle."""


class ValidationError(RecordError):
    """One or more field rules were violated."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(f'{e.field}: {e.message}' for e in self.errors))

    @property
    def fields(self):
        return [error.field for error in self.errors]


class NotFoundError(RecordError):
    """No record with the id exists under the requested visibility."""


class ConflictError(RecordError):
    """The requested transition is illegal from the record's current state."""


def api_exception_handler(exc, context):
    """
    DRF exception handler translating lifecycle errors to HTTP responses.

    - ValidationError -> 400 with the full field/message list
    - NotFoundError -> 404
    - ConflictError -> 409
    """
    if isinstance(exc, ValidationError):
        return Response(
            {'errors': [{'field': e.field, 'message': e.message} for e in exc.errors]},
            status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, NotFoundError):
        return Response({'detail': str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, ConflictError):
        return Response({'detail': str(exc)}, status=status.HTTP_409_CONFLICT)

    return exception_handler(exc, context)
