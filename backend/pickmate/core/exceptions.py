"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API reports it with; the
handler registered in ``pickmate.main`` turns them into ``{"detail": ...}``
responses, the same shape ``HTTPException`` produces.
"""
from fastapi import status


class PickmateError(Exception):
    """Base class for all business-rule failures."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PickmateError):
    """Malformed input: bad invite code, missing title, stars out of range."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(PickmateError):
    """Referenced couple, decision, option or voter does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(PickmateError):
    """Caller does not own the referenced resource."""
    status_code = status.HTTP_403_FORBIDDEN


class FullError(PickmateError):
    """Couple already has two members."""
    status_code = status.HTTP_409_CONFLICT


class AlreadyMemberError(PickmateError):
    """User is already a member of the couple."""
    status_code = status.HTTP_409_CONFLICT
