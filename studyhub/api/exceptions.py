"""
Custom exceptions for API layer.
Separates business exceptions from HTTP exceptions.
"""
from fastapi import HTTPException, status

from ..domain.entities import InvalidQuestionError


class NotFoundError(Exception):
    """Raised when a user, subject, file or quiz does not exist (or is deleted)."""
    pass


class ForbiddenError(Exception):
    """Raised when the caller does not own the resource."""
    pass


class ValidationFailedError(Exception):
    """Raised when request data is rejected before anything is stored."""
    pass


class ConflictError(Exception):
    """Raised when a unique field (username, email) is already taken."""
    pass


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, ForbiddenError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    elif isinstance(e, (ValidationFailedError, InvalidQuestionError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


BUSINESS_EXCEPTIONS = (NotFoundError, ForbiddenError, ValidationFailedError, ConflictError, InvalidQuestionError)
