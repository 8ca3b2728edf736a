"""
Mapping of domain exceptions to HTTP errors.
"""

from fastapi import HTTPException, status

from thirds.core.exceptions import (
    AuthenticationError,
    BusinessLogicError,
    ForbiddenError,
    NotFoundError,
    ThirdsError,
    ValidationError,
)


def to_http_exception(exc: ThirdsError) -> HTTPException:
    """
    Build the HTTPException for a domain error.

    Client errors carry {error, message, ...details} so callers can show the
    violated rule (e.g. excess_minutes for capacity overruns).
    """
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, ForbiddenError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)
    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, (ValidationError, BusinessLogicError)):
        detail = {"error": type(exc).__name__, "message": exc.message}
        if isinstance(exc.details, dict):
            detail.update(exc.details)
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
