"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ThirdsError(Exception):
    """Base exception for thirds."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ThirdsError):
    """Resource not found."""

    pass


class ValidationError(ThirdsError):
    """Validation error."""

    pass


class ParseError(ValidationError):
    """Malformed time-of-day text."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message, details={"value": value})
        self.value = value


class InvalidRangeError(ValidationError):
    """Range end is not after its start where wrap is disallowed."""

    pass


class IncompleteScheduleError(ValidationError):
    """A day schedule does not carry exactly one block per energy label."""

    pass


class CapacityExceededError(ValidationError):
    """Sum of task durations exceeds the owning block's duration."""

    def __init__(self, block: str, excess_minutes: int, message: Optional[str] = None):
        super().__init__(
            message or f"Tasks in the {block} block exceed its duration by {excess_minutes} minutes",
            details={"block": block, "excess_minutes": excess_minutes},
        )
        self.block = block
        self.excess_minutes = excess_minutes


class LLMError(ThirdsError):
    """LLM-related error."""

    pass


class AuthenticationError(ThirdsError):
    """Authentication failed."""

    pass


class AuthorizationError(ThirdsError):
    """Authorization failed."""

    pass


class ForbiddenError(AuthorizationError):
    """Forbidden operation (authorization denied)."""

    pass


class InfrastructureError(ThirdsError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class BusinessLogicError(ThirdsError):
    """Business logic constraint violation."""

    pass


class UnresolvableOverlapError(BusinessLogicError):
    """Blocks cannot be made non-overlapping without breaking an invariant."""

    pass


class InvalidStateTransitionError(BusinessLogicError):
    """A state machine was driven through a transition it does not allow."""

    pass
