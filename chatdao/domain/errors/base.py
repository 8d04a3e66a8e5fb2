"""Governance error base classes.

Every rejection raised by the governance core derives from GovernanceError,
which carries a stable machine-readable code and an error category. The
chat front-end renders `to_dict()`; it never has to parse message text.

Categories:
- validation: malformed input, never retried
- authorization: caller lacks permission, logged as a security event
- state_conflict: definitive rejection against current state
- not_found: referenced record does not exist
- dependency_unavailable: an external collaborator could not answer
"""

from __future__ import annotations

from typing import Any, ClassVar

from chatdao.domain.exceptions import ChatDaoError


class GovernanceError(ChatDaoError):
    """Base class for all governance rejections.

    Attributes:
        ERROR_CODE: Stable identifier for the rejection kind.
        CATEGORY: Error category (see module docstring).
        message: Human-readable error description.
        details: Structured context for logging and rendering.
    """

    ERROR_CODE: ClassVar[str] = "GOVERNANCE_ERROR"
    CATEGORY: ClassVar[str] = "governance"

    def __init__(self, message: str, **details: Any) -> None:
        """Initialize governance error.

        Args:
            message: Human-readable error message.
            **details: Structured context (ids, limits, indexes).
        """
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def error_code(self) -> str:
        """Stable error code for this rejection."""
        return self.ERROR_CODE

    @property
    def category(self) -> str:
        """Error category for this rejection."""
        return self.CATEGORY

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for rendering.

        Returns:
            Dictionary with code, category, message and details.
        """
        return {
            "error_code": self.ERROR_CODE,
            "category": self.CATEGORY,
            "message": self.message,
            "details": dict(self.details),
        }


class ValidationError(GovernanceError):
    """Input failed shape validation (empty name, bad duration, bad index)."""

    ERROR_CODE = "VALIDATION_ERROR"
    CATEGORY = "validation"


class AuthorizationError(GovernanceError):
    """Caller is not permitted to perform the operation."""

    ERROR_CODE = "AUTHORIZATION_ERROR"
    CATEGORY = "authorization"


class StateConflictError(GovernanceError):
    """Operation conflicts with the current stored state."""

    ERROR_CODE = "STATE_CONFLICT"
    CATEGORY = "state_conflict"


class NotFoundError(GovernanceError):
    """A referenced record does not exist."""

    ERROR_CODE = "NOT_FOUND"
    CATEGORY = "not_found"


class DependencyUnavailableError(GovernanceError):
    """An external collaborator required by the operation is unavailable."""

    ERROR_CODE = "DEPENDENCY_UNAVAILABLE"
    CATEGORY = "dependency_unavailable"
