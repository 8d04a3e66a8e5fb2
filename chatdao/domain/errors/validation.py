"""Validation errors for governance input.

Raised before any state is touched; a validation error always means the
request itself is malformed and resending it unchanged will fail again.
"""

from __future__ import annotations

from chatdao.domain.errors.base import ValidationError


class InvalidNameError(ValidationError):
    """Raised when a required name or title is empty or whitespace only."""

    ERROR_CODE = "INVALID_NAME"

    def __init__(self, field_name: str = "name") -> None:
        self.field_name = field_name
        super().__init__(f"{field_name} must not be empty", field_name=field_name)


class FieldTooLongError(ValidationError):
    """Raised when a text field exceeds its storage limit.

    Attributes:
        field_name: Name of the offending field.
        length: Actual length in characters.
        limit: Maximum permitted length.
    """

    ERROR_CODE = "FIELD_TOO_LONG"

    def __init__(self, field_name: str, length: int, limit: int) -> None:
        self.field_name = field_name
        self.length = length
        self.limit = limit
        super().__init__(
            f"{field_name} too long ({length} characters, max {limit})",
            field_name=field_name,
            length=length,
            limit=limit,
        )


class InvalidDurationError(ValidationError):
    """Raised when a voting duration is not positive or exceeds the maximum."""

    ERROR_CODE = "INVALID_DURATION"

    def __init__(self, duration_seconds: float, reason: str) -> None:
        super().__init__(
            f"Invalid voting duration {duration_seconds}s: {reason}",
            duration_seconds=duration_seconds,
        )


class InvalidChoicesError(ValidationError):
    """Raised when a proposal's choice list is unusable.

    Fewer than two choices, more than the configured maximum, or any
    choice label that is empty.
    """

    ERROR_CODE = "INVALID_CHOICES"

    def __init__(self, reason: str, choice_count: int) -> None:
        super().__init__(
            f"Invalid choices: {reason}",
            choice_count=choice_count,
        )


class InvalidChoiceError(ValidationError):
    """Raised when a ballot names a choice index outside the proposal's range."""

    ERROR_CODE = "INVALID_CHOICE"

    def __init__(self, choice_index: int, choice_count: int) -> None:
        self.choice_index = choice_index
        self.choice_count = choice_count
        super().__init__(
            f"Choice {choice_index} is out of range (proposal has "
            f"{choice_count} choices)",
            choice_index=choice_index,
            choice_count=choice_count,
        )


class InvalidExternalIdError(ValidationError):
    """Raised when an external user identifier is empty."""

    ERROR_CODE = "INVALID_EXTERNAL_ID"

    def __init__(self, external_id: str) -> None:
        super().__init__(
            "External user identifier must not be empty",
            external_id=external_id,
        )


class ProposalGroupMismatchError(ValidationError):
    """Raised when a proposal is addressed through a group that does not own it."""

    ERROR_CODE = "PROPOSAL_GROUP_MISMATCH"

    def __init__(self, proposal_id: str, group_id: str) -> None:
        super().__init__(
            f"Proposal {proposal_id} does not belong to group {group_id}",
            proposal_id=proposal_id,
            group_id=group_id,
        )
