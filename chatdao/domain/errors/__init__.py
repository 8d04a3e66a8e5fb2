"""Domain errors for chatdao.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from ChatDaoError.
"""

from chatdao.domain.errors.authorization import NotAdminError, NotMemberError
from chatdao.domain.errors.base import (
    AuthorizationError,
    DependencyUnavailableError,
    GovernanceError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from chatdao.domain.errors.configuration import (
    ConfigurationError,
    MissingSecretError,
    WeakSecretError,
)
from chatdao.domain.errors.decode import RecordDecodeError
from chatdao.domain.errors.dependency import BalanceUnavailableError
from chatdao.domain.errors.not_found import (
    AccountNotFoundError,
    GroupNotFoundError,
    ProposalNotFoundError,
    RegistryNotInitializedError,
)
from chatdao.domain.errors.state_conflict import (
    AlreadyAdminError,
    AlreadyInitializedError,
    AlreadyMemberError,
    AlreadyVotedError,
    CannotRemoveCreatorError,
    CannotRemoveLastAdminError,
    ChoiceWeightOverflowError,
    DuplicateGroupError,
    DuplicateProposalError,
    GroupFullError,
    NoVotingPowerError,
    ProposalClosedError,
    RegistryFullError,
)
from chatdao.domain.errors.validation import (
    FieldTooLongError,
    InvalidChoiceError,
    InvalidChoicesError,
    InvalidDurationError,
    InvalidExternalIdError,
    InvalidNameError,
    ProposalGroupMismatchError,
)

__all__: list[str] = [
    # Base categories
    "GovernanceError",
    "ValidationError",
    "AuthorizationError",
    "StateConflictError",
    "NotFoundError",
    "DependencyUnavailableError",
    # Validation
    "InvalidNameError",
    "FieldTooLongError",
    "InvalidDurationError",
    "InvalidChoicesError",
    "InvalidChoiceError",
    "InvalidExternalIdError",
    "ProposalGroupMismatchError",
    # Authorization
    "NotAdminError",
    "NotMemberError",
    # State conflict
    "AlreadyInitializedError",
    "AlreadyMemberError",
    "AlreadyAdminError",
    "AlreadyVotedError",
    "ProposalClosedError",
    "CannotRemoveLastAdminError",
    "CannotRemoveCreatorError",
    "NoVotingPowerError",
    "ChoiceWeightOverflowError",
    "RegistryFullError",
    "GroupFullError",
    "DuplicateGroupError",
    "DuplicateProposalError",
    # Not found
    "RegistryNotInitializedError",
    "GroupNotFoundError",
    "ProposalNotFoundError",
    "AccountNotFoundError",
    # Dependencies
    "BalanceUnavailableError",
    # Decode
    "RecordDecodeError",
    # Configuration
    "ConfigurationError",
    "MissingSecretError",
    "WeakSecretError",
]
