"""State conflict errors.

A state conflict is a definitive rejection: the request was well formed
and authorized, but the current state forbids it. These are not transient.
"""

from __future__ import annotations

from datetime import datetime

from chatdao.domain.errors.base import StateConflictError


class AlreadyInitializedError(StateConflictError):
    """Raised when the registry already exists."""

    ERROR_CODE = "ALREADY_INITIALIZED"

    def __init__(self) -> None:
        super().__init__("DAO registry is already initialized")


class AlreadyMemberError(StateConflictError):
    """Raised when adding an identity that is already a group member."""

    ERROR_CODE = "ALREADY_MEMBER"

    def __init__(self, identity: bytes, group_id: str) -> None:
        super().__init__(
            f"Identity {identity.hex()} is already a member of group {group_id}",
            identity=identity.hex(),
            group_id=group_id,
        )


class AlreadyAdminError(StateConflictError):
    """Raised when granting admin rights to an existing admin."""

    ERROR_CODE = "ALREADY_ADMIN"

    def __init__(self, identity: bytes, group_id: str) -> None:
        super().__init__(
            f"Identity {identity.hex()} is already an admin of group {group_id}",
            identity=identity.hex(),
            group_id=group_id,
        )


class AlreadyVotedError(StateConflictError):
    """Raised when a voter submits a second ballot on the same proposal.

    Attributes:
        proposal_id: The proposal already voted on.
        voter: Hex-encoded voter identity.
        existing_choice: The choice index committed by the first ballot.
        voted_at: When the first ballot was recorded.
    """

    ERROR_CODE = "ALREADY_VOTED"

    def __init__(
        self,
        proposal_id: str,
        voter: bytes,
        existing_choice: int,
        voted_at: datetime,
    ) -> None:
        self.proposal_id = proposal_id
        self.voter = voter.hex()
        self.existing_choice = existing_choice
        self.voted_at = voted_at
        super().__init__(
            f"Identity {self.voter} already voted on proposal {proposal_id}",
            proposal_id=proposal_id,
            voter=self.voter,
            existing_choice=existing_choice,
            voted_at=voted_at.isoformat(),
        )


class ProposalClosedError(StateConflictError):
    """Raised when a ballot arrives at or after the voting end."""

    ERROR_CODE = "PROPOSAL_CLOSED"

    def __init__(self, proposal_id: str, voting_end: datetime, now: datetime) -> None:
        super().__init__(
            f"Voting on proposal {proposal_id} closed at {voting_end.isoformat()}",
            proposal_id=proposal_id,
            voting_end=voting_end.isoformat(),
            now=now.isoformat(),
        )


class CannotRemoveLastAdminError(StateConflictError):
    """Raised when a removal would leave a group without any admin."""

    ERROR_CODE = "CANNOT_REMOVE_LAST_ADMIN"

    def __init__(self, identity: bytes, group_id: str) -> None:
        super().__init__(
            f"Identity {identity.hex()} is the last admin of group {group_id}",
            identity=identity.hex(),
            group_id=group_id,
        )


class CannotRemoveCreatorError(StateConflictError):
    """Raised when a transition would strip the group creator of admin rights."""

    ERROR_CODE = "CANNOT_REMOVE_CREATOR"

    def __init__(self, identity: bytes, group_id: str) -> None:
        super().__init__(
            f"Identity {identity.hex()} created group {group_id} and stays its admin",
            identity=identity.hex(),
            group_id=group_id,
        )


class NoVotingPowerError(StateConflictError):
    """Raised when a weighted-mode voter holds a zero token balance."""

    ERROR_CODE = "NO_VOTING_POWER"

    def __init__(self, voter: bytes, proposal_id: str) -> None:
        super().__init__(
            f"Identity {voter.hex()} has no voting power for proposal {proposal_id}",
            voter=voter.hex(),
            proposal_id=proposal_id,
        )


class RegistryFullError(StateConflictError):
    """Raised when the registry has reached its group capacity."""

    ERROR_CODE = "REGISTRY_FULL"

    def __init__(self, capacity: int) -> None:
        super().__init__(
            f"DAO registry is full ({capacity} groups)",
            capacity=capacity,
        )


class GroupFullError(StateConflictError):
    """Raised when a group has reached its member capacity."""

    ERROR_CODE = "GROUP_FULL"

    def __init__(self, group_id: str, capacity: int) -> None:
        super().__init__(
            f"Group {group_id} is full ({capacity} members)",
            group_id=group_id,
            capacity=capacity,
        )


class ChoiceWeightOverflowError(StateConflictError):
    """Raised when a ballot would push a choice past the storable weight."""

    ERROR_CODE = "CHOICE_WEIGHT_OVERFLOW"

    def __init__(self, proposal_id: str, choice_index: int, limit: int) -> None:
        super().__init__(
            f"Choice {choice_index} of proposal {proposal_id} would exceed weight {limit}",
            proposal_id=proposal_id,
            choice_index=choice_index,
            limit=limit,
        )


class DuplicateGroupError(StateConflictError):
    """Raised when a group id has already been issued by the registry."""

    ERROR_CODE = "DUPLICATE_GROUP"

    def __init__(self, group_id: str) -> None:
        super().__init__(f"Group {group_id} already exists", group_id=group_id)


class DuplicateProposalError(StateConflictError):
    """Raised when a proposal id is already listed in its group."""

    ERROR_CODE = "DUPLICATE_PROPOSAL"

    def __init__(self, group_id: str, proposal_id: str) -> None:
        super().__init__(
            f"Proposal {proposal_id} already exists in group {group_id}",
            group_id=group_id,
            proposal_id=proposal_id,
        )
