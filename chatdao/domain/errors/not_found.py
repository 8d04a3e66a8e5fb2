"""Not-found errors for governance records."""

from __future__ import annotations

from chatdao.domain.errors.base import NotFoundError


class RegistryNotInitializedError(NotFoundError):
    """Raised when an operation needs the registry before it exists."""

    ERROR_CODE = "REGISTRY_NOT_INITIALIZED"

    def __init__(self) -> None:
        super().__init__("DAO registry has not been initialized")


class GroupNotFoundError(NotFoundError):
    """Raised when a group id does not resolve to a stored group."""

    ERROR_CODE = "GROUP_NOT_FOUND"

    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Group {group_id} not found", group_id=group_id)


class ProposalNotFoundError(NotFoundError):
    """Raised when a proposal id does not resolve within its group."""

    ERROR_CODE = "PROPOSAL_NOT_FOUND"

    def __init__(self, group_id: str, proposal_id: str) -> None:
        self.group_id = group_id
        self.proposal_id = proposal_id
        super().__init__(
            f"Proposal {proposal_id} not found in group {group_id}",
            group_id=group_id,
            proposal_id=proposal_id,
        )


class AccountNotFoundError(NotFoundError):
    """Raised when no user account is bound to an external id."""

    ERROR_CODE = "ACCOUNT_NOT_FOUND"

    def __init__(self, external_id: str) -> None:
        self.external_id = external_id
        super().__init__(
            f"No account bound to {external_id}",
            external_id=external_id,
        )
