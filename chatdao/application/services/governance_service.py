"""Governance service - the ledger/runtime boundary for mutations.

Every operation follows the same unit of work:

1. Read the records it needs from the entity store
2. Decode them (a failure is fatal here: RecordDecodeError)
3. Call the pure state-machine transition with time from the time authority
4. Encode every successor and commit them in one atomic write

Mutations are serialized per service instance, so each transition is
validated against the freshest stored state immediately before its commit.
A rejected transition commits nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import timedelta
from uuid import uuid4

import structlog

from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.application.ports.time_authority import TimeAuthorityProtocol
from chatdao.application.services.base import LoggingMixin, RecordLoaderMixin
from chatdao.domain.codec import EntityShape, encode
from chatdao.domain.errors import (
    DuplicateGroupError,
    DuplicateProposalError,
    GroupNotFoundError,
    ProposalNotFoundError,
    RegistryNotInitializedError,
)
from chatdao.domain.models.governance_event import GovernanceEvent
from chatdao.domain.models.group import Group, VotingMode
from chatdao.domain.models.proposal import Proposal
from chatdao.domain.models.registry import Registry
from chatdao.domain.models.tally import TallyResult
from chatdao.domain.models.transition import (
    GroupCreation,
    GroupUpdate,
    ProposalCreation,
    RegistryInitialization,
    VoteAcceptance,
)
from chatdao.domain.services.addressing import (
    group_address,
    proposal_address,
    registry_address,
)
from chatdao.domain.services.governance_state_machine import GovernanceStateMachine


class GovernanceService(LoggingMixin, RecordLoaderMixin):
    """Applies governance transitions against the entity store.

    Identities are raw 32-byte public keys. The caller identity is assumed
    to be authenticated by the transport; authorization is always
    re-verified by the state machine against the stored group.

    Example:
        >>> service = GovernanceService(store, time_authority, state_machine)
        >>> await service.initialize(authority)
        >>> creation = await service.create_group(
        ...     admin=alice, group_id="tg_1001", name="Treasury",
        ...     description="", voting_mode=VotingMode.EQUAL,
        ... )
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        state_machine: GovernanceStateMachine | None = None,
    ) -> None:
        """Initialize the governance service.

        Args:
            store: Raw record store.
            time_authority: Source of the current time.
            state_machine: Transition rules; defaults to default limits
                without a balance oracle (equal voting only).
        """
        self._store = store
        self._time = time_authority
        self._machine = state_machine or GovernanceStateMachine()
        self._mutation_lock = asyncio.Lock()
        self._init_logger()

    # =========================================================================
    # Loading
    # =========================================================================

    async def _load_registry(self) -> Registry:
        registry = await self._load_optional(registry_address(), EntityShape.REGISTRY)
        if registry is None:
            raise RegistryNotInitializedError()
        return registry  # type: ignore[return-value]

    async def _load_group(self, group_id: str) -> Group:
        group = await self._load_optional(group_address(group_id), EntityShape.GROUP)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group  # type: ignore[return-value]

    async def _load_proposal(self, group_id: str, proposal_id: str) -> Proposal:
        proposal = await self._load_optional(
            proposal_address(group_id, proposal_id), EntityShape.PROPOSAL
        )
        if proposal is None:
            raise ProposalNotFoundError(group_id, proposal_id)
        return proposal  # type: ignore[return-value]

    def _record_event(self, log: structlog.BoundLogger, event: GovernanceEvent) -> None:
        log.info("governance_event", **event.to_log_dict())

    # =========================================================================
    # Registry and groups
    # =========================================================================

    async def initialize(self, authority: bytes) -> RegistryInitialization:
        """Create the singleton registry.

        Raises:
            AlreadyInitializedError: If the registry already exists.
            RecordDecodeError: If the stored registry cannot be decoded.
        """
        log = self._log_operation("initialize", caller=authority.hex())
        async with self._mutation_lock:
            with self._rejections_logged(log):
                existing = await self._load_optional(
                    registry_address(), EntityShape.REGISTRY
                )
                result = self._machine.initialize(
                    existing,  # type: ignore[arg-type]
                    authority,
                    self._time.utcnow(),
                )
            await self._store.commit({registry_address(): encode(result.registry)})
        self._record_event(log, result.event)
        return result

    async def create_group(
        self,
        admin: bytes,
        group_id: str,
        name: str,
        description: str = "",
        voting_mode: VotingMode = VotingMode.EQUAL,
    ) -> GroupCreation:
        """Create a group with `admin` as sole member and admin.

        Raises:
            RegistryNotInitializedError: If initialize() never ran.
            InvalidNameError, FieldTooLongError: Bad input.
            DuplicateGroupError: group_id already issued.
            RegistryFullError: Registry at capacity.
        """
        log = self._log_operation("create_group", caller=admin.hex(), group_id=group_id)
        async with self._mutation_lock:
            with self._rejections_logged(log):
                registry = await self._load_registry()
                address = group_address(group_id)
                if await self._store.get(address) is not None:
                    raise DuplicateGroupError(group_id)
                result = self._machine.create_group(
                    registry,
                    admin,
                    group_id,
                    name,
                    description,
                    voting_mode,
                    self._time.utcnow(),
                )
            await self._store.commit(
                {
                    registry_address(): encode(result.registry),
                    address: encode(result.group),
                }
            )
        self._record_event(log, result.event)
        return result

    async def _update_group(
        self,
        operation: str,
        caller: bytes,
        group_id: str,
        target: bytes,
    ) -> GroupUpdate:
        log = self._log_operation(
            operation, caller=caller.hex(), group_id=group_id, target=target.hex()
        )
        transition = getattr(self._machine, operation)
        async with self._mutation_lock:
            with self._rejections_logged(log):
                group = await self._load_group(group_id)
                result: GroupUpdate = transition(
                    group, caller, target, self._time.utcnow()
                )
            await self._store.commit({group_address(group_id): encode(result.group)})
        self._record_event(log, result.event)
        return result

    async def add_member(
        self, caller: bytes, group_id: str, member: bytes
    ) -> GroupUpdate:
        """Add member to the group. Caller must be a group admin.

        Raises:
            GroupNotFoundError: Unknown group.
            NotAdminError: Caller is not an admin.
            AlreadyMemberError: Member already present.
            GroupFullError: Group at member capacity.
        """
        return await self._update_group("add_member", caller, group_id, member)

    async def remove_member(
        self, caller: bytes, group_id: str, member: bytes
    ) -> GroupUpdate:
        """Remove member from the group. Caller must be a group admin.

        Raises:
            GroupNotFoundError: Unknown group.
            NotAdminError: Caller is not an admin.
            NotMemberError: Member absent.
            CannotRemoveLastAdminError: Member is the only admin.
            CannotRemoveCreatorError: Member created the group.
        """
        return await self._update_group("remove_member", caller, group_id, member)

    async def grant_admin(
        self, caller: bytes, group_id: str, member: bytes
    ) -> GroupUpdate:
        """Grant admin rights to a member."""
        return await self._update_group("grant_admin", caller, group_id, member)

    async def revoke_admin(
        self, caller: bytes, group_id: str, admin: bytes
    ) -> GroupUpdate:
        """Revoke admin rights; the creator and the last admin keep theirs."""
        return await self._update_group("revoke_admin", caller, group_id, admin)

    # =========================================================================
    # Proposals and votes
    # =========================================================================

    async def create_proposal(
        self,
        caller: bytes,
        group_id: str,
        title: str,
        description: str,
        choices: Sequence[str],
        duration: timedelta,
        proposal_id: str | None = None,
    ) -> ProposalCreation:
        """Open a proposal in the group.

        Args:
            caller: Admin identity.
            group_id: Owning group.
            title: Non-empty title.
            description: Free text.
            choices: At least two distinct, non-empty labels.
            duration: Voting window; the proposal closes at now + duration.
            proposal_id: Explicit id; a UUID4 hex id is generated if omitted.

        Raises:
            GroupNotFoundError: Unknown group.
            NotAdminError: Caller is not an admin.
            InvalidNameError, FieldTooLongError, InvalidChoicesError,
            InvalidDurationError: Bad input.
            DuplicateProposalError: proposal_id already used in the group.
        """
        proposal_id = proposal_id or uuid4().hex
        log = self._log_operation(
            "create_proposal",
            caller=caller.hex(),
            group_id=group_id,
            proposal_id=proposal_id,
        )
        address = proposal_address(group_id, proposal_id)
        async with self._mutation_lock:
            with self._rejections_logged(log):
                group = await self._load_group(group_id)
                if await self._store.get(address) is not None:
                    raise DuplicateProposalError(group_id, proposal_id)
                result = self._machine.create_proposal(
                    group,
                    caller,
                    proposal_id,
                    title,
                    description,
                    tuple(choices),
                    duration,
                    self._time.utcnow(),
                )
            await self._store.commit(
                {
                    group_address(group_id): encode(result.group),
                    address: encode(result.proposal),
                }
            )
        self._record_event(log, result.event)
        return result

    async def vote(
        self,
        voter: bytes,
        group_id: str,
        proposal_id: str,
        choice_index: int,
    ) -> VoteAcceptance:
        """Cast a ballot.

        Raises:
            GroupNotFoundError, ProposalNotFoundError: Unknown records.
            NotMemberError: Voter not in the group.
            ProposalClosedError: Voting has ended.
            InvalidChoiceError: Index out of range.
            AlreadyVotedError: Voter already has a ballot.
            BalanceUnavailableError, NoVotingPowerError: Weighted voting.
            ChoiceWeightOverflowError: Choice total would not fit in u64.
        """
        log = self._log_operation(
            "vote",
            caller=voter.hex(),
            group_id=group_id,
            proposal_id=proposal_id,
            choice=choice_index,
        )
        async with self._mutation_lock:
            with self._rejections_logged(log):
                group = await self._load_group(group_id)
                proposal = await self._load_proposal(group_id, proposal_id)
                result = self._machine.vote(
                    group, proposal, voter, choice_index, self._time.utcnow()
                )
            await self._store.commit(
                {proposal_address(group_id, proposal_id): encode(result.proposal)}
            )
        self._record_event(log, result.event)
        return result

    async def tally(self, group_id: str, proposal_id: str) -> TallyResult:
        """Tally a proposal at the current time. Read-only.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            RecordDecodeError: Stored proposal cannot be decoded.
        """
        proposal = await self._load_proposal(group_id, proposal_id)
        return self._machine.tally(proposal, self._time.utcnow())
