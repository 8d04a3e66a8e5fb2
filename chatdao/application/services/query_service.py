"""Governance query service - read-only views over raw stored records.

The query layer depends on the codec and the pure tally only; it never
calls a state-machine transition and never writes.

Degradation rules:
- A listing reports every record that fails to decode (or is listed but
  missing) as a DecodeFailureView next to the siblings that decoded
- A single-record read (get_group, get_proposal, get_results, get_account)
  raises the matching NotFoundError or RecordDecodeError
- A listing whose root record (registry or group) cannot be decoded raises
  RecordDecodeError, since there is nothing to enumerate
"""

from __future__ import annotations

from chatdao.application.dtos.governance_views import (
    AccountView,
    DecodeFailureView,
    GroupListing,
    GroupView,
    ProposalListing,
    ProposalView,
    TallyView,
)
from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.application.ports.time_authority import TimeAuthorityProtocol
from chatdao.application.services.base import LoggingMixin, RecordLoaderMixin
from chatdao.domain.codec import DecodeFailure, EntityShape, decode
from chatdao.domain.errors import (
    AccountNotFoundError,
    GroupNotFoundError,
    ProposalNotFoundError,
)
from chatdao.domain.models.group import Group
from chatdao.domain.models.proposal import Proposal
from chatdao.domain.models.registry import Registry
from chatdao.domain.services.addressing import (
    account_address,
    group_address,
    proposal_address,
    registry_address,
)
from chatdao.domain.services.tally_calculator import tally_proposal


class GovernanceQueryService(LoggingMixin, RecordLoaderMixin):
    """Typed read views for chat front-ends and result displays."""

    def __init__(
        self,
        store: EntityStoreProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._store = store
        self._time = time_authority
        self._init_logger(component="query")

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

    async def _collect_groups(self, member: bytes | None) -> GroupListing:
        log = self._log_operation(
            "list_groups" if member is None else "list_my_groups",
            member=member.hex() if member is not None else None,
        )
        registry: Registry | None = await self._load_optional(  # type: ignore[assignment]
            registry_address(), EntityShape.REGISTRY
        )
        if registry is None:
            log.debug("registry_not_initialized")
            return GroupListing()

        groups: list[GroupView] = []
        failures: list[DecodeFailureView] = []
        for info in registry.groups:
            raw = await self._store.get(info.address)
            if raw is None:
                failures.append(DecodeFailureView.missing(info.group_id, info.address))
                continue
            result = decode(raw, EntityShape.GROUP)
            if isinstance(result, DecodeFailure):
                log.warning(
                    "group_decode_failed",
                    group_id=info.group_id,
                    kind=result.kind.value,
                    detail=result.detail,
                )
                failures.append(
                    DecodeFailureView.from_failure(info.group_id, info.address, result)
                )
                continue
            group: Group = result.entity
            if member is None or group.is_member(member):
                groups.append(GroupView.from_entity(group))

        log.debug("groups_listed", count=len(groups), failures=len(failures))
        return GroupListing(groups=groups, failures=failures)

    async def list_groups(self) -> GroupListing:
        """List every group in the registry.

        Returns an empty listing when the registry was never initialized.

        Raises:
            RecordDecodeError: If the registry itself cannot be decoded.
        """
        return await self._collect_groups(member=None)

    async def list_my_groups(self, identity: bytes) -> GroupListing:
        """List the groups identity is a member of.

        Raises:
            RecordDecodeError: If the registry itself cannot be decoded.
        """
        return await self._collect_groups(member=identity)

    async def list_proposals(self, group_id: str) -> ProposalListing:
        """List the proposals of a group, as of the current time.

        Raises:
            GroupNotFoundError: Unknown group.
            RecordDecodeError: If the group itself cannot be decoded.
        """
        log = self._log_operation("list_proposals", group_id=group_id)
        group = await self._load_group(group_id)
        now = self._time.utcnow()

        proposals: list[ProposalView] = []
        failures: list[DecodeFailureView] = []
        for proposal_id in group.proposal_ids:
            address = proposal_address(group_id, proposal_id)
            raw = await self._store.get(address)
            if raw is None:
                failures.append(DecodeFailureView.missing(proposal_id, address))
                continue
            result = decode(raw, EntityShape.PROPOSAL)
            if isinstance(result, DecodeFailure):
                log.warning(
                    "proposal_decode_failed",
                    proposal_id=proposal_id,
                    kind=result.kind.value,
                    detail=result.detail,
                )
                failures.append(
                    DecodeFailureView.from_failure(proposal_id, address, result)
                )
                continue
            proposals.append(ProposalView.from_entity(result.entity, now))

        return ProposalListing(group_id=group_id, proposals=proposals, failures=failures)

    async def get_group(self, group_id: str) -> GroupView:
        """Return one group.

        Raises:
            GroupNotFoundError: Unknown group.
            RecordDecodeError: Stored group cannot be decoded.
        """
        return GroupView.from_entity(await self._load_group(group_id))

    async def get_proposal(self, group_id: str, proposal_id: str) -> ProposalView:
        """Return one proposal as of the current time.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            RecordDecodeError: Stored proposal cannot be decoded.
        """
        proposal = await self._load_proposal(group_id, proposal_id)
        return ProposalView.from_entity(proposal, self._time.utcnow())

    async def get_results(self, group_id: str, proposal_id: str) -> TallyView:
        """Tally a proposal as of the current time.

        A winner is declared only once voting has ended; exact ties report
        every tied choice and no winner.

        Raises:
            ProposalNotFoundError: Unknown proposal.
            RecordDecodeError: Stored proposal cannot be decoded.
        """
        proposal = await self._load_proposal(group_id, proposal_id)
        result = tally_proposal(proposal, self._time.utcnow())
        return TallyView.from_result(proposal, result)

    async def get_account(self, external_id: str) -> AccountView:
        """Return the account bound to external_id.

        Raises:
            AccountNotFoundError: No account for external_id.
            RecordDecodeError: Stored account cannot be decoded.
        """
        account = await self._load_optional(
            account_address(external_id), EntityShape.USER_ACCOUNT
        )
        if account is None:
            raise AccountNotFoundError(external_id)
        return AccountView.from_entity(account)  # type: ignore[arg-type]
