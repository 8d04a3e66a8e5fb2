"""Governance state machine.

Owns every transition rule across Registry, Group, Proposal and
UserAccount. Each transition is a pure function of the current entity
state, the authenticated caller identity, the request payload and the
caller-supplied current time. It either raises a GovernanceError without
any effect, or returns the validated successor entities plus the event
describing the change.

Rules:
- VALIDATE BEFORE BUILD - every check runs against the state passed in,
  before any successor is constructed
- WHOLE-ENTITY REPLACE - successors are new frozen instances; nothing is
  edited in place
- RE-VERIFY AUTHORITY - admin and member checks always use the group's own
  admin and member sets, regardless of any front-end check
- NO TIMERS - proposal closure is evaluated lazily against `now`
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from types import MappingProxyType

from chatdao.domain.errors import (
    AlreadyAdminError,
    AlreadyInitializedError,
    AlreadyMemberError,
    AlreadyVotedError,
    BalanceUnavailableError,
    CannotRemoveCreatorError,
    CannotRemoveLastAdminError,
    ChoiceWeightOverflowError,
    DuplicateGroupError,
    DuplicateProposalError,
    FieldTooLongError,
    GroupFullError,
    InvalidChoiceError,
    InvalidChoicesError,
    InvalidDurationError,
    InvalidExternalIdError,
    InvalidNameError,
    NoVotingPowerError,
    NotAdminError,
    NotMemberError,
    ProposalClosedError,
    ProposalGroupMismatchError,
    RegistryFullError,
)
from chatdao.domain.models.governance_event import GovernanceEvent, GovernanceEventType
from chatdao.domain.models.governance_limits import (
    DEFAULT_GOVERNANCE_LIMITS,
    GovernanceLimits,
)
from chatdao.domain.models.group import Group, GroupMember, ProposalInfo, VotingMode
from chatdao.domain.models.proposal import MAX_WEIGHT, MIN_CHOICES, Proposal, VoteRecord
from chatdao.domain.models.registry import GroupInfo, Registry
from chatdao.domain.models.tally import TallyResult
from chatdao.domain.models.transition import (
    AccountLogin,
    GroupCreation,
    GroupUpdate,
    ProposalCreation,
    RegistryInitialization,
    VoteAcceptance,
)
from chatdao.domain.models.user_account import UserAccount
from chatdao.domain.ports.token_balance import (
    BalanceOracleUnavailable,
    TokenBalanceOracleProtocol,
)
from chatdao.domain.services.addressing import account_address, group_address
from chatdao.domain.services.identity_derivation import IdentityDeriver
from chatdao.domain.services.tally_calculator import tally_proposal


def _check_length(field_name: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise FieldTooLongError(field_name, len(value), limit)


def _event(
    event_type: GovernanceEventType,
    actor: bytes,
    now: datetime,
    group_id: str | None = None,
    proposal_id: str | None = None,
    **payload: object,
) -> GovernanceEvent:
    return GovernanceEvent(
        event_type=event_type,
        actor=actor,
        timestamp=now,
        group_id=group_id,
        proposal_id=proposal_id,
        payload=MappingProxyType(dict(payload)),
    )


class GovernanceStateMachine:
    """Transition rules for DAO governance.

    The state machine holds no entity state of its own. Callers load the
    freshest entities, call a transition, and persist every returned
    successor atomically.

    Attributes:
        _limits: Field and capacity limits.
        _balance_oracle: Token balance lookup for weighted voting.
    """

    def __init__(
        self,
        limits: GovernanceLimits = DEFAULT_GOVERNANCE_LIMITS,
        balance_oracle: TokenBalanceOracleProtocol | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            limits: Field and capacity limits.
            balance_oracle: Token balance source. Required only for
                proposals in TOKEN_WEIGHTED groups; without one those
                ballots fail with BalanceUnavailableError.
        """
        self._limits = limits
        self._balance_oracle = balance_oracle

    @property
    def limits(self) -> GovernanceLimits:
        """Limits enforced by this state machine."""
        return self._limits

    # =========================================================================
    # Registry
    # =========================================================================

    def initialize(
        self,
        existing: Registry | None,
        authority: bytes,
        now: datetime,
    ) -> RegistryInitialization:
        """Create the singleton registry.

        Raises:
            AlreadyInitializedError: If a registry already exists.
        """
        if existing is not None:
            raise AlreadyInitializedError()
        registry = Registry(authority=authority, created_at=now)
        return RegistryInitialization(
            registry=registry,
            event=_event(GovernanceEventType.REGISTRY_INITIALIZED, authority, now),
        )

    # =========================================================================
    # Groups
    # =========================================================================

    def create_group(
        self,
        registry: Registry,
        admin: bytes,
        group_id: str,
        name: str,
        description: str,
        voting_mode: VotingMode,
        now: datetime,
    ) -> GroupCreation:
        """Create a group with `admin` as its sole member and admin.

        Raises:
            InvalidNameError: If name is empty.
            FieldTooLongError: If group id, name or description is too long.
            DuplicateGroupError: If group_id was already issued.
            RegistryFullError: If the registry is at capacity.
        """
        if not name or not name.strip():
            raise InvalidNameError("name")
        if not group_id:
            raise InvalidNameError("group_id")
        _check_length("group_id", group_id, self._limits.max_group_id_length)
        _check_length("name", name, self._limits.max_group_name_length)
        _check_length(
            "description", description, self._limits.max_group_description_length
        )
        if registry.has_group(group_id):
            raise DuplicateGroupError(group_id)
        if len(registry.groups) >= self._limits.max_groups:
            raise RegistryFullError(self._limits.max_groups)

        group = Group(
            group_id=group_id,
            name=name,
            description=description,
            creator=admin,
            admins=(admin,),
            members=(GroupMember(identity=admin, joined_at=now),),
            voting_mode=voting_mode,
            created_at=now,
        )
        info = GroupInfo(group_id=group_id, creator=admin, address=group_address(group_id))
        successor = replace(registry, groups=registry.groups + (info,))
        return GroupCreation(
            registry=successor,
            group=group,
            event=_event(
                GovernanceEventType.GROUP_CREATED,
                admin,
                now,
                group_id=group_id,
                name=name,
                voting_mode=voting_mode.name,
            ),
        )

    def _require_admin(self, group: Group, caller: bytes) -> None:
        if not group.is_admin(caller):
            raise NotAdminError(caller, group.group_id)

    def add_member(
        self,
        group: Group,
        caller: bytes,
        member: bytes,
        now: datetime,
    ) -> GroupUpdate:
        """Add `member` to the group.

        Raises:
            NotAdminError: If caller is not an admin of the group.
            AlreadyMemberError: If member is already present.
            GroupFullError: If the group is at member capacity.
        """
        self._require_admin(group, caller)
        if group.is_member(member):
            raise AlreadyMemberError(member, group.group_id)
        if len(group.members) >= self._limits.max_members:
            raise GroupFullError(group.group_id, self._limits.max_members)

        successor = replace(
            group,
            members=group.members + (GroupMember(identity=member, joined_at=now),),
        )
        return GroupUpdate(
            group=successor,
            event=_event(
                GovernanceEventType.MEMBER_ADDED,
                caller,
                now,
                group_id=group.group_id,
                member=member.hex(),
            ),
        )

    def remove_member(
        self,
        group: Group,
        caller: bytes,
        member: bytes,
        now: datetime,
    ) -> GroupUpdate:
        """Remove `member` from the group (and from the admin set).

        Raises:
            NotAdminError: If caller is not an admin of the group.
            NotMemberError: If member is not in the group.
            CannotRemoveLastAdminError: If member is the only admin.
            CannotRemoveCreatorError: If member created the group.
        """
        self._require_admin(group, caller)
        if not group.is_member(member):
            raise NotMemberError(member, group.group_id)
        if group.admins == (member,):
            raise CannotRemoveLastAdminError(member, group.group_id)
        if member == group.creator:
            raise CannotRemoveCreatorError(member, group.group_id)

        successor = replace(
            group,
            admins=tuple(a for a in group.admins if a != member),
            members=tuple(m for m in group.members if m.identity != member),
        )
        return GroupUpdate(
            group=successor,
            event=_event(
                GovernanceEventType.MEMBER_REMOVED,
                caller,
                now,
                group_id=group.group_id,
                member=member.hex(),
            ),
        )

    def grant_admin(
        self,
        group: Group,
        caller: bytes,
        member: bytes,
        now: datetime,
    ) -> GroupUpdate:
        """Grant admin rights to an existing member.

        Raises:
            NotAdminError: If caller is not an admin of the group.
            NotMemberError: If member is not in the group.
            AlreadyAdminError: If member is already an admin.
        """
        self._require_admin(group, caller)
        if not group.is_member(member):
            raise NotMemberError(member, group.group_id)
        if group.is_admin(member):
            raise AlreadyAdminError(member, group.group_id)

        successor = replace(group, admins=group.admins + (member,))
        return GroupUpdate(
            group=successor,
            event=_event(
                GovernanceEventType.ADMIN_GRANTED,
                caller,
                now,
                group_id=group.group_id,
                member=member.hex(),
            ),
        )

    def revoke_admin(
        self,
        group: Group,
        caller: bytes,
        target: bytes,
        now: datetime,
    ) -> GroupUpdate:
        """Revoke admin rights; the target stays a member.

        Raises:
            NotAdminError: If caller is not an admin, or target is not one.
            CannotRemoveLastAdminError: If target is the only admin.
            CannotRemoveCreatorError: If target created the group.
        """
        self._require_admin(group, caller)
        if not group.is_admin(target):
            raise NotAdminError(target, group.group_id)
        if group.admins == (target,):
            raise CannotRemoveLastAdminError(target, group.group_id)
        if target == group.creator:
            raise CannotRemoveCreatorError(target, group.group_id)

        successor = replace(group, admins=tuple(a for a in group.admins if a != target))
        return GroupUpdate(
            group=successor,
            event=_event(
                GovernanceEventType.ADMIN_REVOKED,
                caller,
                now,
                group_id=group.group_id,
                member=target.hex(),
            ),
        )

    # =========================================================================
    # Proposals
    # =========================================================================

    def _validate_choices(self, choices: tuple[str, ...]) -> None:
        if len(choices) < MIN_CHOICES:
            raise InvalidChoicesError(
                f"at least {MIN_CHOICES} choices required", len(choices)
            )
        if len(choices) > self._limits.max_choices:
            raise InvalidChoicesError(
                f"at most {self._limits.max_choices} choices allowed", len(choices)
            )
        if any(not label or not label.strip() for label in choices):
            raise InvalidChoicesError("choice labels must not be empty", len(choices))
        if len(set(choices)) != len(choices):
            raise InvalidChoicesError("choice labels must be distinct", len(choices))
        for label in choices:
            _check_length("choice", label, self._limits.max_choice_length)

    def create_proposal(
        self,
        group: Group,
        caller: bytes,
        proposal_id: str,
        title: str,
        description: str,
        choices: tuple[str, ...] | list[str],
        duration: timedelta,
        now: datetime,
    ) -> ProposalCreation:
        """Open a proposal in the group, voting until now + duration.

        Raises:
            NotAdminError: If caller is not an admin of the group.
            InvalidNameError: If the title is empty.
            FieldTooLongError: If a text field exceeds its limit.
            InvalidChoicesError: Fewer than 2 or too many choices, or an
                empty or repeated label.
            InvalidDurationError: If duration <= 0 or above the maximum.
            DuplicateProposalError: If proposal_id is already listed.
        """
        self._require_admin(group, caller)
        if not title or not title.strip():
            raise InvalidNameError("title")
        _check_length("proposal_id", proposal_id, self._limits.max_proposal_id_length)
        _check_length("title", title, self._limits.max_title_length)
        _check_length(
            "description", description, self._limits.max_proposal_description_length
        )
        choice_tuple = tuple(choices)
        self._validate_choices(choice_tuple)
        seconds = duration.total_seconds()
        if duration <= timedelta(0):
            raise InvalidDurationError(seconds, "must be positive")
        if duration > self._limits.max_voting_duration:
            raise InvalidDurationError(
                seconds,
                f"exceeds maximum of {self._limits.max_voting_duration.total_seconds()}s",
            )
        if group.has_proposal(proposal_id):
            raise DuplicateProposalError(group.group_id, proposal_id)

        proposal = Proposal(
            proposal_id=proposal_id,
            group_id=group.group_id,
            title=title,
            description=description,
            choices=choice_tuple,
            choice_weights=(0,) * len(choice_tuple),
            creator=caller,
            voting_mode=group.voting_mode,
            created_at=now,
            voting_end=now + duration,
        )
        successor = replace(
            group,
            proposals=group.proposals
            + (ProposalInfo(proposal_id=proposal_id, created_at=now),),
        )
        return ProposalCreation(
            group=successor,
            proposal=proposal,
            event=_event(
                GovernanceEventType.PROPOSAL_CREATED,
                caller,
                now,
                group_id=group.group_id,
                proposal_id=proposal_id,
                voting_end=proposal.voting_end.isoformat(),
                choices=len(choice_tuple),
            ),
        )

    def _ballot_weight(self, proposal: Proposal, voter: bytes) -> int:
        if proposal.voting_mode is VotingMode.EQUAL:
            return 1
        if self._balance_oracle is None:
            raise BalanceUnavailableError(voter, "no balance oracle configured")
        try:
            balance = self._balance_oracle.get_token_balance(voter)
        except BalanceOracleUnavailable as exc:
            raise BalanceUnavailableError(voter, str(exc)) from exc
        if not isinstance(balance, int) or balance < 0:
            raise BalanceUnavailableError(voter, f"invalid balance {balance!r}")
        if balance > MAX_WEIGHT:
            raise BalanceUnavailableError(voter, f"balance {balance} exceeds {MAX_WEIGHT}")
        if balance == 0:
            raise NoVotingPowerError(voter, proposal.proposal_id)
        return balance

    def vote(
        self,
        group: Group,
        proposal: Proposal,
        voter: bytes,
        choice_index: int,
        now: datetime,
    ) -> VoteAcceptance:
        """Record a ballot and add its weight to the chosen option.

        Checks run in this order against the state passed in: ownership,
        membership, closure, choice range, duplicate ballot, weight.

        Raises:
            ProposalGroupMismatchError: If proposal does not belong to group.
            NotMemberError: If voter is not a member of the group.
            ProposalClosedError: If now >= voting_end.
            InvalidChoiceError: If choice_index is out of range.
            AlreadyVotedError: If voter already has a ballot.
            BalanceUnavailableError: Weighted mode and no balance available.
            NoVotingPowerError: Weighted mode and the balance is zero.
            ChoiceWeightOverflowError: The choice total would exceed MAX_WEIGHT.
        """
        if proposal.group_id != group.group_id or not group.has_proposal(
            proposal.proposal_id
        ):
            raise ProposalGroupMismatchError(proposal.proposal_id, group.group_id)
        if not group.is_member(voter):
            raise NotMemberError(voter, group.group_id)
        if not proposal.is_open_at(now):
            raise ProposalClosedError(proposal.proposal_id, proposal.voting_end, now)
        if not 0 <= choice_index < len(proposal.choices):
            raise InvalidChoiceError(choice_index, len(proposal.choices))
        existing = proposal.find_vote(voter)
        if existing is not None:
            raise AlreadyVotedError(
                proposal_id=proposal.proposal_id,
                voter=voter,
                existing_choice=existing.choice,
                voted_at=existing.timestamp,
            )
        weight = self._ballot_weight(proposal, voter)
        if proposal.choice_weights[choice_index] + weight > MAX_WEIGHT:
            raise ChoiceWeightOverflowError(proposal.proposal_id, choice_index, MAX_WEIGHT)

        ballot = VoteRecord(voter=voter, choice=choice_index, weight=weight, timestamp=now)
        weights = list(proposal.choice_weights)
        weights[choice_index] += weight
        successor = replace(
            proposal,
            choice_weights=tuple(weights),
            votes=proposal.votes + (ballot,),
        )
        return VoteAcceptance(
            proposal=successor,
            vote=ballot,
            event=_event(
                GovernanceEventType.VOTE_CAST,
                voter,
                now,
                group_id=group.group_id,
                proposal_id=proposal.proposal_id,
                choice=choice_index,
                weight=weight,
            ),
        )

    def tally(self, proposal: Proposal, now: datetime) -> TallyResult:
        """Tally a proposal. Pure read; see tally_calculator."""
        return tally_proposal(proposal, now)

    # =========================================================================
    # Accounts
    # =========================================================================

    def login_or_create_account(
        self,
        existing: UserAccount | None,
        external_id: str,
        display_name: str,
        deriver: IdentityDeriver,
        now: datetime,
    ) -> AccountLogin:
        """Return the account bound to external_id, creating it if absent.

        A second call for the same external id is a login: the stored
        account is returned unchanged, except that a different non-empty
        display name replaces the stored one.

        Raises:
            InvalidExternalIdError: If external_id is empty.
            FieldTooLongError: If external_id or display_name is too long.
        """
        if not external_id or not external_id.strip():
            raise InvalidExternalIdError(external_id)
        _check_length("external_id", external_id, self._limits.max_external_id_length)
        _check_length(
            "display_name", display_name, self._limits.max_display_name_length
        )

        if existing is not None:
            if existing.external_id != external_id:
                # address derivation guarantees this never happens for
                # well-formed storage
                raise InvalidExternalIdError(external_id)
            renamed = bool(display_name) and display_name != existing.display_name
            account = replace(existing, display_name=display_name) if renamed else existing
            return AccountLogin(
                account=account,
                created=False,
                changed=renamed,
                event=_event(
                    GovernanceEventType.ACCOUNT_LOGIN,
                    account.public_key,
                    now,
                    external_id=external_id,
                ),
            )

        keypair = deriver.derive(external_id)
        account = UserAccount(
            account_id=account_address(external_id),
            external_id=external_id,
            public_key=keypair.public_key,
            created_at=now,
            display_name=display_name,
        )
        return AccountLogin(
            account=account,
            created=True,
            changed=True,
            event=_event(
                GovernanceEventType.ACCOUNT_CREATED,
                account.public_key,
                now,
                external_id=external_id,
            ),
        )
