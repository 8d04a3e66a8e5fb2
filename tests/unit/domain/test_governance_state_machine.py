"""Unit tests for GovernanceStateMachine transitions.

Each transition is pure: the entity passed in is never modified, and a
rejected transition returns nothing.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from chatdao.domain.errors import (
    AlreadyAdminError,
    AlreadyInitializedError,
    AlreadyMemberError,
    AlreadyVotedError,
    AuthorizationError,
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
    NotAdminError,
    NotMemberError,
    NoVotingPowerError,
    ProposalClosedError,
    ProposalGroupMismatchError,
    RegistryFullError,
    StateConflictError,
)
from chatdao.domain.models.governance_event import GovernanceEventType
from chatdao.domain.models.governance_limits import GovernanceLimits
from chatdao.domain.models.group import VotingMode
from chatdao.domain.models.proposal import MAX_WEIGHT
from chatdao.domain.models.tally import TallyOutcome
from chatdao.domain.services.addressing import account_address, group_address
from chatdao.domain.services.governance_state_machine import GovernanceStateMachine
from chatdao.domain.services.identity_derivation import IdentityDeriver
from chatdao.infrastructure.stubs import FixedBalanceOracle
from tests.helpers.governance_factories import (
    T0,
    make_group,
    make_identity,
    make_proposal,
    make_registry,
    make_vote,
)

HOUR = timedelta(hours=1)


class TestInitialize:
    """Registry initialization."""

    def test_creates_empty_registry(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        result = state_machine.initialize(None, admin, T0)

        assert result.registry.authority == admin
        assert result.registry.groups == ()
        assert result.event.event_type is GovernanceEventType.REGISTRY_INITIALIZED

    def test_second_initialize_fails(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(AlreadyInitializedError):
            state_machine.initialize(make_registry(), admin, T0)


class TestCreateGroup:
    """Group creation."""

    def test_admin_is_sole_member_and_admin(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        result = state_machine.create_group(
            make_registry(), admin, "treasury", "Treasury", "Funds", VotingMode.EQUAL, T0
        )

        assert result.group.admins == (admin,)
        assert result.group.member_identities == (admin,)
        assert result.group.creator == admin
        assert result.registry.group_ids == ("treasury",)
        assert result.registry.groups[0].address == group_address("treasury")
        assert result.event.event_type is GovernanceEventType.GROUP_CREATED

    def test_input_registry_untouched(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        registry = make_registry()
        state_machine.create_group(registry, admin, "treasury", "Treasury", "", VotingMode.EQUAL, T0)
        assert registry.groups == ()

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, state_machine: GovernanceStateMachine, admin: bytes, name: str) -> None:
        with pytest.raises(InvalidNameError):
            state_machine.create_group(make_registry(), admin, "treasury", name, "", VotingMode.EQUAL, T0)

    def test_name_too_long(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(FieldTooLongError) as exc_info:
            state_machine.create_group(make_registry(), admin, "treasury", "n" * 101, "", VotingMode.EQUAL, T0)
        assert exc_info.value.details["field_name"] == "name"

    def test_group_id_too_long(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(FieldTooLongError):
            state_machine.create_group(make_registry(), admin, "g" * 51, "Name", "", VotingMode.EQUAL, T0)

    def test_duplicate_group_id(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(DuplicateGroupError):
            state_machine.create_group(
                make_registry(group_ids=("treasury",)), admin, "treasury", "Again", "", VotingMode.EQUAL, T0
            )

    def test_registry_full(self, admin: bytes) -> None:
        machine = GovernanceStateMachine(limits=GovernanceLimits(max_groups=2))
        registry = make_registry(group_ids=("a", "b"))

        with pytest.raises(RegistryFullError):
            machine.create_group(registry, admin, "c", "C", "", VotingMode.EQUAL, T0)


class TestMembership:
    """add_member / remove_member."""

    def test_admin_adds_member(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        result = state_machine.add_member(make_group(), admin, alice, T0)

        assert result.group.is_member(alice)
        assert not result.group.is_admin(alice)
        assert result.event.event_type is GovernanceEventType.MEMBER_ADDED

    def test_non_admin_cannot_add(self, state_machine: GovernanceStateMachine, alice: bytes, bob: bytes) -> None:
        group = make_group(members=(alice,))

        with pytest.raises(NotAdminError) as exc_info:
            state_machine.add_member(group, alice, bob, T0)

        assert isinstance(exc_info.value, AuthorizationError)
        assert exc_info.value.identity == alice.hex()

    def test_member_cannot_be_added_twice(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        with pytest.raises(AlreadyMemberError):
            state_machine.add_member(make_group(members=(alice,)), admin, alice, T0)

    def test_group_full(self, admin: bytes, alice: bytes, bob: bytes) -> None:
        machine = GovernanceStateMachine(limits=GovernanceLimits(max_members=2))
        with pytest.raises(GroupFullError):
            machine.add_member(make_group(members=(alice,)), admin, bob, T0)

    def test_admin_removes_member(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        result = state_machine.remove_member(make_group(members=(alice,)), admin, alice, T0)

        assert not result.group.is_member(alice)
        assert result.event.event_type is GovernanceEventType.MEMBER_REMOVED

    def test_removing_non_member_is_an_error(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        with pytest.raises(NotMemberError):
            state_machine.remove_member(make_group(), admin, alice, T0)

    def test_non_admin_cannot_remove(self, state_machine: GovernanceStateMachine, alice: bytes, bob: bytes) -> None:
        with pytest.raises(NotAdminError):
            state_machine.remove_member(make_group(members=(alice, bob)), alice, bob, T0)

    def test_sole_admin_cannot_be_removed(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        group = make_group(members=(alice,))

        with pytest.raises(CannotRemoveLastAdminError) as exc_info:
            state_machine.remove_member(group, admin, admin, T0)

        assert isinstance(exc_info.value, StateConflictError)

    def test_removing_one_of_two_admins_drops_admin_rights(
        self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes
    ) -> None:
        group = make_group(admins=(admin, alice))

        result = state_machine.remove_member(group, admin, alice, T0)

        assert result.group.admins == (admin,)
        assert not result.group.is_admin(alice)
        assert not result.group.is_member(alice)

    def test_creator_cannot_be_removed_by_another_admin(
        self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes
    ) -> None:
        group = make_group(admins=(admin, alice))

        with pytest.raises(CannotRemoveCreatorError) as exc_info:
            state_machine.remove_member(group, alice, admin, T0)

        assert isinstance(exc_info.value, StateConflictError)
        assert group.is_admin(group.creator)

    def test_group_without_creator_as_admin_is_invalid(self, admin: bytes, alice: bytes) -> None:
        group = make_group(admins=(admin, alice))

        with pytest.raises(ValueError, match="creator"):
            replace(group, admins=(alice,))


class TestAdminManagement:
    """grant_admin / revoke_admin."""

    def test_grant_admin(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        result = state_machine.grant_admin(make_group(members=(alice,)), admin, alice, T0)

        assert result.group.admins == (admin, alice)
        assert result.event.event_type is GovernanceEventType.ADMIN_GRANTED

    def test_grant_requires_membership(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        with pytest.raises(NotMemberError):
            state_machine.grant_admin(make_group(), admin, alice, T0)

    def test_grant_twice(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        with pytest.raises(AlreadyAdminError):
            state_machine.grant_admin(make_group(admins=(admin, alice)), admin, alice, T0)

    def test_revoke_admin_keeps_membership(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        result = state_machine.revoke_admin(make_group(admins=(admin, alice)), admin, alice, T0)

        assert result.group.admins == (admin,)
        assert result.group.is_member(alice)
        assert result.event.event_type is GovernanceEventType.ADMIN_REVOKED

    def test_revoke_last_admin(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(CannotRemoveLastAdminError):
            state_machine.revoke_admin(make_group(), admin, admin, T0)

    def test_revoke_non_admin(self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes) -> None:
        with pytest.raises(NotAdminError):
            state_machine.revoke_admin(make_group(members=(alice,)), admin, alice, T0)

    def test_creator_admin_rights_survive_a_second_admin(
        self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes
    ) -> None:
        group = state_machine.grant_admin(make_group(members=(alice,)), admin, alice, T0).group

        with pytest.raises(CannotRemoveCreatorError):
            state_machine.revoke_admin(group, alice, admin, T0)

        assert group.creator == admin
        assert group.is_admin(admin)

    def test_creator_can_demote_a_granted_admin(
        self, state_machine: GovernanceStateMachine, admin: bytes, alice: bytes
    ) -> None:
        group = state_machine.grant_admin(make_group(members=(alice,)), admin, alice, T0).group

        result = state_machine.revoke_admin(group, admin, alice, T0)

        assert result.group.admins == (admin,)


class TestCreateProposal:
    """Proposal creation."""

    def test_creates_open_proposal(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        result = state_machine.create_proposal(
            make_group(), admin, "p1", "Fund it?", "", ["Yes", "No"], HOUR, T0
        )

        proposal = result.proposal
        assert proposal.choices == ("Yes", "No")
        assert proposal.choice_weights == (0, 0)
        assert proposal.created_at == T0
        assert proposal.voting_end == T0 + HOUR
        assert proposal.voting_mode is VotingMode.EQUAL
        assert result.group.proposal_ids == ("p1",)
        assert result.event.event_type is GovernanceEventType.PROPOSAL_CREATED

    def test_snapshots_group_voting_mode(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        group = make_group(voting_mode=VotingMode.TOKEN_WEIGHTED)
        result = state_machine.create_proposal(group, admin, "p1", "T", "", ["A", "B"], HOUR, T0)
        assert result.proposal.voting_mode is VotingMode.TOKEN_WEIGHTED

    def test_non_admin(self, state_machine: GovernanceStateMachine, alice: bytes) -> None:
        with pytest.raises(NotAdminError):
            state_machine.create_proposal(make_group(members=(alice,)), alice, "p1", "T", "", ["A", "B"], HOUR, T0)

    @pytest.mark.parametrize(
        "choices",
        [
            pytest.param([], id="none"),
            pytest.param(["Only"], id="one"),
            pytest.param(["Yes", ""], id="empty-label"),
            pytest.param(["Yes", "  "], id="blank-label"),
            pytest.param(["Yes", "Yes"], id="duplicate"),
            pytest.param([f"c{i}" for i in range(11)], id="too-many"),
        ],
    )
    def test_invalid_choices(self, state_machine: GovernanceStateMachine, admin: bytes, choices: list[str]) -> None:
        with pytest.raises(InvalidChoicesError):
            state_machine.create_proposal(make_group(), admin, "p1", "T", "", choices, HOUR, T0)

    @pytest.mark.parametrize(
        "duration",
        [timedelta(0), timedelta(seconds=-1), timedelta(days=31)],
        ids=["zero", "negative", "too-long"],
    )
    def test_invalid_duration(self, state_machine: GovernanceStateMachine, admin: bytes, duration: timedelta) -> None:
        with pytest.raises(InvalidDurationError):
            state_machine.create_proposal(make_group(), admin, "p1", "T", "", ["A", "B"], duration, T0)

    def test_empty_title(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            state_machine.create_proposal(make_group(), admin, "p1", "", "", ["A", "B"], HOUR, T0)
        assert "title" in str(exc_info.value)

    def test_duplicate_proposal_id(self, state_machine: GovernanceStateMachine, admin: bytes) -> None:
        group = make_group(proposal_ids=("p1",))
        with pytest.raises(DuplicateProposalError):
            state_machine.create_proposal(group, admin, "p1", "T", "", ["A", "B"], HOUR, T0)


class TestVote:
    """Ballot acceptance, uniqueness and time gating."""

    @pytest.fixture
    def group(self, alice: bytes, bob: bytes):  # type: ignore[no-untyped-def]
        return make_group(members=(alice, bob), proposal_ids=("p1",))

    def test_accepts_member_vote(self, state_machine: GovernanceStateMachine, group, alice: bytes) -> None:  # type: ignore[no-untyped-def]
        proposal = make_proposal()

        result = state_machine.vote(group, proposal, alice, 0, T0 + timedelta(minutes=10))

        assert result.proposal.choice_weights == (1, 0)
        assert result.proposal.vote_mapping[alice] == 0
        assert result.vote.weight == 1
        assert result.event.event_type is GovernanceEventType.VOTE_CAST
        assert proposal.votes == ()

    def test_second_vote_fails_and_leaves_tally(self, state_machine: GovernanceStateMachine, group, alice: bytes) -> None:  # type: ignore[no-untyped-def]
        first = state_machine.vote(group, make_proposal(), alice, 0, T0)

        with pytest.raises(AlreadyVotedError) as exc_info:
            state_machine.vote(group, first.proposal, alice, 1, T0 + timedelta(minutes=1))

        assert exc_info.value.details["existing_choice"] == 0
        assert first.proposal.choice_weights == (1, 0)

    def test_non_member(self, state_machine: GovernanceStateMachine, group) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(NotMemberError):
            state_machine.vote(group, make_proposal(), make_identity("mallory"), 0, T0)

    @pytest.mark.parametrize("offset", [HOUR, HOUR + timedelta(microseconds=1), timedelta(days=3)])
    def test_vote_at_or_after_end_is_closed(
        self, state_machine: GovernanceStateMachine, group, alice: bytes, bob: bytes, offset: timedelta  # type: ignore[no-untyped-def]
    ) -> None:
        opened = state_machine.vote(group, make_proposal(), bob, 1, T0)

        with pytest.raises(ProposalClosedError):
            state_machine.vote(group, opened.proposal, alice, 0, T0 + offset)

    def test_vote_just_before_end(self, state_machine: GovernanceStateMachine, group, alice: bytes) -> None:  # type: ignore[no-untyped-def]
        result = state_machine.vote(group, make_proposal(), alice, 1, T0 + HOUR - timedelta(microseconds=1))
        assert result.proposal.choice_weights == (0, 1)

    @pytest.mark.parametrize("index", [-1, 2, 99])
    def test_invalid_choice_index(self, state_machine: GovernanceStateMachine, group, alice: bytes, index: int) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(InvalidChoiceError):
            state_machine.vote(group, make_proposal(), alice, index, T0)

    def test_proposal_from_other_group(self, state_machine: GovernanceStateMachine, group, alice: bytes) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ProposalGroupMismatchError):
            state_machine.vote(group, make_proposal(group_id="other"), alice, 0, T0)

    def test_membership_checked_before_closure(self, state_machine: GovernanceStateMachine, group) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(NotMemberError):
            state_machine.vote(group, make_proposal(), make_identity("mallory"), 0, T0 + timedelta(days=1))


class TestWeightedVote:
    """Token-weighted ballots read the balance oracle."""

    @pytest.fixture
    def group(self, alice: bytes):  # type: ignore[no-untyped-def]
        return make_group(members=(alice,), voting_mode=VotingMode.TOKEN_WEIGHTED, proposal_ids=("p1",))

    @pytest.fixture
    def proposal(self):  # type: ignore[no-untyped-def]
        return make_proposal(voting_mode=VotingMode.TOKEN_WEIGHTED)

    def test_weight_is_balance(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        balance_oracle.set_balance(alice, 750)

        result = state_machine.vote(group, proposal, alice, 1, T0)

        assert result.proposal.choice_weights == (0, 750)
        assert result.vote.weight == 750

    def test_zero_balance_has_no_voting_power(
        self, state_machine: GovernanceStateMachine, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        with pytest.raises(NoVotingPowerError):
            state_machine.vote(group, proposal, alice, 0, T0)

    def test_oracle_unavailable(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        balance_oracle.set_balance(alice, 10)
        balance_oracle.make_unavailable("rpc timeout")

        with pytest.raises(BalanceUnavailableError) as exc_info:
            state_machine.vote(group, proposal, alice, 0, T0)

        assert exc_info.value.category == "dependency_unavailable"

    def test_negative_balance_is_unavailable(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        balance_oracle.set_balance(alice, -5)
        with pytest.raises(BalanceUnavailableError):
            state_machine.vote(group, proposal, alice, 0, T0)

    def test_balance_beyond_storable_weight_is_unavailable(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        balance_oracle.set_balance(alice, MAX_WEIGHT + 1)

        with pytest.raises(BalanceUnavailableError):
            state_machine.vote(group, proposal, alice, 0, T0)

    def test_largest_storable_balance_is_accepted(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        balance_oracle.set_balance(alice, MAX_WEIGHT)

        result = state_machine.vote(group, proposal, alice, 0, T0)

        assert result.proposal.choice_weights == (MAX_WEIGHT, 0)

    def test_choice_total_overflow_is_rejected(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        proposal = make_proposal(
            voting_mode=VotingMode.TOKEN_WEIGHTED,
            votes=(make_vote("bob", 0, weight=2**63),),
        )
        balance_oracle.set_balance(alice, 2**63)

        with pytest.raises(ChoiceWeightOverflowError) as exc_info:
            state_machine.vote(group, proposal, alice, 0, T0)

        assert exc_info.value.category == "state_conflict"
        assert proposal.choice_weights == (2**63, 0)

    def test_no_oracle_configured(self, group, proposal, alice: bytes) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(BalanceUnavailableError):
            GovernanceStateMachine().vote(group, proposal, alice, 0, T0)

    def test_equal_mode_never_consults_oracle(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, alice: bytes
    ) -> None:
        group = make_group(members=(alice,), proposal_ids=("p1",))
        state_machine.vote(group, make_proposal(), alice, 0, T0)
        assert balance_oracle.lookups == []

    def test_closed_check_precedes_oracle(
        self, state_machine: GovernanceStateMachine, balance_oracle: FixedBalanceOracle, group, proposal, alice: bytes  # type: ignore[no-untyped-def]
    ) -> None:
        with pytest.raises(ProposalClosedError):
            state_machine.vote(group, proposal, alice, 0, T0 + HOUR)
        assert balance_oracle.lookups == []


class TestTally:
    """tally() delegates to the pure tally."""

    def test_tally_before_and_after_end(self, state_machine: GovernanceStateMachine) -> None:
        proposal = make_proposal()
        assert state_machine.tally(proposal, T0).outcome is TallyOutcome.OPEN
        assert state_machine.tally(proposal, T0 + HOUR).outcome is TallyOutcome.NO_VOTES


class TestLoginOrCreateAccount:
    """Idempotent account binding."""

    def test_creates_account(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        result = state_machine.login_or_create_account(None, "tg:1001", "Alice", deriver, T0)

        assert result.created is True
        assert result.changed is True
        assert result.account.account_id == account_address("tg:1001")
        assert result.account.public_key == deriver.derive("tg:1001").public_key
        assert result.event.event_type is GovernanceEventType.ACCOUNT_CREATED

    def test_existing_account_is_login(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        created = state_machine.login_or_create_account(None, "tg:1001", "Alice", deriver, T0)

        again = state_machine.login_or_create_account(
            created.account, "tg:1001", "Alice", deriver, T0 + HOUR
        )

        assert again.created is False
        assert again.changed is False
        assert again.account == created.account
        assert again.event.event_type is GovernanceEventType.ACCOUNT_LOGIN

    def test_new_display_name_updates_account(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        created = state_machine.login_or_create_account(None, "tg:1001", "Alice", deriver, T0)

        renamed = state_machine.login_or_create_account(created.account, "tg:1001", "Alice B.", deriver, T0)

        assert renamed.changed is True
        assert renamed.account.display_name == "Alice B."
        assert renamed.account.public_key == created.account.public_key
        assert renamed.account.created_at == created.account.created_at

    def test_empty_display_name_keeps_stored_one(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        created = state_machine.login_or_create_account(None, "tg:1001", "Alice", deriver, T0)
        again = state_machine.login_or_create_account(created.account, "tg:1001", "", deriver, T0)
        assert again.account.display_name == "Alice"
        assert again.changed is False

    def test_blank_external_id(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        with pytest.raises(InvalidExternalIdError):
            state_machine.login_or_create_account(None, "", "Alice", deriver, T0)

    def test_display_name_too_long(self, state_machine: GovernanceStateMachine, deriver: IdentityDeriver) -> None:
        with pytest.raises(FieldTooLongError):
            state_machine.login_or_create_account(None, "tg:1", "x" * 65, deriver, T0)
