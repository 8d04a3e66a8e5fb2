"""Read views for governance entities.

Pydantic models handed to read-only consumers (the chat front-end,
listings, result tallies). Identities and addresses are hex-encoded;
timestamps stay timezone-aware datetimes.

Listings never abort on a bad record: every item that fails to decode is
reported as a DecodeFailureView next to the siblings that decoded.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from chatdao.domain.codec.result import DecodeFailure
from chatdao.domain.models.group import Group, VotingMode
from chatdao.domain.models.proposal import Proposal, VoteRecord
from chatdao.domain.models.tally import TallyResult
from chatdao.domain.models.user_account import UserAccount

VotingModeName = Literal["equal", "token_weighted"]


def _mode_name(mode: VotingMode) -> VotingModeName:
    return "equal" if mode is VotingMode.EQUAL else "token_weighted"


class MemberView(BaseModel):
    """A group member."""

    model_config = ConfigDict(frozen=True)

    identity: Annotated[str, Field(description="Hex-encoded public key")]
    joined_at: datetime


class GroupView(BaseModel):
    """Read view of a group."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    name: str
    description: str
    creator: Annotated[str, Field(description="Hex-encoded creator key")]
    admins: list[str]
    members: list[MemberView]
    proposal_ids: list[str]
    voting_mode: VotingModeName
    created_at: datetime

    @classmethod
    def from_entity(cls, group: Group) -> GroupView:
        """Build the view from a decoded group."""
        return cls(
            group_id=group.group_id,
            name=group.name,
            description=group.description,
            creator=group.creator.hex(),
            admins=[admin.hex() for admin in group.admins],
            members=[
                MemberView(identity=m.identity.hex(), joined_at=m.joined_at)
                for m in group.members
            ],
            proposal_ids=list(group.proposal_ids),
            voting_mode=_mode_name(group.voting_mode),
            created_at=group.created_at,
        )


class VoteView(BaseModel):
    """A recorded ballot."""

    model_config = ConfigDict(frozen=True)

    voter: str
    choice: Annotated[int, Field(ge=0)]
    weight: Annotated[int, Field(gt=0)]
    timestamp: datetime

    @classmethod
    def from_entity(cls, vote: VoteRecord) -> VoteView:
        return cls(
            voter=vote.voter.hex(),
            choice=vote.choice,
            weight=vote.weight,
            timestamp=vote.timestamp,
        )


class ProposalView(BaseModel):
    """Read view of a proposal as of a given time."""

    model_config = ConfigDict(frozen=True)

    proposal_id: str
    group_id: str
    title: str
    description: str
    choices: list[str]
    choice_weights: list[int]
    creator: str
    voting_mode: VotingModeName
    created_at: datetime
    voting_end: datetime
    votes: list[VoteView]
    is_open: Annotated[
        bool, Field(description="Whether ballots were accepted at read time")
    ]

    @classmethod
    def from_entity(cls, proposal: Proposal, now: datetime) -> ProposalView:
        """Build the view; is_open is evaluated against now."""
        return cls(
            proposal_id=proposal.proposal_id,
            group_id=proposal.group_id,
            title=proposal.title,
            description=proposal.description,
            choices=list(proposal.choices),
            choice_weights=list(proposal.choice_weights),
            creator=proposal.creator.hex(),
            voting_mode=_mode_name(proposal.voting_mode),
            created_at=proposal.created_at,
            voting_end=proposal.voting_end,
            votes=[VoteView.from_entity(v) for v in proposal.votes],
            is_open=proposal.is_open_at(now),
        )


class ChoiceTotalView(BaseModel):
    """Accumulated weight of one choice."""

    model_config = ConfigDict(frozen=True)

    index: int
    label: str
    weight: int


class TallyView(BaseModel):
    """Result tally of a proposal.

    winner is only set when the proposal is closed and a single choice
    holds the highest weight. On a tie, tied_choices lists every choice
    sharing that weight and winner stays None.
    """

    model_config = ConfigDict(frozen=True)

    proposal_id: str
    group_id: str
    title: str
    totals: list[ChoiceTotalView]
    ballot_count: int
    is_closed: bool
    outcome: Literal["open", "winner", "tie", "no_votes"]
    winner: int | None = None
    winner_label: str | None = None
    tied_choices: list[int] = Field(default_factory=list)
    voting_end: datetime

    @classmethod
    def from_result(cls, proposal: Proposal, result: TallyResult) -> TallyView:
        winner = result.winner
        return cls(
            proposal_id=proposal.proposal_id,
            group_id=proposal.group_id,
            title=proposal.title,
            totals=[
                ChoiceTotalView(index=t.index, label=t.label, weight=t.weight)
                for t in result.totals
            ],
            ballot_count=result.ballot_count,
            is_closed=result.is_closed,
            outcome=result.outcome.value,
            winner=winner,
            winner_label=proposal.choices[winner] if winner is not None else None,
            tied_choices=list(result.tied_choices),
            voting_end=proposal.voting_end,
        )

    def as_label_map(self) -> dict[str, int]:
        """Return {label: weight} in choice order."""
        return {total.label: total.weight for total in self.totals}


class AccountView(BaseModel):
    """Read view of a user account."""

    model_config = ConfigDict(frozen=True)

    account_id: str
    external_id: str
    public_key: Annotated[str, Field(description="Hex-encoded Ed25519 key")]
    display_name: str
    created_at: datetime

    @classmethod
    def from_entity(cls, account: UserAccount) -> AccountView:
        return cls(
            account_id=account.account_id.hex(),
            external_id=account.external_id,
            public_key=account.public_key_hex,
            display_name=account.display_name,
            created_at=account.created_at,
        )


class DecodeFailureView(BaseModel):
    """A record in a listing that could not be decoded.

    Attributes:
        key: The group or proposal id the record was listed under.
        address: Hex-encoded storage address.
        kind: truncated, corrupt, shape_mismatch or missing.
        detail: Human-readable description.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    address: str
    kind: Literal["truncated", "corrupt", "shape_mismatch", "missing"]
    detail: str

    @classmethod
    def from_failure(
        cls, key: str, address: bytes, failure: DecodeFailure
    ) -> DecodeFailureView:
        return cls(
            key=key,
            address=address.hex(),
            kind=failure.kind.value,
            detail=failure.detail,
        )

    @classmethod
    def missing(cls, key: str, address: bytes) -> DecodeFailureView:
        """A listed record with nothing stored at its address."""
        return cls(
            key=key,
            address=address.hex(),
            kind="missing",
            detail="no record stored at the listed address",
        )


class GroupListing(BaseModel):
    """Result of list_groups() / list_my_groups()."""

    model_config = ConfigDict(frozen=True)

    groups: list[GroupView] = Field(default_factory=list)
    failures: list[DecodeFailureView] = Field(default_factory=list)


class ProposalListing(BaseModel):
    """Result of list_proposals()."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    proposals: list[ProposalView] = Field(default_factory=list)
    failures: list[DecodeFailureView] = Field(default_factory=list)
