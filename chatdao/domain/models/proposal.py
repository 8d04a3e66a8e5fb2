"""Proposal entity and its ballots.

A proposal owns its ballots by value. The ballot sequence doubles as the
voter -> choice mapping: each voter appears at most once, in the order the
ballots were accepted.

Invariants:
- At least two choices, none empty
- choice_weights has one accumulated weight per choice, each within u64
- voting_end is strictly after created_at
- A voter identity appears at most once in votes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from chatdao.domain.models.group import VotingMode
from chatdao.domain.models.identity import validate_identity, validate_timestamp

# Minimum number of choices on any proposal
MIN_CHOICES: int = 2

# Largest ballot or accumulated weight the persisted layout (u64) can hold
MAX_WEIGHT: int = 2**64 - 1


@dataclass(frozen=True, eq=True)
class VoteRecord:
    """A single accepted ballot.

    Attributes:
        voter: Identity of the voter.
        choice: Index into the proposal's choices.
        weight: Weight added to the chosen option.
        timestamp: When the ballot was accepted.
    """

    voter: bytes
    choice: int
    weight: int
    timestamp: datetime

    def __post_init__(self) -> None:
        validate_identity(self.voter, "voter")
        validate_timestamp(self.timestamp, "timestamp")
        if self.choice < 0:
            raise ValueError(f"choice must be non-negative, got {self.choice}")
        if not 0 < self.weight <= MAX_WEIGHT:
            raise ValueError(f"weight must be in 1..{MAX_WEIGHT}, got {self.weight}")


@dataclass(frozen=True, eq=True)
class Proposal:
    """A time-boxed proposal within a group."""

    proposal_id: str
    group_id: str
    title: str
    description: str
    choices: tuple[str, ...]
    choice_weights: tuple[int, ...]
    creator: bytes
    voting_mode: VotingMode
    created_at: datetime
    voting_end: datetime
    votes: tuple[VoteRecord, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.proposal_id:
            raise ValueError("proposal_id must be non-empty")
        if not self.group_id:
            raise ValueError("group_id must be non-empty")
        if len(self.choices) < MIN_CHOICES:
            raise ValueError(f"a proposal needs at least {MIN_CHOICES} choices")
        if any(not label.strip() for label in self.choices):
            raise ValueError("choice labels must be non-empty")
        if len(self.choice_weights) != len(self.choices):
            raise ValueError("choice_weights must have one entry per choice")
        if any(not 0 <= weight <= MAX_WEIGHT for weight in self.choice_weights):
            raise ValueError(f"choice weights must be in 0..{MAX_WEIGHT}")
        validate_identity(self.creator, "creator")
        validate_timestamp(self.created_at, "created_at")
        validate_timestamp(self.voting_end, "voting_end")
        if self.voting_end <= self.created_at:
            raise ValueError("voting_end must be strictly after created_at")
        voters = [vote.voter for vote in self.votes]
        if len(set(voters)) != len(voters):
            raise ValueError("a voter may appear at most once")
        if any(vote.choice >= len(self.choices) for vote in self.votes):
            raise ValueError("vote choice out of range")

    def is_open_at(self, now: datetime) -> bool:
        """Check whether ballots are accepted at `now`.

        Voting is open while now < voting_end. Closure is evaluated lazily;
        there is no timer that closes a proposal.
        """
        return now < self.voting_end

    def find_vote(self, voter: bytes) -> VoteRecord | None:
        """Return the ballot cast by voter, or None."""
        for vote in self.votes:
            if vote.voter == voter:
                return vote
        return None

    @property
    def vote_mapping(self) -> Mapping[bytes, int]:
        """Read-only voter -> choice mapping."""
        return MappingProxyType({vote.voter: vote.choice for vote in self.votes})

    @property
    def total_weight(self) -> int:
        """Sum of all accumulated weights."""
        return sum(self.choice_weights)
