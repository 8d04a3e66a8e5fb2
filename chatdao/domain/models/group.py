"""Group entity: membership, admin set and proposal references.

Invariants:
- The admin set is never empty and every admin is a member
- A member identity appears at most once
- Proposal ids are unique within the group
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from chatdao.domain.models.identity import validate_identity, validate_timestamp


class VotingMode(Enum):
    """How a ballot's weight is computed.

    Values:
        EQUAL: One member, one vote (weight 1).
        TOKEN_WEIGHTED: Weight equals the voter's external token balance.
    """

    EQUAL = 0
    TOKEN_WEIGHTED = 1


@dataclass(frozen=True, eq=True)
class GroupMember:
    """A member of a group and when they joined."""

    identity: bytes
    joined_at: datetime

    def __post_init__(self) -> None:
        validate_identity(self.identity, "identity")
        validate_timestamp(self.joined_at, "joined_at")


@dataclass(frozen=True, eq=True)
class ProposalInfo:
    """Group entry referencing a stored proposal."""

    proposal_id: str
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.proposal_id:
            raise ValueError("proposal_id must be non-empty")
        validate_timestamp(self.created_at, "created_at")


@dataclass(frozen=True, eq=True)
class Group:
    """A governance group.

    Attributes:
        group_id: Unique, immutable identifier issued by the registry.
        name: Display name (non-empty).
        description: Free-text description.
        creator: Identity that created the group; always an admin.
        admins: Identities allowed to administer the group.
        members: Group members in join order.
        proposals: Proposal references in creation order.
        voting_mode: Ballot weighting for the group's proposals.
        created_at: When the group was created.
    """

    group_id: str
    name: str
    description: str
    creator: bytes
    admins: tuple[bytes, ...]
    members: tuple[GroupMember, ...]
    voting_mode: VotingMode
    created_at: datetime
    proposals: tuple[ProposalInfo, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.group_id:
            raise ValueError("group_id must be non-empty")
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        validate_identity(self.creator, "creator")
        validate_timestamp(self.created_at, "created_at")
        if not isinstance(self.voting_mode, VotingMode):
            raise ValueError("voting_mode must be a VotingMode")
        if not self.admins:
            raise ValueError("a group must have at least one admin")
        for admin in self.admins:
            validate_identity(admin, "admin")
        if len(set(self.admins)) != len(self.admins):
            raise ValueError("admin identities must be unique")
        if self.creator not in self.admins:
            raise ValueError("the creator must be an admin")
        identities = [m.identity for m in self.members]
        if len(set(identities)) != len(identities):
            raise ValueError("member identities must be unique")
        if not set(self.admins) <= set(identities):
            raise ValueError("every admin must be a member")
        proposal_ids = [p.proposal_id for p in self.proposals]
        if len(set(proposal_ids)) != len(proposal_ids):
            raise ValueError("proposal ids must be unique within a group")

    @property
    def member_identities(self) -> tuple[bytes, ...]:
        """Member identities in join order."""
        return tuple(m.identity for m in self.members)

    @property
    def proposal_ids(self) -> tuple[str, ...]:
        """Proposal ids in creation order."""
        return tuple(p.proposal_id for p in self.proposals)

    def is_admin(self, identity: bytes) -> bool:
        """Check whether identity may administer this group."""
        return identity == self.creator or identity in self.admins

    def is_member(self, identity: bytes) -> bool:
        """Check whether identity is a member of this group."""
        return any(m.identity == identity for m in self.members)

    def has_proposal(self, proposal_id: str) -> bool:
        """Check whether proposal_id is listed in this group."""
        return any(p.proposal_id == proposal_id for p in self.proposals)
