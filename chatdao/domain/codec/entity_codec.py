"""State codec for the four persisted entity shapes.

Record layout:

    discriminator (8 bytes) | body_length (u32 LE) | body | ignored tail

Storage is frequently pre-allocated larger than the record, so anything
after `body_length` bytes of body is padding and is ignored. Inside the
body, fields appear in a stable order; fields added later are appended,
and an older body that ends before an appended field decodes that field
to its default.

decode() never raises for bad input; see chatdao.domain.codec.result.
"""

from __future__ import annotations

import struct
from typing import Callable, Union

from chatdao.domain.codec.buffer import (
    BodyOverrun,
    BodyReader,
    BodyValueError,
    BodyWriter,
)
from chatdao.domain.codec.result import (
    DecodeErrorKind,
    DecodeFailure,
    DecodeResult,
    Decoded,
)
from chatdao.domain.codec.shapes import (
    DISCRIMINATOR_SIZE,
    EntityShape,
    current_discriminator,
    identify_discriminator,
)
from chatdao.domain.models.group import Group, GroupMember, ProposalInfo, VotingMode
from chatdao.domain.models.proposal import Proposal, VoteRecord
from chatdao.domain.models.registry import GroupInfo, Registry
from chatdao.domain.models.user_account import UserAccount

Entity = Union[Registry, Group, Proposal, UserAccount]

BODY_LENGTH_SIZE: int = 4

# discriminator + body length prefix
HEADER_SIZE: int = DISCRIMINATOR_SIZE + BODY_LENGTH_SIZE


def shape_of(entity: Entity) -> EntityShape:
    """Return the persisted shape of an entity instance.

    Raises:
        TypeError: If entity is not a persisted entity type.
    """
    if isinstance(entity, Registry):
        return EntityShape.REGISTRY
    if isinstance(entity, Group):
        return EntityShape.GROUP
    if isinstance(entity, Proposal):
        return EntityShape.PROPOSAL
    if isinstance(entity, UserAccount):
        return EntityShape.USER_ACCOUNT
    raise TypeError(f"not a persisted entity: {type(entity).__name__}")


# =============================================================================
# Body writers
# =============================================================================


def _write_registry(writer: BodyWriter, registry: Registry) -> None:
    writer.key(registry.authority)

    def write_info(info: GroupInfo) -> None:
        writer.string(info.group_id)
        writer.key(info.creator)
        writer.key(info.address)

    writer.vector(registry.groups, write_info)
    writer.timestamp(registry.created_at)


def _write_group(writer: BodyWriter, group: Group) -> None:
    writer.string(group.group_id)
    writer.string(group.name)
    writer.string(group.description)
    writer.key(group.creator)
    writer.vector(group.admins, writer.key)

    def write_member(member: GroupMember) -> None:
        writer.key(member.identity)
        writer.timestamp(member.joined_at)

    writer.vector(group.members, write_member)

    def write_proposal(info: ProposalInfo) -> None:
        writer.string(info.proposal_id)
        writer.timestamp(info.created_at)

    writer.vector(group.proposals, write_proposal)
    writer.u8(group.voting_mode.value)
    writer.timestamp(group.created_at)


def _write_proposal(writer: BodyWriter, proposal: Proposal) -> None:
    writer.string(proposal.proposal_id)
    writer.string(proposal.group_id)
    writer.string(proposal.title)
    writer.string(proposal.description)
    writer.vector(proposal.choices, writer.string)
    writer.vector(proposal.choice_weights, writer.u64)
    writer.key(proposal.creator)
    writer.u8(proposal.voting_mode.value)
    writer.timestamp(proposal.created_at)
    writer.timestamp(proposal.voting_end)

    def write_vote(vote: VoteRecord) -> None:
        writer.key(vote.voter)
        writer.u8(vote.choice)
        writer.u64(vote.weight)
        writer.timestamp(vote.timestamp)

    writer.vector(proposal.votes, write_vote)


def _write_user_account(writer: BodyWriter, account: UserAccount) -> None:
    writer.key(account.account_id)
    writer.string(account.external_id)
    writer.key(account.public_key)
    writer.timestamp(account.created_at)
    # appended field
    writer.string(account.display_name)


# =============================================================================
# Body readers
# =============================================================================


def _read_voting_mode(reader: BodyReader) -> VotingMode:
    tag = reader.u8()
    try:
        return VotingMode(tag)
    except ValueError as exc:
        raise BodyValueError(f"unknown voting mode tag {tag}") from exc


def _read_registry(reader: BodyReader, version: int) -> Registry:
    authority = reader.key()

    def read_info() -> GroupInfo:
        return GroupInfo(
            group_id=reader.string(),
            creator=reader.key(),
            address=reader.key(),
        )

    groups = reader.vector(read_info)
    created_at = reader.timestamp()
    return Registry(authority=authority, groups=groups, created_at=created_at)


def _read_group(reader: BodyReader, version: int) -> Group:
    group_id = reader.string()
    name = reader.string()
    description = reader.string()
    creator = reader.key()
    admins = reader.vector(reader.key)

    def read_member() -> GroupMember:
        return GroupMember(identity=reader.key(), joined_at=reader.timestamp())

    members = reader.vector(read_member)

    def read_proposal() -> ProposalInfo:
        return ProposalInfo(proposal_id=reader.string(), created_at=reader.timestamp())

    proposals = reader.vector(read_proposal)
    voting_mode = _read_voting_mode(reader)
    created_at = reader.timestamp()
    return Group(
        group_id=group_id,
        name=name,
        description=description,
        creator=creator,
        admins=admins,
        members=members,
        proposals=proposals,
        voting_mode=voting_mode,
        created_at=created_at,
    )


def _read_proposal(reader: BodyReader, version: int) -> Proposal:
    proposal_id = reader.string()
    group_id = reader.string()
    title = reader.string()
    description = reader.string()
    choices = reader.vector(reader.string)
    choice_weights = reader.vector(reader.u64)
    creator = reader.key()
    voting_mode = _read_voting_mode(reader)
    created_at = reader.timestamp()
    voting_end = reader.timestamp()

    def read_vote() -> VoteRecord:
        return VoteRecord(
            voter=reader.key(),
            choice=reader.u8(),
            weight=reader.u64(),
            timestamp=reader.timestamp(),
        )

    votes = reader.vector(read_vote)
    return Proposal(
        proposal_id=proposal_id,
        group_id=group_id,
        title=title,
        description=description,
        choices=choices,
        choice_weights=choice_weights,
        creator=creator,
        voting_mode=voting_mode,
        created_at=created_at,
        voting_end=voting_end,
        votes=votes,
    )


def _read_user_account(reader: BodyReader, version: int) -> UserAccount:
    account_id = reader.key()
    external_id = reader.string()
    public_key = reader.key()
    created_at = reader.timestamp()
    # Records written before display names existed end here.
    display_name = "" if reader.at_end() else reader.string()
    return UserAccount(
        account_id=account_id,
        external_id=external_id,
        public_key=public_key,
        created_at=created_at,
        display_name=display_name,
    )


_WRITERS: dict[EntityShape, Callable[[BodyWriter, Entity], None]] = {
    EntityShape.REGISTRY: _write_registry,  # type: ignore[dict-item]
    EntityShape.GROUP: _write_group,  # type: ignore[dict-item]
    EntityShape.PROPOSAL: _write_proposal,  # type: ignore[dict-item]
    EntityShape.USER_ACCOUNT: _write_user_account,  # type: ignore[dict-item]
}

_READERS: dict[EntityShape, Callable[[BodyReader, int], Entity]] = {
    EntityShape.REGISTRY: _read_registry,
    EntityShape.GROUP: _read_group,
    EntityShape.PROPOSAL: _read_proposal,
    EntityShape.USER_ACCOUNT: _read_user_account,
}


# =============================================================================
# Public API
# =============================================================================


def encode(entity: Entity) -> bytes:
    """Encode an entity into its persisted layout.

    Args:
        entity: Registry, Group, Proposal or UserAccount.

    Returns:
        discriminator | body_length | body, with no padding.

    Raises:
        TypeError: If entity is not a persisted entity type.
        ValueError: If a field cannot be represented (e.g. weight >= 2**64).
    """
    shape = shape_of(entity)
    writer = BodyWriter()
    try:
        _WRITERS[shape](writer, entity)
    except (struct.error, OverflowError) as exc:
        raise ValueError(f"cannot encode {shape.value}: {exc}") from exc
    body = writer.getvalue()
    return current_discriminator(shape) + len(body).to_bytes(BODY_LENGTH_SIZE, "little") + body


def decode(buffer: bytes | bytearray | memoryview, expected_shape: EntityShape) -> DecodeResult:
    """Decode a stored record of the expected shape.

    Args:
        buffer: Raw stored bytes, possibly zero-padded past the record.
        expected_shape: The shape the caller expects at this address.

    Returns:
        Decoded with the typed entity, or DecodeFailure with:
        - TRUNCATED if the buffer is shorter than the 12-byte header
        - SHAPE_MISMATCH if the discriminator is not one of the expected
          shape's known discriminators
        - CORRUPT if a length prefix or field overruns its bytes, or a
          field holds an impossible value
    """
    view = memoryview(buffer).cast("B")
    if len(view) < HEADER_SIZE:
        return DecodeFailure(
            kind=DecodeErrorKind.TRUNCATED,
            detail=f"{len(view)} bytes is shorter than the {HEADER_SIZE}-byte header",
        )

    identified = identify_discriminator(bytes(view[:DISCRIMINATOR_SIZE]))
    if identified is None:
        return DecodeFailure(
            kind=DecodeErrorKind.SHAPE_MISMATCH,
            detail=f"unknown discriminator, expected {expected_shape.value}",
        )
    shape, version = identified
    if shape is not expected_shape:
        return DecodeFailure(
            kind=DecodeErrorKind.SHAPE_MISMATCH,
            detail=f"record is {shape.value} v{version}, expected {expected_shape.value}",
        )

    body_length = int.from_bytes(view[DISCRIMINATOR_SIZE:HEADER_SIZE], "little")
    available = len(view) - HEADER_SIZE
    if body_length > available:
        return DecodeFailure(
            kind=DecodeErrorKind.CORRUPT,
            detail=f"body length {body_length} exceeds the {available} bytes present",
        )

    reader = BodyReader(view[HEADER_SIZE : HEADER_SIZE + body_length])
    try:
        entity = _READERS[shape](reader, version)
    except BodyOverrun as exc:
        return DecodeFailure(kind=DecodeErrorKind.CORRUPT, detail=str(exc))
    except (BodyValueError, ValueError) as exc:
        return DecodeFailure(
            kind=DecodeErrorKind.CORRUPT,
            detail=f"invalid {shape.value}: {exc}",
        )
    return Decoded(entity=entity, version=version)
