"""DAO registry entity.

The registry is the single addressable root of a deployment. It records
every group it has issued, by reference: groups persist independently and
the registry only holds their ids and storage addresses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from chatdao.domain.models.identity import validate_identity, validate_timestamp


@dataclass(frozen=True, eq=True)
class GroupInfo:
    """Registry entry pointing at a stored group.

    Attributes:
        group_id: Unique, immutable group identifier.
        creator: Identity that created the group.
        address: Storage address of the group record.
    """

    group_id: str
    creator: bytes
    address: bytes

    def __post_init__(self) -> None:
        if not self.group_id:
            raise ValueError("group_id must be non-empty")
        validate_identity(self.creator, "creator")
        validate_identity(self.address, "address")


@dataclass(frozen=True, eq=True)
class Registry:
    """Singleton registry of groups.

    Attributes:
        authority: Identity that initialized the registry.
        created_at: When the registry was initialized.
        groups: Issued groups in creation order. Ids are unique.
    """

    authority: bytes
    created_at: datetime
    groups: tuple[GroupInfo, ...] = field(default=())

    def __post_init__(self) -> None:
        validate_identity(self.authority, "authority")
        validate_timestamp(self.created_at, "created_at")
        ids = [info.group_id for info in self.groups]
        if len(ids) != len(set(ids)):
            raise ValueError("registry group ids must be unique")

    @property
    def group_ids(self) -> tuple[str, ...]:
        """Ids of all issued groups, in creation order."""
        return tuple(info.group_id for info in self.groups)

    def has_group(self, group_id: str) -> bool:
        """Check whether group_id has been issued."""
        return any(info.group_id == group_id for info in self.groups)

    def find_group(self, group_id: str) -> GroupInfo | None:
        """Return the registry entry for group_id, or None."""
        for info in self.groups:
            if info.group_id == group_id:
                return info
        return None
