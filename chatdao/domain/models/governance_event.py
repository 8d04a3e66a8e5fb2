"""Governance events emitted by state transitions.

Every successful transition returns exactly one event describing what
happened. Events are not persisted by the core; the application layer
logs them and hands them to the host alongside the new entity state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class GovernanceEventType(Enum):
    """Kinds of governance events."""

    REGISTRY_INITIALIZED = "registry_initialized"
    GROUP_CREATED = "group_created"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    ADMIN_GRANTED = "admin_granted"
    ADMIN_REVOKED = "admin_revoked"
    PROPOSAL_CREATED = "proposal_created"
    VOTE_CAST = "vote_cast"
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_LOGIN = "account_login"


@dataclass(frozen=True, eq=True)
class GovernanceEvent:
    """Record of a committed transition.

    Attributes:
        event_type: What happened.
        actor: Identity that caused the transition.
        timestamp: Caller-supplied time of the transition.
        group_id: Affected group, if any.
        proposal_id: Affected proposal, if any.
        payload: Extra event-specific fields (read-only).
    """

    event_type: GovernanceEventType
    actor: bytes
    timestamp: datetime
    group_id: str | None = None
    proposal_id: str | None = None
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten the event for structured logging."""
        data: dict[str, Any] = {
            "event_type": self.event_type.value,
            "actor": self.actor.hex(),
            "timestamp": self.timestamp.isoformat(),
        }
        if self.group_id is not None:
            data["group_id"] = self.group_id
        if self.proposal_id is not None:
            data["proposal_id"] = self.proposal_id
        data.update(self.payload)
        return data
