"""Results of governance transitions.

A transition never edits an entity in place. It returns the validated
successor entities together with the event that describes the change;
the caller persists all successors in one atomic write or none of them.
"""

from __future__ import annotations

from dataclasses import dataclass

from chatdao.domain.models.governance_event import GovernanceEvent
from chatdao.domain.models.group import Group
from chatdao.domain.models.proposal import Proposal, VoteRecord
from chatdao.domain.models.registry import Registry
from chatdao.domain.models.user_account import UserAccount


@dataclass(frozen=True)
class RegistryInitialization:
    """Successor state of initialize()."""

    registry: Registry
    event: GovernanceEvent


@dataclass(frozen=True)
class GroupCreation:
    """Successor state of create_group()."""

    registry: Registry
    group: Group
    event: GovernanceEvent


@dataclass(frozen=True)
class GroupUpdate:
    """Successor state of a membership or admin change."""

    group: Group
    event: GovernanceEvent


@dataclass(frozen=True)
class ProposalCreation:
    """Successor state of create_proposal()."""

    group: Group
    proposal: Proposal
    event: GovernanceEvent


@dataclass(frozen=True)
class VoteAcceptance:
    """Successor state of vote()."""

    proposal: Proposal
    vote: VoteRecord
    event: GovernanceEvent


@dataclass(frozen=True)
class AccountLogin:
    """Result of login_or_create_account().

    Attributes:
        account: The bound account (new, existing or renamed).
        created: True when the account did not exist before.
        changed: True when the stored record must be written.
        event: ACCOUNT_CREATED or ACCOUNT_LOGIN.
    """

    account: UserAccount
    created: bool
    changed: bool
    event: GovernanceEvent
