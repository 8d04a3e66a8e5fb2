"""Domain models for chatdao governance entities."""

from chatdao.domain.models.governance_event import GovernanceEvent, GovernanceEventType
from chatdao.domain.models.governance_limits import (
    DEFAULT_GOVERNANCE_LIMITS,
    GovernanceLimits,
)
from chatdao.domain.models.group import Group, GroupMember, ProposalInfo, VotingMode
from chatdao.domain.models.identity import PUBLIC_KEY_LENGTH
from chatdao.domain.models.proposal import MIN_CHOICES, Proposal, VoteRecord
from chatdao.domain.models.registry import GroupInfo, Registry
from chatdao.domain.models.tally import ChoiceTotal, TallyOutcome, TallyResult
from chatdao.domain.models.transition import (
    AccountLogin,
    GroupCreation,
    GroupUpdate,
    ProposalCreation,
    RegistryInitialization,
    VoteAcceptance,
)
from chatdao.domain.models.user_account import UserAccount

__all__: list[str] = [
    "PUBLIC_KEY_LENGTH",
    "GovernanceLimits",
    "DEFAULT_GOVERNANCE_LIMITS",
    "MIN_CHOICES",
    "Registry",
    "GroupInfo",
    "Group",
    "GroupMember",
    "ProposalInfo",
    "VotingMode",
    "Proposal",
    "VoteRecord",
    "UserAccount",
    "ChoiceTotal",
    "TallyOutcome",
    "TallyResult",
    "GovernanceEvent",
    "GovernanceEventType",
    "RegistryInitialization",
    "GroupCreation",
    "GroupUpdate",
    "ProposalCreation",
    "VoteAcceptance",
    "AccountLogin",
]
