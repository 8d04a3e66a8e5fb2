"""Application DTOs - pydantic read views of governance state."""

from chatdao.application.dtos.governance_views import (
    AccountView,
    ChoiceTotalView,
    DecodeFailureView,
    GroupListing,
    GroupView,
    MemberView,
    ProposalListing,
    ProposalView,
    TallyView,
    VoteView,
)

__all__: list[str] = [
    "AccountView",
    "ChoiceTotalView",
    "DecodeFailureView",
    "GroupListing",
    "GroupView",
    "MemberView",
    "ProposalListing",
    "ProposalView",
    "TallyView",
    "VoteView",
]
