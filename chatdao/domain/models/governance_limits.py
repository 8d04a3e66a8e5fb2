"""Storage and policy limits for governance entities.

Defaults mirror the space budget of the on-chain program the records were
originally laid out for: a registry sized for 20 groups and fixed maximum
lengths for every text field.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class GovernanceLimits:
    """Limits enforced by the governance state machine.

    Attributes:
        max_group_id_length: Maximum group id length (characters).
        max_group_name_length: Maximum group name length.
        max_group_description_length: Maximum group description length.
        max_proposal_id_length: Maximum proposal id length.
        max_title_length: Maximum proposal title length.
        max_proposal_description_length: Maximum proposal description length.
        max_choices: Maximum number of choices on a proposal.
        max_choice_length: Maximum length of one choice label.
        max_external_id_length: Maximum external user id length.
        max_display_name_length: Maximum display name length.
        max_groups: Registry capacity.
        max_members: Member capacity of one group.
        max_voting_duration: Longest permitted voting window.
    """

    max_group_id_length: int = 50
    max_group_name_length: int = 100
    max_group_description_length: int = 500
    max_proposal_id_length: int = 50
    max_title_length: int = 200
    max_proposal_description_length: int = 1000
    max_choices: int = 10
    max_choice_length: int = 100
    max_external_id_length: int = 64
    max_display_name_length: int = 64
    max_groups: int = 20
    max_members: int = 100
    max_voting_duration: timedelta = timedelta(days=30)

    def __post_init__(self) -> None:
        """Validate limit values."""
        for name in (
            "max_group_id_length",
            "max_group_name_length",
            "max_group_description_length",
            "max_proposal_id_length",
            "max_title_length",
            "max_proposal_description_length",
            "max_choice_length",
            "max_external_id_length",
            "max_display_name_length",
            "max_groups",
            "max_members",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.max_choices < 2:
            raise ValueError(f"max_choices must be at least 2, got {self.max_choices}")
        # choice indexes are stored as a single byte
        if self.max_choices > 256:
            raise ValueError(f"max_choices must be at most 256, got {self.max_choices}")
        if self.max_voting_duration <= timedelta(0):
            raise ValueError("max_voting_duration must be positive")


DEFAULT_GOVERNANCE_LIMITS = GovernanceLimits()
