"""Tally result value objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TallyOutcome(Enum):
    """Outcome of a tally.

    Values:
        OPEN: Voting still open; no winner is declared.
        WINNER: Closed with a single highest-weighted choice.
        TIE: Closed with two or more choices sharing the highest weight.
        NO_VOTES: Closed without any ballot; no winner.
    """

    OPEN = "open"
    WINNER = "winner"
    TIE = "tie"
    NO_VOTES = "no_votes"


@dataclass(frozen=True, eq=True)
class ChoiceTotal:
    """Accumulated weight for a single choice."""

    index: int
    label: str
    weight: int


@dataclass(frozen=True, eq=True)
class TallyResult:
    """Per-choice totals and, once closed, the outcome.

    Attributes:
        proposal_id: The tallied proposal.
        totals: One entry per choice, in choice order.
        ballot_count: Number of accepted ballots.
        is_closed: Whether the tally was evaluated at or after voting end.
        outcome: See TallyOutcome.
        leading_choices: Indexes sharing the highest weight once closed;
            empty while open or when no ballot was cast.
    """

    proposal_id: str
    totals: tuple[ChoiceTotal, ...]
    ballot_count: int
    is_closed: bool
    outcome: TallyOutcome
    leading_choices: tuple[int, ...] = ()

    @property
    def winner(self) -> int | None:
        """Index of the declared winner, or None (open, tie or no votes)."""
        if self.outcome is TallyOutcome.WINNER:
            return self.leading_choices[0]
        return None

    @property
    def tied_choices(self) -> tuple[int, ...]:
        """Indexes of tied choices when the outcome is a tie."""
        if self.outcome is TallyOutcome.TIE:
            return self.leading_choices
        return ()

    def as_label_map(self) -> dict[str, int]:
        """Return {label: weight} in choice order."""
        return {total.label: total.weight for total in self.totals}
