"""Tally calculation for proposals.

A tally is a pure read. Totals are always reported; an outcome is only
declared once the caller-supplied time has reached the voting end.

Tie policy: when two or more choices share the highest weight at close,
no single winner is declared and every tied choice is reported. There is
no numeric tie-break (lowest index, earliest ballot, etc.).
"""

from __future__ import annotations

from datetime import datetime

from chatdao.domain.models.proposal import Proposal
from chatdao.domain.models.tally import ChoiceTotal, TallyOutcome, TallyResult


def tally_proposal(proposal: Proposal, now: datetime) -> TallyResult:
    """Compute per-choice totals and, if closed, the outcome.

    Args:
        proposal: The proposal to tally.
        now: Caller-supplied current time.

    Returns:
        TallyResult. outcome is OPEN while now < voting_end; otherwise
        WINNER, TIE or NO_VOTES.
    """
    totals = tuple(
        ChoiceTotal(index=index, label=label, weight=weight)
        for index, (label, weight) in enumerate(
            zip(proposal.choices, proposal.choice_weights)
        )
    )
    ballot_count = len(proposal.votes)

    if proposal.is_open_at(now):
        return TallyResult(
            proposal_id=proposal.proposal_id,
            totals=totals,
            ballot_count=ballot_count,
            is_closed=False,
            outcome=TallyOutcome.OPEN,
        )

    top_weight = max(proposal.choice_weights)
    if ballot_count == 0 or top_weight == 0:
        return TallyResult(
            proposal_id=proposal.proposal_id,
            totals=totals,
            ballot_count=ballot_count,
            is_closed=True,
            outcome=TallyOutcome.NO_VOTES,
        )

    leaders = tuple(t.index for t in totals if t.weight == top_weight)
    return TallyResult(
        proposal_id=proposal.proposal_id,
        totals=totals,
        ballot_count=ballot_count,
        is_closed=True,
        outcome=TallyOutcome.WINNER if len(leaders) == 1 else TallyOutcome.TIE,
        leading_choices=leaders,
    )
