"""Unit tests for tally_proposal."""

from __future__ import annotations

from datetime import timedelta

from chatdao.domain.models.tally import TallyOutcome
from chatdao.domain.services.tally_calculator import tally_proposal
from tests.helpers.governance_factories import T0, make_proposal, make_vote

END = T0 + timedelta(hours=1)


class TestOpenTally:
    """Before the voting end only totals are reported."""

    def test_open_reports_totals_without_winner(self) -> None:
        proposal = make_proposal(votes=(make_vote("alice", 0),))

        result = tally_proposal(proposal, T0 + timedelta(minutes=59))

        assert result.outcome is TallyOutcome.OPEN
        assert result.is_closed is False
        assert result.as_label_map() == {"Yes": 1, "No": 0}
        assert result.winner is None
        assert result.leading_choices == ()

    def test_tally_does_not_change_proposal(self) -> None:
        proposal = make_proposal(votes=(make_vote("alice", 1),))
        tally_proposal(proposal, END)
        assert proposal.choice_weights == (0, 1)


class TestClosedTally:
    """At and after the voting end an outcome is declared."""

    def test_single_winner_at_end(self) -> None:
        proposal = make_proposal(votes=(make_vote("alice", 0), make_vote("bob", 0), make_vote("carol", 1)))

        result = tally_proposal(proposal, END)

        assert result.outcome is TallyOutcome.WINNER
        assert result.winner == 0
        assert result.ballot_count == 3
        assert result.tied_choices == ()

    def test_weighted_minority_of_voters_can_win(self) -> None:
        proposal = make_proposal(
            votes=(make_vote("alice", 0), make_vote("bob", 0), make_vote("whale", 1, weight=500))
        )

        result = tally_proposal(proposal, END + timedelta(days=1))

        assert result.winner == 1
        assert result.as_label_map() == {"Yes": 2, "No": 500}

    def test_tie_reports_every_tied_choice(self) -> None:
        proposal = make_proposal(
            choices=("A", "B", "C"),
            votes=(make_vote("alice", 2), make_vote("bob", 0), make_vote("carol", 1)),
        )

        result = tally_proposal(proposal, END)

        assert result.outcome is TallyOutcome.TIE
        assert result.winner is None
        assert result.tied_choices == (0, 1, 2)

    def test_tie_between_two_of_three(self) -> None:
        proposal = make_proposal(
            choices=("A", "B", "C"),
            votes=(
                make_vote("alice", 2),
                make_vote("bob", 1),
                make_vote("carol", 0),
                make_vote("dan", 2),
                make_vote("erin", 1),
            ),
        )

        result = tally_proposal(proposal, END)

        assert result.outcome is TallyOutcome.TIE
        assert result.tied_choices == (1, 2)

    def test_no_votes(self) -> None:
        result = tally_proposal(make_proposal(), END)

        assert result.outcome is TallyOutcome.NO_VOTES
        assert result.is_closed is True
        assert result.winner is None
        assert result.as_label_map() == {"Yes": 0, "No": 0}
