"""Errors raised when an external collaborator cannot answer."""

from __future__ import annotations

from chatdao.domain.errors.base import DependencyUnavailableError


class BalanceUnavailableError(DependencyUnavailableError):
    """Raised when the token balance oracle cannot provide a weight.

    A weighted ballot never falls back to a zero or unit weight; the vote
    is rejected and nothing is recorded.
    """

    ERROR_CODE = "BALANCE_UNAVAILABLE"

    def __init__(self, voter: bytes, reason: str = "") -> None:
        super().__init__(
            f"Token balance for {voter.hex()} is unavailable"
            + (f": {reason}" if reason else ""),
            voter=voter.hex(),
            reason=reason,
        )
