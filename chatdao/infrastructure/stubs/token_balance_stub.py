"""Deterministic stub for TokenBalanceOracleProtocol.

Balances are configured per identity; identities never configured hold
zero tokens. The oracle can be switched to "unavailable" to exercise the
BalanceUnavailable path.
"""

from __future__ import annotations

from chatdao.domain.ports.token_balance import BalanceOracleUnavailable


class FixedBalanceOracle:
    """In-memory token balance oracle.

    Example:
        >>> oracle = FixedBalanceOracle({alice: 500})
        >>> oracle.get_token_balance(alice)
        500
    """

    def __init__(self, balances: dict[bytes, int] | None = None) -> None:
        self._balances: dict[bytes, int] = dict(balances or {})
        self._unavailable_reason: str | None = None
        self.lookups: list[bytes] = []

    def get_token_balance(self, identity: bytes) -> int:
        self.lookups.append(identity)
        if self._unavailable_reason is not None:
            raise BalanceOracleUnavailable(self._unavailable_reason)
        return self._balances.get(identity, 0)

    def set_balance(self, identity: bytes, balance: int) -> None:
        """Set the balance returned for identity."""
        self._balances[identity] = balance

    def make_unavailable(self, reason: str = "oracle offline") -> None:
        """Make every lookup raise BalanceOracleUnavailable."""
        self._unavailable_reason = reason

    def make_available(self) -> None:
        """Restore normal lookups."""
        self._unavailable_reason = None
