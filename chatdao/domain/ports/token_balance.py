"""Token balance oracle port.

Weighted voting reads the voter's token balance from an external source.
The state machine depends only on this protocol so that tests can inject
a deterministic stub without touching transition logic.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class BalanceOracleUnavailable(Exception):
    """Raised by an oracle that cannot answer right now.

    Implementations raise this instead of returning a default; the state
    machine turns it into BalanceUnavailableError and records nothing.
    """


@runtime_checkable
class TokenBalanceOracleProtocol(Protocol):
    """Synchronous token balance lookup."""

    def get_token_balance(self, identity: bytes) -> int:
        """Return the token balance of identity.

        Args:
            identity: 32-byte public key of the voter.

        Returns:
            Non-negative integer balance in the token's base unit.

        Raises:
            BalanceOracleUnavailable: If the balance cannot be determined.
        """
        ...
