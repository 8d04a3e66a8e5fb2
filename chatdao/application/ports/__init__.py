"""Application ports - interfaces for infrastructure adapters.

Adapters implementing these ports live in chatdao.infrastructure.
"""

from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.application.ports.time_authority import TimeAuthorityProtocol
from chatdao.domain.ports.token_balance import (
    BalanceOracleUnavailable,
    TokenBalanceOracleProtocol,
)

__all__: list[str] = [
    "EntityStoreProtocol",
    "TimeAuthorityProtocol",
    "TokenBalanceOracleProtocol",
    "BalanceOracleUnavailable",
]
