"""Domain ports - capabilities the domain depends on but does not implement."""

from chatdao.domain.ports.token_balance import (
    BalanceOracleUnavailable,
    TokenBalanceOracleProtocol,
)

__all__: list[str] = ["BalanceOracleUnavailable", "TokenBalanceOracleProtocol"]
