"""In-memory adapters for development and tests."""

from chatdao.infrastructure.stubs.entity_store_stub import (
    EntityStoreCommitError,
    InMemoryEntityStore,
)
from chatdao.infrastructure.stubs.system_time_authority import SystemTimeAuthority
from chatdao.infrastructure.stubs.token_balance_stub import FixedBalanceOracle

__all__: list[str] = [
    "EntityStoreCommitError",
    "FixedBalanceOracle",
    "InMemoryEntityStore",
    "SystemTimeAuthority",
]
