"""
Integration test configuration.

Integration tests wire the real services together the way bootstrap does,
over the in-memory entity store and a controllable time authority.

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(wired: GovernanceWiring) -> None:
        ...
"""

from collections.abc import Generator

import pytest

from chatdao.bootstrap.governance import (
    get_account_service,
    get_entity_store,
    get_governance_service,
    get_query_service,
    reset_governance_dependencies,
    set_balance_oracle,
    set_entity_store,
    set_governance_config,
    set_time_authority,
)
from chatdao.config.governance_config import GovernanceConfig
from chatdao.infrastructure.stubs import FixedBalanceOracle, InMemoryEntityStore
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_factories import T0, TEST_SECRET
from tests.helpers.governance_wiring import GovernanceWiring


@pytest.fixture
def wired() -> Generator[GovernanceWiring, None, None]:
    """Bootstrap singletons over padded in-memory storage, reset afterwards."""
    reset_governance_dependencies()
    store = InMemoryEntityStore(padding=128)
    clock = FakeTimeAuthority(frozen_at=T0)
    oracle = FixedBalanceOracle()
    set_governance_config(GovernanceConfig(secret_seed=TEST_SECRET, environment="test"))
    set_entity_store(store)
    set_time_authority(clock)
    set_balance_oracle(oracle)

    assert get_entity_store() is store
    yield GovernanceWiring(
        governance=get_governance_service(),
        accounts=get_account_service(),
        queries=get_query_service(),
        store=store,
        clock=clock,
        oracle=oracle,
    )

    reset_governance_dependencies()
