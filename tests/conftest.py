"""
Pytest configuration and shared fixtures for chatdao tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Unit tests go in tests/unit/<layer>/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

import pytest

from chatdao.domain.services.governance_state_machine import GovernanceStateMachine
from chatdao.domain.services.identity_derivation import IdentityDeriver
from chatdao.infrastructure.stubs import FixedBalanceOracle, InMemoryEntityStore
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_factories import T0, TEST_SECRET, make_identity


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from chatdao import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Time authority frozen at the shared test epoch T0."""
    return FakeTimeAuthority(frozen_at=T0)


@pytest.fixture
def entity_store() -> InMemoryEntityStore:
    """Empty in-memory entity store."""
    return InMemoryEntityStore()


@pytest.fixture
def balance_oracle() -> FixedBalanceOracle:
    """Balance oracle with no balances configured."""
    return FixedBalanceOracle()


@pytest.fixture
def deriver() -> IdentityDeriver:
    """Identity deriver with the shared test secret."""
    return IdentityDeriver(secret=TEST_SECRET)


@pytest.fixture
def state_machine(balance_oracle: FixedBalanceOracle) -> GovernanceStateMachine:
    """State machine with default limits and the stub oracle."""
    return GovernanceStateMachine(balance_oracle=balance_oracle)


@pytest.fixture
def admin() -> bytes:
    return make_identity("admin")


@pytest.fixture
def alice() -> bytes:
    return make_identity("alice")


@pytest.fixture
def bob() -> bytes:
    return make_identity("bob")
