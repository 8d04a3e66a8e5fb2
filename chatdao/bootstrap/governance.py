"""Bootstrap wiring for governance dependencies.

Call startup_governance() once at process start: it loads .env, reads the
configuration (failing fast on a missing or weak secret), configures
logging and builds the identity deriver. Getters then hand out
process-wide singletons; set_* and reset_* exist for tests.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from dotenv import load_dotenv

from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.application.ports.time_authority import TimeAuthorityProtocol
from chatdao.application.services.account_service import AccountService
from chatdao.application.services.governance_service import GovernanceService
from chatdao.application.services.query_service import GovernanceQueryService
from chatdao.bootstrap.logging import configure_structlog
from chatdao.config.governance_config import GovernanceConfig
from chatdao.domain.ports.token_balance import TokenBalanceOracleProtocol
from chatdao.domain.services.governance_state_machine import GovernanceStateMachine
from chatdao.domain.services.identity_derivation import IdentityDeriver
from chatdao.infrastructure.stubs.entity_store_stub import InMemoryEntityStore
from chatdao.infrastructure.stubs.system_time_authority import SystemTimeAuthority

log = structlog.get_logger()

_config: GovernanceConfig | None = None
_entity_store: EntityStoreProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_balance_oracle: TokenBalanceOracleProtocol | None = None
_identity_deriver: IdentityDeriver | None = None
_state_machine: GovernanceStateMachine | None = None
_governance_service: GovernanceService | None = None
_account_service: AccountService | None = None
_query_service: GovernanceQueryService | None = None


def load_environment(dotenv_path: str | Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Existing environment variables take precedence over the file.

    Returns:
        True if a file was found and loaded.
    """
    return load_dotenv(dotenv_path=dotenv_path, override=False)


def startup_governance(dotenv_path: str | Path | None = None) -> GovernanceConfig:
    """Load configuration and build startup-critical dependencies.

    Raises:
        MissingSecretError: CHATDAO_SECRET_SEED is unset.
        WeakSecretError: CHATDAO_SECRET_SEED is too short.
    """
    global _config
    load_environment(dotenv_path)
    config = GovernanceConfig.from_environment()
    configure_structlog(config.environment)
    _config = config
    get_identity_deriver()
    log.info(
        "governance_started",
        environment=config.environment,
        max_groups=config.limits.max_groups,
    )
    return config


def get_governance_config() -> GovernanceConfig:
    """Get governance configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = GovernanceConfig.from_environment()
    return _config


def get_entity_store() -> EntityStoreProtocol:
    """Get entity store instance."""
    global _entity_store
    if _entity_store is None:
        _entity_store = InMemoryEntityStore()
    return _entity_store


def get_time_authority() -> TimeAuthorityProtocol:
    """Get time authority instance."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_balance_oracle() -> TokenBalanceOracleProtocol | None:
    """Get the token balance oracle, if one was configured."""
    return _balance_oracle


def get_identity_deriver() -> IdentityDeriver:
    """Get identity deriver built from the configured secret."""
    global _identity_deriver
    if _identity_deriver is None:
        config = get_governance_config()
        _identity_deriver = IdentityDeriver(
            secret=config.secret_seed,
            min_secret_bytes=config.min_secret_bytes,
        )
    return _identity_deriver


def get_state_machine() -> GovernanceStateMachine:
    """Get the governance state machine."""
    global _state_machine
    if _state_machine is None:
        _state_machine = GovernanceStateMachine(
            limits=get_governance_config().limits,
            balance_oracle=get_balance_oracle(),
        )
    return _state_machine


def get_governance_service() -> GovernanceService:
    """Get governance service instance."""
    global _governance_service
    if _governance_service is None:
        _governance_service = GovernanceService(
            store=get_entity_store(),
            time_authority=get_time_authority(),
            state_machine=get_state_machine(),
        )
    return _governance_service


def get_account_service() -> AccountService:
    """Get account service instance."""
    global _account_service
    if _account_service is None:
        _account_service = AccountService(
            store=get_entity_store(),
            time_authority=get_time_authority(),
            deriver=get_identity_deriver(),
            state_machine=get_state_machine(),
        )
    return _account_service


def get_query_service() -> GovernanceQueryService:
    """Get governance query service instance."""
    global _query_service
    if _query_service is None:
        _query_service = GovernanceQueryService(
            store=get_entity_store(),
            time_authority=get_time_authority(),
        )
    return _query_service


def reset_governance_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _config
    global _entity_store
    global _time_authority
    global _balance_oracle
    global _identity_deriver
    global _state_machine
    global _governance_service
    global _account_service
    global _query_service

    _config = None
    _entity_store = None
    _time_authority = None
    _balance_oracle = None
    _identity_deriver = None
    _state_machine = None
    _governance_service = None
    _account_service = None
    _query_service = None


def set_governance_config(config: GovernanceConfig) -> None:
    """Set custom configuration for testing."""
    global _config
    _config = config


def set_entity_store(store: EntityStoreProtocol) -> None:
    """Set custom entity store."""
    global _entity_store
    _entity_store = store


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority


def set_balance_oracle(oracle: TokenBalanceOracleProtocol) -> None:
    """Set the token balance oracle used for weighted voting.

    Must be called before the state machine is first built.
    """
    global _balance_oracle
    _balance_oracle = oracle
