"""Governance process configuration.

Read once at startup. A missing or weak identity secret is fatal here, at
process start, never per call.

Environment Variables:
- CHATDAO_SECRET_SEED: Identity derivation secret (required, UTF-8)
- CHATDAO_MIN_SECRET_BYTES: Minimum secret length in bytes (default: 32)
- CHATDAO_ENVIRONMENT: production | development | test (default: production)
- CHATDAO_MAX_GROUPS: Registry capacity (default: 20)
- CHATDAO_MAX_MEMBERS: Member capacity per group (default: 100)
- CHATDAO_MAX_VOTING_HOURS: Longest voting window in hours (default: 720)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta

from chatdao.domain.models.governance_limits import (
    DEFAULT_GOVERNANCE_LIMITS,
    GovernanceLimits,
)
from chatdao.domain.services.identity_derivation import (
    DEFAULT_MIN_SECRET_BYTES,
    validate_secret,
)

SECRET_SEED_ENV = "CHATDAO_SECRET_SEED"
MIN_SECRET_BYTES_ENV = "CHATDAO_MIN_SECRET_BYTES"
ENVIRONMENT_ENV = "CHATDAO_ENVIRONMENT"
MAX_GROUPS_ENV = "CHATDAO_MAX_GROUPS"
MAX_MEMBERS_ENV = "CHATDAO_MAX_MEMBERS"
MAX_VOTING_HOURS_ENV = "CHATDAO_MAX_VOTING_HOURS"

VALID_ENVIRONMENTS = frozenset({"production", "development", "test"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_secret_env(key: str) -> bytes | None:
    value = os.environ.get(key)
    if value is None:
        return None
    return value.encode("utf-8")


@dataclass(frozen=True)
class GovernanceConfig:
    """Configuration for the governance core.

    Attributes:
        secret_seed: Identity derivation secret. Excluded from repr.
        min_secret_bytes: Minimum accepted secret length.
        environment: Deployment environment; selects the log renderer.
        limits: Field and capacity limits for the state machine.
    """

    secret_seed: bytes | None = field(repr=False)
    min_secret_bytes: int = DEFAULT_MIN_SECRET_BYTES
    environment: str = "production"
    limits: GovernanceLimits = DEFAULT_GOVERNANCE_LIMITS

    def __post_init__(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a numeric or enum setting is invalid.
            MissingSecretError: If the secret is absent or empty.
            WeakSecretError: If the secret is shorter than min_secret_bytes.
        """
        if self.min_secret_bytes < 1:
            raise ValueError(
                f"min_secret_bytes must be positive, got {self.min_secret_bytes}"
            )
        if self.environment not in VALID_ENVIRONMENTS:
            raise ValueError(
                f"environment must be one of {sorted(VALID_ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )
        validate_secret(self.secret_seed, self.min_secret_bytes, SECRET_SEED_ENV)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_environment(cls) -> "GovernanceConfig":
        """Create config from environment variables with defaults.

        Returns:
            GovernanceConfig with values from environment or defaults.

        Raises:
            MissingSecretError: CHATDAO_SECRET_SEED unset or empty.
            WeakSecretError: CHATDAO_SECRET_SEED too short.
            ValueError: An override produces invalid limits.
        """
        defaults = DEFAULT_GOVERNANCE_LIMITS
        default_hours = int(defaults.max_voting_duration.total_seconds() // 3600)
        limits = GovernanceLimits(
            max_groups=_get_int_env(MAX_GROUPS_ENV, defaults.max_groups),
            max_members=_get_int_env(MAX_MEMBERS_ENV, defaults.max_members),
            max_voting_duration=timedelta(
                hours=_get_int_env(MAX_VOTING_HOURS_ENV, default_hours)
            ),
        )
        return cls(
            secret_seed=_get_secret_env(SECRET_SEED_ENV),
            min_secret_bytes=_get_int_env(MIN_SECRET_BYTES_ENV, DEFAULT_MIN_SECRET_BYTES),
            environment=os.environ.get(ENVIRONMENT_ENV, "production").strip().lower(),
            limits=limits,
        )
