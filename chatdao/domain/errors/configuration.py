"""Configuration errors (fatal at startup).

These are raised while the process is being wired together, never from
inside a governance transition. A process that hits one must not serve.
"""

from __future__ import annotations

from chatdao.domain.exceptions import ChatDaoError


class ConfigurationError(ChatDaoError):
    """Base class for fatal configuration problems."""


class MissingSecretError(ConfigurationError):
    """Raised when the identity derivation secret is not configured."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"{setting} is not set; identity derivation requires a secret")


class WeakSecretError(ConfigurationError):
    """Raised when the identity derivation secret is shorter than required."""

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Identity secret is {length} bytes; at least {minimum} bytes required"
        )
