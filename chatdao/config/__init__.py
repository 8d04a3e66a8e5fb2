"""Process configuration for chatdao."""

from chatdao.config.governance_config import GovernanceConfig

__all__: list[str] = ["GovernanceConfig"]
