"""Structured logging configuration with structlog.

Production renders one JSON object per line; any other environment uses
the colored console renderer. Two processors run before rendering:

- raw 32-byte identities (and any other bytes value) are hex-encoded, so
  services may log keys as they hold them
- values under key-material names (the derivation secret, seeds, private
  keys) are replaced with a redaction marker

Log Entry Format (production):
    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "governance_event",
        "correlation_id": "uuid",
        "service": "GovernanceService",
        "component": "governance",
        "actor": "9f2c...",
        ...additional context
    }

Usage:
    from chatdao.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from chatdao.infrastructure.observability.correlation import correlation_id_processor

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

REDACTED = "[redacted]"

# Event keys whose values are never rendered
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"secret", "derivation_secret", "seed", "private_key", "signing_key"}
)


def _get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL and then INFO."""
    name = (level_name or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, name, logging.INFO)


def redact_key_material(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace values logged under key-material names."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def hex_encode_bytes(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render bytes values (identities, addresses) as lowercase hex."""
    for key, value in event_dict.items():
        if isinstance(value, (bytes, bytearray, memoryview)):
            event_dict[key] = bytes(value).hex()
    return event_dict


def configure_structlog(
    environment: str = "production", log_level: str | None = None
) -> None:
    """Configure structlog for the process.

    Should be called once at startup, before any service logs.

    Args:
        environment: 'production' for JSON output, anything else for a
            colored console renderer.
        log_level: Level name; defaults to $LOG_LEVEL, then INFO.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        cast(Processor, redact_key_material),
        cast(Processor, hex_encode_bytes),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "governance"
) -> structlog.BoundLogger:
    """Get a logger with service and component already bound.

    Services get theirs through LoggingMixin._init_logger.
    """
    return structlog.get_logger().bind(
        service=service_name,
        component=component,
    )
