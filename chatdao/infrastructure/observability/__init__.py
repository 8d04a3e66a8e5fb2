"""Observability infrastructure: structured logging and correlation ids.

Usage:
    from chatdao.infrastructure.observability import (
        configure_structlog,
        correlation_scope,
    )

    # At startup
    configure_structlog(environment="production")

    # Per chat command
    with correlation_scope():
        ...
"""

from chatdao.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from chatdao.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
    hex_encode_bytes,
    redact_key_material,
)

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "hex_encode_bytes",
    "redact_key_material",
    "set_correlation_id",
]
