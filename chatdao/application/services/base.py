"""Base service mixins: structured logging and record loading.

Usage:
    from chatdao.application.services.base import LoggingMixin

    class MyService(LoggingMixin):
        def __init__(self, store: EntityStoreProtocol) -> None:
            self._store = store
            self._init_logger()

        async def do_something(self) -> None:
            log = self._log_operation("do_something", group_id="treasury")
            log.info("operation_started")
            # ... do work ...
            log.info("operation_completed")
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.domain.codec import DecodeFailure, EntityShape, decode
from chatdao.domain.codec.entity_codec import Entity
from chatdao.domain.errors import (
    AuthorizationError,
    GovernanceError,
    RecordDecodeError,
)
from chatdao.infrastructure.observability.correlation import get_correlation_id
from chatdao.infrastructure.observability.logging import get_logger_for_service


class LoggingMixin:
    """Mixin providing structured logging for services.

    The logger is bound with:
    - service: The class name of the service
    - component: The component type (default: "governance")

    Each operation gets:
    - operation: The name of the operation being performed
    - correlation_id: From context for tracing one chat command end to end
    - Any additional context passed to _log_operation()

    Attributes:
        _log: The structlog BoundLogger for this service instance.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "governance") -> None:
        """Initialize the logger with service name binding.

        Should be called in __init__ after setting up dependencies.
        """
        self._log = get_logger_for_service(self.__class__.__name__, component)

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Create operation-scoped logger with correlation ID.

        Args:
            operation: Name of the operation being performed.
            **context: Additional context to bind to the logger.

        Returns:
            BoundLogger with operation and correlation context.
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )

    def _log_rejection(
        self,
        log: structlog.BoundLogger,
        error: GovernanceError,
    ) -> None:
        """Log a governance rejection.

        Authorization failures are security-relevant and logged at warning
        level; every other rejection is a normal outcome logged at info.
        """
        if isinstance(error, AuthorizationError):
            log.warning(
                "security_authorization_rejected",
                error_code=error.error_code,
                **error.details,
            )
        else:
            log.info(
                "operation_rejected",
                error_code=error.error_code,
                category=error.category,
                **error.details,
            )

    @contextmanager
    def _rejections_logged(self, log: structlog.BoundLogger) -> Iterator[None]:
        """Log and re-raise rejections and fatal decode failures."""
        try:
            yield
        except GovernanceError as exc:
            self._log_rejection(log, exc)
            raise
        except RecordDecodeError as exc:
            log.error(
                "record_decode_failed",
                address=exc.address,
                kind=exc.failure.kind.value,
                detail=exc.failure.detail,
            )
            raise


class RecordLoaderMixin:
    """Mixin for services that read raw records through the entity store.

    Requires `self._store` to be an EntityStoreProtocol.
    """

    _store: EntityStoreProtocol

    async def _load_optional(
        self,
        address: bytes,
        shape: EntityShape,
    ) -> Entity | None:
        """Load and decode the record at address.

        Returns:
            The decoded entity, or None if nothing is stored there.

        Raises:
            RecordDecodeError: If a stored record fails to decode.
        """
        raw = await self._store.get(address)
        if raw is None:
            return None
        result = decode(raw, shape)
        if isinstance(result, DecodeFailure):
            raise RecordDecodeError(address, result)
        return result.entity
