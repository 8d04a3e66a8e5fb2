"""Correlation ids for tracing one chat command end to end.

A chat command ("/vote p1 0" from one user) fans out into several store
reads, one commit and a handful of log lines. The id lives in a
ContextVar so it follows the command across await points, and concurrent
commands handled on one event loop never see each other's id.

Usage:
    with correlation_scope() as correlation_id:
        await governance.vote(voter, group_id, proposal_id, choice)

    # structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any
from uuid import uuid4

# Empty string means "not set"
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4 string)."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, or "" if none was set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> Token[str]:
    """Set the correlation ID; the token restores the previous one."""
    return _correlation_id.set(correlation_id)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Run one chat command under a correlation id.

    Args:
        correlation_id: Id supplied by the front-end; generated when omitted.

    Yields:
        The id in effect inside the block. The previous id (if any) is
        restored on exit, including when the command raises.
    """
    token = _correlation_id.set(correlation_id or generate_correlation_id())
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding the context's correlation_id.

    An id bound explicitly on the logger wins over the context one.
    """
    correlation_id = get_correlation_id()
    if correlation_id and not event_dict.get("correlation_id"):
        event_dict["correlation_id"] = correlation_id
    return event_dict
