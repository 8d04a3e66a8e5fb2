"""Wall-clock implementation of TimeAuthorityProtocol."""

from __future__ import annotations

from datetime import datetime, timezone

from chatdao.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority backed by the system clock (always UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)
