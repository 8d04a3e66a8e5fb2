"""Time authority port.

Governance transitions never read the wall clock themselves. Services
obtain "now" from an injected TimeAuthorityProtocol and pass it into the
pure state machine, so voting closure is evaluated against a single,
substitutable time source.

For production:
    Use SystemTimeAuthority from chatdao.infrastructure.stubs

For testing:
    Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            async def vote(self, ...) -> None:
                now = self._time.utcnow()  # NOT datetime.now()
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current time with timezone information."""
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time.

        Returns:
            Current datetime in UTC timezone. Must be timezone-aware.
        """
        ...
