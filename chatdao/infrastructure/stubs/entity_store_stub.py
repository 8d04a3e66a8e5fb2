"""In-memory stub for EntityStoreProtocol.

Simulates ledger storage closely enough for the governance core:
- Records are stored whole, keyed by 32-byte address
- Optional zero padding emulates storage pre-allocated larger than the record
- commit() applies every write or none
- Raw bytes can be injected to exercise decode failures
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from chatdao.application.ports.entity_store import EntityStoreProtocol


class EntityStoreCommitError(Exception):
    """Raised by the stub when a commit failure was requested."""


class InMemoryEntityStore(EntityStoreProtocol):
    """In-memory implementation of EntityStoreProtocol.

    Attributes:
        commit_count: Number of successful commits.
    """

    def __init__(self, padding: int = 0) -> None:
        """Initialize empty store.

        Args:
            padding: Zero bytes appended to every record written through
                commit(), as pre-allocated storage would return them.
        """
        if padding < 0:
            raise ValueError(f"padding must be non-negative, got {padding}")
        self._records: dict[bytes, bytes] = {}
        self._padding = padding
        self._lock = asyncio.Lock()
        self._fail_next_commit = False
        self.commit_count = 0

    async def get(self, address: bytes) -> bytes | None:
        return self._records.get(address)

    async def commit(self, writes: Mapping[bytes, bytes]) -> None:
        async with self._lock:
            if self._fail_next_commit:
                self._fail_next_commit = False
                raise EntityStoreCommitError("commit failure requested by test")
            staged = {
                address: bytes(data) + bytes(self._padding)
                for address, data in writes.items()
            }
            self._records.update(staged)
            self.commit_count += 1

    # =========================================================================
    # Test helpers
    # =========================================================================

    def put_raw(self, address: bytes, data: bytes) -> None:
        """Store raw bytes at address, bypassing the codec."""
        self._records[address] = bytes(data)

    def get_raw(self, address: bytes) -> bytes | None:
        """Return the raw bytes at address without awaiting."""
        return self._records.get(address)

    def fail_next_commit(self) -> None:
        """Make the next commit() raise without applying any write."""
        self._fail_next_commit = True

    def snapshot(self) -> dict[bytes, bytes]:
        """Return a copy of every stored record."""
        return dict(self._records)

    def clear(self) -> None:
        """Remove all records."""
        self._records.clear()
        self.commit_count = 0
