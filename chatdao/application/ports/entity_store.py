"""Entity store port - raw record persistence.

The store is the boundary to the ledger/runtime that persists governance
state. It knows nothing about entity shapes: it maps 32-byte addresses to
raw byte buffers. Buffers handed back may be longer than the record they
hold (pre-allocated storage is zero-padded); the codec tolerates that.

Contract:
- get() returns the stored bytes or None when nothing lives at the address
- commit() applies every write or none of them; a reader never observes a
  partially applied commit
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping


class EntityStoreProtocol(ABC):
    """Abstract raw record store keyed by derived address."""

    @abstractmethod
    async def get(self, address: bytes) -> bytes | None:
        """Return the raw buffer stored at address.

        Args:
            address: 32-byte derived storage address.

        Returns:
            The stored bytes (possibly padded), or None if absent.
        """
        ...

    @abstractmethod
    async def commit(self, writes: Mapping[bytes, bytes]) -> None:
        """Atomically persist a set of whole-record writes.

        Args:
            writes: Mapping of address -> encoded record. Each write
                replaces the full record at its address.

        Raises:
            Exception: Implementation-specific persistence failure. On
                failure no write in the batch is visible.
        """
        ...
