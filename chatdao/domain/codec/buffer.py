"""Little-endian primitive writer/reader for entity bodies.

Primitives follow Borsh conventions: fixed-width little-endian integers,
u32-length-prefixed UTF-8 strings and u32-count-prefixed vectors. The
reader works on a read-only memoryview and never copies or mutates the
caller's buffer beyond the slices it returns.
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from chatdao.domain.models.identity import PUBLIC_KEY_LENGTH

ItemT = TypeVar("ItemT")

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


class BodyOverrun(Exception):
    """A read or length prefix ran past the end of the body."""


class BodyValueError(Exception):
    """A field holds a value that cannot be represented."""


def datetime_to_micros(value: datetime) -> int:
    """Convert an aware datetime to integer microseconds since the epoch."""
    return (value - _EPOCH) // _MICROSECOND


def micros_to_datetime(value: int) -> datetime:
    """Convert microseconds since the epoch to an aware UTC datetime."""
    return _EPOCH + timedelta(microseconds=value)


class BodyWriter:
    """Accumulates an entity body."""

    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def u8(self, value: int) -> None:
        self._parts.append(_U8.pack(value))

    def u32(self, value: int) -> None:
        self._parts.append(_U32.pack(value))

    def u64(self, value: int) -> None:
        self._parts.append(_U64.pack(value))

    def i64(self, value: int) -> None:
        self._parts.append(_I64.pack(value))

    def key(self, value: bytes) -> None:
        if len(value) != PUBLIC_KEY_LENGTH:
            raise ValueError(f"key must be {PUBLIC_KEY_LENGTH} bytes, got {len(value)}")
        self._parts.append(bytes(value))

    def string(self, value: str) -> None:
        raw = value.encode("utf-8")
        self.u32(len(raw))
        self._parts.append(raw)

    def timestamp(self, value: datetime) -> None:
        self.i64(datetime_to_micros(value))

    def vector(self, items: Sequence[ItemT], write_item: Callable[[ItemT], None]) -> None:
        self.u32(len(items))
        for item in items:
            write_item(item)

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class BodyReader:
    """Sequential reader over an entity body.

    Raises BodyOverrun when a fixed field or length prefix needs more bytes
    than remain, and BodyValueError for undecodable values.
    """

    def __init__(self, body: memoryview) -> None:
        self._body = body
        self._offset = 0

    @property
    def remaining(self) -> int:
        """Bytes left in the body."""
        return len(self._body) - self._offset

    def at_end(self) -> bool:
        """True when every body byte has been consumed."""
        return self.remaining == 0

    def _take(self, size: int) -> memoryview:
        if size > self.remaining:
            raise BodyOverrun(
                f"need {size} bytes at offset {self._offset}, {self.remaining} remain"
            )
        chunk = self._body[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def u8(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def u64(self) -> int:
        return _U64.unpack(self._take(_U64.size))[0]

    def i64(self) -> int:
        return _I64.unpack(self._take(_I64.size))[0]

    def key(self) -> bytes:
        return bytes(self._take(PUBLIC_KEY_LENGTH))

    def string(self) -> str:
        length = self.u32()
        raw = self._take(length)
        try:
            return str(raw, "utf-8")
        except UnicodeDecodeError as exc:
            raise BodyValueError(f"invalid UTF-8 string: {exc.reason}") from exc

    def timestamp(self) -> datetime:
        micros = self.i64()
        try:
            return micros_to_datetime(micros)
        except OverflowError as exc:
            raise BodyValueError(f"timestamp out of range: {micros}") from exc

    def vector(self, read_item: Callable[[], ItemT]) -> tuple[ItemT, ...]:
        count = self.u32()
        # Every element occupies at least one byte; reject impossible counts
        # before looping over them.
        if count > self.remaining:
            raise BodyOverrun(
                f"vector claims {count} items, only {self.remaining} bytes remain"
            )
        return tuple(read_item() for _ in range(count))
