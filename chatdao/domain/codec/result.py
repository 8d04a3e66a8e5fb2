"""Tagged decode results.

Decoding never raises for bad input. It returns either a Decoded value
carrying the typed entity or a DecodeFailure naming one of the three
failure kinds. Callers branch on `is_ok` (or isinstance) and must handle
both arms.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeVar, Union

EntityT = TypeVar("EntityT")


class DecodeErrorKind(Enum):
    """Why a buffer could not be decoded.

    Values:
        TRUNCATED: Shorter than the shape's minimum fixed header.
        CORRUPT: A length prefix or field runs past the available bytes,
            or a field holds an impossible value.
        SHAPE_MISMATCH: The discriminator does not belong to the
            expected shape.
    """

    TRUNCATED = "truncated"
    CORRUPT = "corrupt"
    SHAPE_MISMATCH = "shape_mismatch"


@dataclass(frozen=True)
class Decoded(Generic[EntityT]):
    """Successful decode carrying the typed entity."""

    entity: EntityT
    version: int

    @property
    def is_ok(self) -> Literal[True]:
        return True


@dataclass(frozen=True)
class DecodeFailure:
    """Failed decode.

    Attributes:
        kind: Failure kind.
        detail: Human-readable description for logs and views.
    """

    kind: DecodeErrorKind
    detail: str

    @property
    def is_ok(self) -> Literal[False]:
        return False


DecodeResult = Union[Decoded[EntityT], DecodeFailure]
