"""State codec: persisted layouts for Registry, Group, Proposal and UserAccount.

Usage:
    from chatdao.domain.codec import EntityShape, decode, encode

    raw = encode(group)
    result = decode(raw + bytes(256), EntityShape.GROUP)
    if result.is_ok:
        group = result.entity
    else:
        log.warning("group_decode_failed", kind=result.kind.value)
"""

from chatdao.domain.codec.entity_codec import (
    HEADER_SIZE,
    Entity,
    decode,
    encode,
    shape_of,
)
from chatdao.domain.codec.result import (
    DecodeErrorKind,
    DecodeFailure,
    DecodeResult,
    Decoded,
)
from chatdao.domain.codec.shapes import (
    DISCRIMINATOR_SIZE,
    KNOWN_VERSIONS,
    EntityShape,
    compute_discriminator,
    current_discriminator,
    identify_discriminator,
)

__all__: list[str] = [
    "HEADER_SIZE",
    "DISCRIMINATOR_SIZE",
    "KNOWN_VERSIONS",
    "Entity",
    "EntityShape",
    "encode",
    "decode",
    "shape_of",
    "compute_discriminator",
    "current_discriminator",
    "identify_discriminator",
    "Decoded",
    "DecodeFailure",
    "DecodeErrorKind",
    "DecodeResult",
]
