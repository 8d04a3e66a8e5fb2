"""Persisted entity shapes and their discriminators.

Every stored record starts with an 8-byte discriminator that names its
shape and layout version. Discriminators are the first 8 bytes of the
BLAKE3 digest of "chatdao:account:<Shape>:v<version>".

Layout evolution rule: new fields are appended to the end of a shape's
body, never inserted. Appending a field does not require a new version;
a new version is only minted for an incompatible change.
"""

from __future__ import annotations

from enum import Enum

import blake3

DISCRIMINATOR_SIZE: int = 8


class EntityShape(Enum):
    """The four persisted entity shapes."""

    REGISTRY = "DaoRegistry"
    GROUP = "Group"
    PROPOSAL = "Proposal"
    USER_ACCOUNT = "UserAccount"


def compute_discriminator(shape: EntityShape, version: int) -> bytes:
    """Compute the discriminator for a shape/version pair.

    Args:
        shape: The entity shape.
        version: Layout version (starting at 1).

    Returns:
        8-byte discriminator.
    """
    preimage = f"chatdao:account:{shape.value}:v{version}".encode("utf-8")
    return blake3.blake3(preimage).digest()[:DISCRIMINATOR_SIZE]


# Layout versions each shape can decode. Encoding always uses the highest.
KNOWN_VERSIONS: dict[EntityShape, tuple[int, ...]] = {
    EntityShape.REGISTRY: (1,),
    EntityShape.GROUP: (1,),
    EntityShape.PROPOSAL: (1,),
    EntityShape.USER_ACCOUNT: (1,),
}

# discriminator -> (shape, version)
_DISCRIMINATORS: dict[bytes, tuple[EntityShape, int]] = {
    compute_discriminator(shape, version): (shape, version)
    for shape, versions in KNOWN_VERSIONS.items()
    for version in versions
}


def current_version(shape: EntityShape) -> int:
    """Return the version used when encoding `shape`."""
    return max(KNOWN_VERSIONS[shape])


def current_discriminator(shape: EntityShape) -> bytes:
    """Return the discriminator used when encoding `shape`."""
    return compute_discriminator(shape, current_version(shape))


def identify_discriminator(discriminator: bytes) -> tuple[EntityShape, int] | None:
    """Resolve a discriminator to its (shape, version), or None if unknown."""
    return _DISCRIMINATORS.get(bytes(discriminator))
