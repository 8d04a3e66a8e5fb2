"""Deterministic identity derivation.

Turns an external (chat-platform) user id plus a process-wide secret into
an Ed25519 keypair. No private key material is ever stored: the same
inputs always reproduce the same keypair, and without the secret the
external id alone reveals nothing about it.

Derivation:
    seed = BLAKE3(tag || len(external_id) || external_id || len(secret) || secret)[:32]
    keypair = Ed25519 key generation from seed

Lengths are encoded as u32 little-endian so that distinct (external_id,
secret) pairs can never concatenate to the same preimage.

Security Requirements:
- The secret is validated once, when the deriver is constructed at startup
- A missing or short secret is a ConfigurationError, never a per-call error
- Logs carry the external id only, never seeds or keys
"""

from __future__ import annotations

from dataclasses import dataclass, field

import blake3
import structlog
from nacl.signing import SigningKey

from chatdao.domain.errors.configuration import MissingSecretError, WeakSecretError
from chatdao.domain.errors.validation import InvalidExternalIdError

log = structlog.get_logger()

# Domain separation tag; changing it changes every derived identity
IDENTITY_DOMAIN_TAG: bytes = b"chatdao:identity-derivation:v1"

# Ed25519 seeds are exactly 32 bytes
SEED_SIZE: int = 32

# Minimum secret length accepted by default
DEFAULT_MIN_SECRET_BYTES: int = 32


@dataclass(frozen=True, eq=True)
class DerivedKeypair:
    """Ed25519 keypair derived from an external id.

    Attributes:
        public_key: 32-byte Ed25519 public key (the participant's identity).
        seed: 32-byte private seed. Excluded from repr.
    """

    public_key: bytes
    seed: bytes = field(repr=False)

    @property
    def signing_key(self) -> SigningKey:
        """PyNaCl signing key for this keypair."""
        return SigningKey(self.seed)

    def sign(self, message: bytes) -> bytes:
        """Sign message and return the 64-byte detached signature."""
        return self.signing_key.sign(message).signature


def _length_prefixed(value: bytes) -> bytes:
    return len(value).to_bytes(4, "little") + value


def derive_seed(external_id: str, secret: bytes) -> bytes:
    """Derive the 32-byte Ed25519 seed for external_id.

    Pure function; performs no validation of the secret.
    """
    preimage = (
        IDENTITY_DOMAIN_TAG
        + _length_prefixed(external_id.encode("utf-8"))
        + _length_prefixed(secret)
    )
    return blake3.blake3(preimage).digest(length=SEED_SIZE)


def derive_keypair(external_id: str, secret: bytes) -> DerivedKeypair:
    """Derive the keypair bound to external_id.

    Args:
        external_id: Platform-qualified user id, e.g. "tg:1001".
        secret: Process-wide derivation secret.

    Returns:
        The deterministic keypair for (external_id, secret).
    """
    seed = derive_seed(external_id, secret)
    signing_key = SigningKey(seed)
    return DerivedKeypair(public_key=signing_key.verify_key.encode(), seed=seed)


def validate_secret(
    secret: bytes | None,
    min_secret_bytes: int = DEFAULT_MIN_SECRET_BYTES,
    setting: str = "CHATDAO_SECRET_SEED",
) -> bytes:
    """Validate the derivation secret.

    Args:
        secret: The configured secret, or None if absent.
        min_secret_bytes: Minimum accepted length in bytes.
        setting: Name of the setting, used in the error message.

    Returns:
        The secret, unchanged.

    Raises:
        MissingSecretError: If the secret is absent or empty.
        WeakSecretError: If the secret is shorter than min_secret_bytes.
    """
    if not secret:
        raise MissingSecretError(setting)
    if len(secret) < min_secret_bytes:
        raise WeakSecretError(length=len(secret), minimum=min_secret_bytes)
    return secret


class IdentityDeriver:
    """Derives participant keypairs with a validated, process-wide secret.

    Construct once at startup; construction fails fast when the secret is
    missing or too short. derive() is pure and safe to call concurrently.

    Example:
        >>> deriver = IdentityDeriver(secret=b"s" * 32)
        >>> keypair = deriver.derive("tg:1001")
        >>> keypair == deriver.derive("tg:1001")
        True
    """

    def __init__(
        self,
        secret: bytes | None,
        min_secret_bytes: int = DEFAULT_MIN_SECRET_BYTES,
    ) -> None:
        """Initialize the deriver.

        Args:
            secret: Process-wide derivation secret.
            min_secret_bytes: Minimum accepted secret length.

        Raises:
            MissingSecretError: If the secret is absent.
            WeakSecretError: If the secret is too short.
        """
        self._secret = validate_secret(secret, min_secret_bytes)

    def derive(self, external_id: str) -> DerivedKeypair:
        """Derive the keypair for external_id.

        Raises:
            InvalidExternalIdError: If external_id is empty.
        """
        if not external_id or not external_id.strip():
            raise InvalidExternalIdError(external_id)
        log.debug("identity_derived", external_id=external_id)
        return derive_keypair(external_id, self._secret)
