"""User account entity binding an external user id to a derived key."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chatdao.domain.models.identity import validate_identity, validate_timestamp


@dataclass(frozen=True, eq=True)
class UserAccount:
    """Binding of an external (chat-platform) identity to a public key.

    Exactly one account exists per external id; the storage address is
    derived from the external id so a second account cannot be created.

    Attributes:
        account_id: Storage address derived from external_id.
        external_id: Platform-qualified user id (e.g. "tg:1001").
        public_key: Derived Ed25519 public key (32 bytes).
        created_at: When the account was first created.
        display_name: Denormalized display name; may be updated.
    """

    account_id: bytes
    external_id: str
    public_key: bytes
    created_at: datetime
    display_name: str = ""

    def __post_init__(self) -> None:
        validate_identity(self.account_id, "account_id")
        if not self.external_id:
            raise ValueError("external_id must be non-empty")
        validate_identity(self.public_key, "public_key")
        validate_timestamp(self.created_at, "created_at")

    @property
    def public_key_hex(self) -> str:
        """Hex-encoded public key for display."""
        return self.public_key.hex()
