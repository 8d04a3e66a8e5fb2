"""Identity primitives shared by all governance entities.

An identity is the raw 32-byte Ed25519 public key of a participant. It is
hex-encoded whenever it leaves the domain (logs, views, error details).
"""

from __future__ import annotations

from datetime import datetime, timezone

# Ed25519 public keys are exactly 32 bytes
PUBLIC_KEY_LENGTH: int = 32


def validate_identity(value: object, field_name: str) -> None:
    """Validate that value is a 32-byte public key.

    Args:
        value: The value to check.
        field_name: Field name used in the error message.

    Raises:
        ValueError: If value is not 32 bytes.
    """
    if not isinstance(value, bytes):
        raise ValueError(f"{field_name} must be bytes, got {type(value).__name__}")
    if len(value) != PUBLIC_KEY_LENGTH:
        raise ValueError(
            f"{field_name} must be {PUBLIC_KEY_LENGTH} bytes, got {len(value)}"
        )


def validate_timestamp(value: object, field_name: str) -> None:
    """Validate that value is a timezone-aware datetime.

    Raises:
        ValueError: If value is not a datetime or is naive.
    """
    if not isinstance(value, datetime):
        raise ValueError(f"{field_name} must be datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        raise ValueError(f"{field_name} must be timezone-aware")


def to_utc(value: datetime) -> datetime:
    """Normalize a timezone-aware datetime to UTC."""
    return value.astimezone(timezone.utc)
