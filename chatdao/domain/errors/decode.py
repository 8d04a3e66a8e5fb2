"""Decode error raised when a mutation depends on an undecodable record.

Listings report decode failures per item as values. Only a transition that
cannot proceed without the record turns the failure into this exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chatdao.domain.exceptions import ChatDaoError

if TYPE_CHECKING:
    from chatdao.domain.codec.result import DecodeFailure


class RecordDecodeError(ChatDaoError):
    """Raised when a required stored record fails to decode.

    Attributes:
        address: Hex-encoded storage address of the record.
        failure: The decode failure describing what went wrong.
    """

    ERROR_CODE = "RECORD_DECODE_FAILED"
    CATEGORY = "decode"

    def __init__(self, address: bytes, failure: DecodeFailure) -> None:
        self.address = address.hex()
        self.failure = failure
        super().__init__(
            f"Record {self.address} failed to decode: "
            f"{failure.kind.value} ({failure.detail})"
        )
