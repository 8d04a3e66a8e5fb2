"""Authorization errors.

Authorization is always re-verified against the group's own admin and
member sets. A front-end's claim that a user is a chat admin is never
accepted as proof.
"""

from __future__ import annotations

from chatdao.domain.errors.base import AuthorizationError


class NotAdminError(AuthorizationError):
    """Raised when the caller is not an admin of the group.

    Attributes:
        identity: Hex-encoded caller identity.
        group_id: The group the caller tried to administer.
    """

    ERROR_CODE = "NOT_ADMIN"

    def __init__(self, identity: bytes, group_id: str) -> None:
        self.identity = identity.hex()
        self.group_id = group_id
        super().__init__(
            f"Identity {self.identity} is not an admin of group {group_id}",
            identity=self.identity,
            group_id=group_id,
        )


class NotMemberError(AuthorizationError):
    """Raised when an identity is not a member of the group.

    Used both for voters outside the group and for removing an identity
    that was never a member.
    """

    ERROR_CODE = "NOT_MEMBER"

    def __init__(self, identity: bytes, group_id: str) -> None:
        self.identity = identity.hex()
        self.group_id = group_id
        super().__init__(
            f"Identity {self.identity} is not a member of group {group_id}",
            identity=self.identity,
            group_id=group_id,
        )
