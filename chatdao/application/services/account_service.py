"""Account service - binds external user ids to derived identities.

login_or_create_account() is idempotent. The account address is derived
from the external id, so the first call creates the account and every
later call is a login that returns the same account and public key.
"""

from __future__ import annotations

import asyncio

from chatdao.application.ports.entity_store import EntityStoreProtocol
from chatdao.application.ports.time_authority import TimeAuthorityProtocol
from chatdao.application.services.base import LoggingMixin, RecordLoaderMixin
from chatdao.domain.codec import EntityShape, encode
from chatdao.domain.models.transition import AccountLogin
from chatdao.domain.services.addressing import account_address
from chatdao.domain.services.governance_state_machine import GovernanceStateMachine
from chatdao.domain.services.identity_derivation import IdentityDeriver


class AccountService(LoggingMixin, RecordLoaderMixin):
    """Login-or-create for chat-platform users.

    Example:
        >>> service = AccountService(store, time_authority, deriver)
        >>> first = await service.login_or_create_account("tg:1001", "Alice")
        >>> again = await service.login_or_create_account("tg:1001", "Alice")
        >>> first.account.public_key == again.account.public_key
        True
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        time_authority: TimeAuthorityProtocol,
        deriver: IdentityDeriver,
        state_machine: GovernanceStateMachine | None = None,
    ) -> None:
        """Initialize the account service.

        Args:
            store: Raw record store.
            time_authority: Source of the current time.
            deriver: Identity deriver holding the validated secret.
            state_machine: Transition rules (limits for external id and
                display name).
        """
        self._store = store
        self._time = time_authority
        self._deriver = deriver
        self._machine = state_machine or GovernanceStateMachine()
        self._mutation_lock = asyncio.Lock()
        self._init_logger(component="identity")

    async def login_or_create_account(
        self,
        external_id: str,
        display_name: str = "",
    ) -> AccountLogin:
        """Return the account bound to external_id, creating it if needed.

        A changed, non-empty display name is stored; otherwise a login
        writes nothing.

        Raises:
            InvalidExternalIdError: If external_id is empty.
            FieldTooLongError: If external_id or display_name is too long.
            RecordDecodeError: If the stored account cannot be decoded.
        """
        log = self._log_operation("login_or_create_account", external_id=external_id)
        address = account_address(external_id)
        async with self._mutation_lock:
            with self._rejections_logged(log):
                existing = await self._load_optional(address, EntityShape.USER_ACCOUNT)
                result = self._machine.login_or_create_account(
                    existing,  # type: ignore[arg-type]
                    external_id,
                    display_name,
                    self._deriver,
                    self._time.utcnow(),
                )
            if result.changed:
                await self._store.commit({address: encode(result.account)})

        log.info(
            "account_created" if result.created else "account_login",
            public_key=result.account.public_key_hex,
            display_name_changed=result.changed and not result.created,
        )
        return result

    async def get_public_key(self, external_id: str) -> bytes | None:
        """Return the bound public key, or None if no account exists.

        Raises:
            RecordDecodeError: If the stored account cannot be decoded.
        """
        account = await self._load_optional(
            account_address(external_id), EntityShape.USER_ACCOUNT
        )
        if account is None:
            return None
        return account.public_key  # type: ignore[union-attr]
