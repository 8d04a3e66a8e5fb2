"""Deterministic storage addresses for governance records.

Each record lives at a 32-byte address derived from fixed seeds, in the
manner of program-derived addresses: the registry from a constant, a group
from its id, a proposal from its group and proposal ids, and a user
account from the external user id. Because the account address is a
function of the external id, two accounts for one external id cannot exist.
"""

from __future__ import annotations

import blake3

ADDRESS_DOMAIN_TAG: bytes = b"chatdao:address:v1"

REGISTRY_SEED: bytes = b"dao_registry"
GROUP_SEED: bytes = b"group"
PROPOSAL_SEED: bytes = b"proposal"
USER_ACCOUNT_SEED: bytes = b"user_account"


def derive_address(*seeds: bytes) -> bytes:
    """Derive a 32-byte address from length-prefixed seeds."""
    hasher = blake3.blake3(ADDRESS_DOMAIN_TAG)
    for seed in seeds:
        hasher.update(len(seed).to_bytes(4, "little"))
        hasher.update(seed)
    return hasher.digest()


def registry_address() -> bytes:
    """Address of the singleton registry."""
    return derive_address(REGISTRY_SEED)


def group_address(group_id: str) -> bytes:
    """Address of the group with group_id."""
    return derive_address(GROUP_SEED, group_id.encode("utf-8"))


def proposal_address(group_id: str, proposal_id: str) -> bytes:
    """Address of proposal_id within group_id."""
    return derive_address(
        PROPOSAL_SEED, group_id.encode("utf-8"), proposal_id.encode("utf-8")
    )


def account_address(external_id: str) -> bytes:
    """Address of the user account bound to external_id."""
    return derive_address(USER_ACCOUNT_SEED, external_id.encode("utf-8"))
