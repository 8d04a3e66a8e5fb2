"""Domain services: identity derivation, addressing, tally and transitions."""

from chatdao.domain.services.addressing import (
    account_address,
    derive_address,
    group_address,
    proposal_address,
    registry_address,
)
from chatdao.domain.services.governance_state_machine import GovernanceStateMachine
from chatdao.domain.services.identity_derivation import (
    DerivedKeypair,
    IdentityDeriver,
    derive_keypair,
    derive_seed,
    validate_secret,
)
from chatdao.domain.services.tally_calculator import tally_proposal

__all__: list[str] = [
    "GovernanceStateMachine",
    "IdentityDeriver",
    "DerivedKeypair",
    "derive_keypair",
    "derive_seed",
    "validate_secret",
    "derive_address",
    "registry_address",
    "group_address",
    "proposal_address",
    "account_address",
    "tally_proposal",
]
