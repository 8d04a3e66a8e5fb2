"""Test helpers for chatdao tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    governance_factories: Identities and entities with sensible defaults
    governance_wiring: Services resolved through bootstrap, for integration tests

Usage:
    from tests.helpers import FakeTimeAuthority
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = ["FakeTimeAuthority"]
