"""
chatdao - Chat-native DAO governance core

Groups, time-boxed proposals and one-ballot-per-member voting for chat
communities, where every participant's identity is a keypair derived
deterministically from their chat-platform user id.

Core guarantees:
- Identity derivation is reproducible and never stores private keys
- Every transition validates permissions against stored state before it mutates
- Stored records decode defensively (padding, truncation, foreign shapes)
- A proposal never counts two ballots from the same member
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
