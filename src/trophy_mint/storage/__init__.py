"""Local storage."""

from trophy_mint.storage.local import MintLedger

__all__ = ["MintLedger"]
