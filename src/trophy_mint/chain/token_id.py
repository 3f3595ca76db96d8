"""Deterministic token ids for achievement mints.

The id is ``keccak256(abi.encodePacked(uint32 appId, string achievementApiName))``
read as a big-endian uint256, so any process can recompute it from the pair
and the contract can recompute it on-chain. Nothing maps ids back to pairs;
see ``MintLedger.find_by_token_id`` for that direction.
"""

from web3 import Web3

MAX_APP_ID = 2**32 - 1


def packed_achievement_key(app_id: int, achievement_id: str) -> bytes:
    """Tight packing of the pair: 4-byte big-endian app id, then UTF-8 name."""
    _check(app_id, achievement_id)
    return app_id.to_bytes(4, "big") + achievement_id.encode("utf-8")


def derive_token_id(app_id: int, achievement_id: str) -> int:
    """Return the uint256 token id for an achievement of a game."""
    _check(app_id, achievement_id)
    digest = Web3.solidity_keccak(["uint32", "string"], [app_id, achievement_id])
    return int.from_bytes(digest, "big")


def _check(app_id: int, achievement_id: str) -> None:
    if not 0 <= app_id <= MAX_APP_ID:
        raise ValueError(f"appId must fit in uint32, got {app_id}")
    if not achievement_id:
        raise ValueError("achievement id must not be empty")
