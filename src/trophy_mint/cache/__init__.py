"""Cache store for upstream Steam payloads."""

from trophy_mint.cache.store import (
    CacheStore,
    global_achievements_key,
    player_achievements_key,
    schema_key,
)

__all__ = [
    "CacheStore",
    "global_achievements_key",
    "player_achievements_key",
    "schema_key",
]
