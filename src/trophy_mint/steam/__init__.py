"""Steam Web API integration."""

from trophy_mint.steam.client import (
    SteamClient,
    player_states_from_payload,
    rarities_from_payload,
    schema_from_payload,
)

__all__ = [
    "SteamClient",
    "player_states_from_payload",
    "rarities_from_payload",
    "schema_from_payload",
]
