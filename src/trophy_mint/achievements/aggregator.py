"""Achievement aggregation over cached Steam payloads.

Joins a game's schema with the player's unlock state and the global unlock
percentages, then orders the result: unlocked achievements first, each group
rarest first.
"""

import logging

from trophy_mint.cache import (
    CacheStore,
    global_achievements_key,
    player_achievements_key,
    schema_key,
)
from trophy_mint.models import (
    AchievementsView,
    CombinedAchievement,
    GameSchema,
    GlobalRarity,
    PlayerAchievementState,
)
from trophy_mint.steam import (
    SteamClient,
    player_states_from_payload,
    rarities_from_payload,
    schema_from_payload,
)

logger = logging.getLogger(__name__)

# Percent assumed for achievements Steam reports no global rate for
DEFAULT_PERCENT = 100.0


def combine_achievements(
    schema: GameSchema,
    player_states: list[PlayerAchievementState],
    rarities: list[GlobalRarity],
) -> list[CombinedAchievement]:
    """Join player state and rarity onto every schema definition, in schema order."""
    states = {s.api_name: s for s in player_states}
    percents = {r.name: r.percent for r in rarities}

    combined = []
    for definition in schema.achievements:
        state = states.get(definition.name)
        combined.append(
            CombinedAchievement(
                **definition.model_dump(),
                achieved=state is not None and state.achieved == 1,
                unlock_time=state.unlock_time if state else 0,
                percent=percents.get(definition.name, DEFAULT_PERCENT),
            )
        )
    return combined


def sort_achievements(achievements: list[CombinedAchievement]) -> list[CombinedAchievement]:
    """Unlocked before locked, then ascending percent. Stable for ties."""
    return sorted(achievements, key=lambda a: (not a.achieved, a.percent))


class AchievementAggregator:
    """Builds the combined achievement view for one player and one game.

    Each of the three upstream payloads is read through the cache. Only
    well-formed payloads are written back, so a degraded rarity fetch is
    retried on the next request instead of being cached.
    """

    def __init__(self, steam: SteamClient, cache: CacheStore, ttl_seconds: int = 3600):
        self.steam = steam
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def get_achievements(self, steam_id: str, app_id: int) -> AchievementsView:
        """Return the sorted achievement view.

        Raises:
            ProfileUnreadable: Steam refused the player's stats.
            UpstreamUnavailable: A required Steam call failed.
            MalformedUpstreamResponse: The schema came back without achievements.
        """
        player_states = await self.player_states(steam_id, app_id)
        schema = await self.schema(app_id)
        rarities = await self.rarities(app_id)

        achievements = sort_achievements(combine_achievements(schema, player_states, rarities))
        return AchievementsView(
            game_name=schema.game_name,
            steam_id=steam_id,
            achievements=achievements,
        )

    async def player_states(self, steam_id: str, app_id: int) -> list[PlayerAchievementState]:
        key = player_achievements_key(steam_id, app_id)
        payload = await self.cache.get_json(key)
        if payload is None:
            payload = await self.steam.get_player_achievements(steam_id, app_id)
            await self.cache.set_json(key, payload, self.ttl_seconds)
        else:
            logger.info("Using cached player achievements for %s", key)
        return player_states_from_payload(payload)

    async def schema(self, app_id: int) -> GameSchema:
        key = schema_key(app_id)
        payload = await self.cache.get_json(key)
        if payload is None:
            payload = await self.steam.get_schema(app_id)
            await self.cache.set_json(key, payload, self.ttl_seconds)
        else:
            logger.info("Using cached schema for %s", key)
        return schema_from_payload(payload)

    async def rarities(self, app_id: int) -> list[GlobalRarity]:
        key = global_achievements_key(app_id)
        payload = await self.cache.get_json(key)
        if payload is None:
            payload = await self.steam.get_global_percentages(app_id)
            if payload is not None:
                await self.cache.set_json(key, payload, self.ttl_seconds)
        else:
            logger.info("Using cached global percentages for %s", key)
        return rarities_from_payload(payload)
