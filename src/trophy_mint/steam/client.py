"""Steam Web API client.

To get a Steam API key:
1. Go to https://steamcommunity.com/dev/apikey
2. Log in with your Steam account
3. Enter a domain name (can be "localhost" for personal use)
4. Copy the API key

Set it as an environment variable:
    export STEAM_API_KEY="your_api_key"

The three achievement reads each have their own failure policy:

- player achievements: transport/HTTP errors raise ``UpstreamUnavailable``;
  Steam's own "success: false" answers (private profile, game not owned, no
  stats) raise ``ProfileUnreadable``.
- game schema: any failure raises ``UpstreamUnavailable``; a body without an
  achievement list raises ``MalformedUpstreamResponse``.
- global percentages: never raises. Any failure returns None so callers can
  carry on without rarity data.

Fetch methods return the raw JSON body so it can be cached as-is; the
``*_from_payload`` helpers turn cached or fresh bodies into models.
"""

import logging
import os

import httpx
from pydantic import ValidationError

from trophy_mint.errors import (
    MalformedUpstreamResponse,
    ProfileUnreadable,
    SteamConfigError,
    UpstreamUnavailable,
)
from trophy_mint.models import (
    GameSchema,
    GlobalRarity,
    OwnedGame,
    PlayerAchievementState,
    PlayerSummary,
)

logger = logging.getLogger(__name__)

STEAM_API_BASE = "https://api.steampowered.com"

DEFAULT_PROFILE_MESSAGE = (
    "Could not retrieve achievements (profile private or no stats for this game?)."
)


class SteamClient:
    """Async client for the Steam Web API."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or os.getenv("STEAM_API_KEY")
        if not self.api_key:
            raise SteamConfigError(
                "Steam API key not provided. Set STEAM_API_KEY environment variable "
                "or pass api_key parameter. Get your key at: "
                "https://steamcommunity.com/dev/apikey"
            )
        self._http_client = httpx.AsyncClient(
            base_url=STEAM_API_BASE, timeout=timeout, transport=transport
        )

    async def _get(self, path: str, params: dict, what: str) -> httpx.Response:
        try:
            return await self._http_client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning("Steam request for %s failed: %s", what, e)
            raise UpstreamUnavailable(f"Failed to fetch {what}: {e}") from e

    async def get_player_achievements(self, steam_id: str, app_id: int) -> dict:
        """Fetch a player's achievement state for one game.

        Args:
            steam_id: 64-bit Steam ID of the player.
            app_id: Steam application ID.

        Returns:
            The raw response body, guaranteed to have ``playerstats.success``
            and well-formed achievement entries.
        """
        params = {"key": self.api_key, "steamid": steam_id, "appid": app_id, "l": "english"}
        logger.info("Fetching player achievements for %s (app %s)", steam_id, app_id)
        response = await self._get(
            "/ISteamUserStats/GetPlayerAchievements/v1/", params, "player achievements"
        )

        body = _json_or_none(response)
        stats = body.get("playerstats") if isinstance(body, dict) else None
        reason = _failure_reason(stats)

        if response.is_error:
            # Steam answers private profiles with an error status and a readable reason
            if reason:
                logger.info("Player achievements unreadable for %s: %s", steam_id, reason)
                raise ProfileUnreadable(reason)
            logger.warning(
                "Steam API error (PlayerAchievements): %s", response.status_code
            )
            raise UpstreamUnavailable(
                f"Failed to fetch player achievements. Status: {response.status_code}"
            )

        if body is None:
            raise MalformedUpstreamResponse("Player achievements response is not JSON.")

        if not isinstance(stats, dict) or not stats.get("success"):
            raise ProfileUnreadable(reason or DEFAULT_PROFILE_MESSAGE)

        try:
            player_states_from_payload(body)
        except MalformedUpstreamResponse:
            logger.error(
                "Unexpected player achievement data for %s (app %s): %r", steam_id, app_id, body
            )
            raise

        return body

    async def get_schema(self, app_id: int) -> dict:
        """Fetch the achievement schema (names, descriptions, icons) for a game.

        Args:
            app_id: Steam application ID.

        Returns:
            The raw response body, guaranteed to carry
            ``game.availableGameStats.achievements``.
        """
        params = {"key": self.api_key, "appid": app_id, "l": "english"}
        logger.info("Fetching game schema for app %s", app_id)
        response = await self._get("/ISteamUserStats/GetSchemaForGame/v2/", params, "game schema")

        if response.is_error:
            logger.warning("Steam API error (Schema): %s", response.status_code)
            raise UpstreamUnavailable(
                f"Failed to fetch game schema. Status: {response.status_code}"
            )

        body = _json_or_none(response)
        try:
            if not isinstance(body, dict):
                raise MalformedUpstreamResponse("Failed to parse game schema data.")
            schema_from_payload(body)
        except MalformedUpstreamResponse:
            logger.error("Unexpected schema data format for app %s: %r", app_id, body)
            raise

        return body

    async def get_global_percentages(self, app_id: int) -> dict | None:
        """Fetch global achievement unlock percentages.

        Args:
            app_id: Steam application ID.

        Returns:
            The raw response body, or None if the fetch failed or the body has
            no achievement list.
        """
        params = {"gameid": app_id, "format": "json"}
        logger.info("Fetching global achievement percentages for app %s", app_id)
        try:
            response = await self._http_client.get(
                "/ISteamUserStats/GetGlobalAchievementPercentagesForApp/v2/", params=params
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Failed to fetch global achievement percentages for app %s, "
                "proceeding without them: %s",
                app_id,
                e,
            )
            return None

        achievements = (
            (body.get("achievementpercentages") or {}).get("achievements")
            if isinstance(body, dict)
            else None
        )
        if not isinstance(achievements, list):
            logger.warning("Global percentages for app %s have no achievement list", app_id)
            return None

        return body

    async def get_owned_games(self, steam_id: str) -> list[OwnedGame]:
        """Fetch all games owned by the user, most played first.

        Args:
            steam_id: Steam ID to fetch games for.

        Returns:
            List of OwnedGame objects. Empty for private profiles.
        """
        params = {
            "key": self.api_key,
            "steamid": steam_id,
            "format": "json",
            "include_appinfo": True,
            "include_played_free_games": True,
        }
        logger.info("Fetching owned games for %s", steam_id)
        response = await self._get("/IPlayerService/GetOwnedGames/v1/", params, "owned games")
        if response.is_error:
            raise UpstreamUnavailable(
                f"Failed to fetch data from Steam API (Status: {response.status_code})"
            )

        body = _json_or_none(response)
        data = body.get("response") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.error("Unexpected owned games response for %s: %r", steam_id, body)
            raise MalformedUpstreamResponse("Unexpected response structure from Steam API.")

        # An empty response object means a private profile or an empty library
        try:
            games = [OwnedGame.model_validate(g) for g in data.get("games", [])]
        except ValidationError as e:
            raise MalformedUpstreamResponse(f"Unexpected game entry from Steam API: {e}") from e

        games.sort(key=lambda g: g.playtime_forever, reverse=True)
        return games

    async def get_player_summary(self, steam_id: str) -> PlayerSummary:
        """Fetch the public profile summary for a Steam account."""
        params = {"key": self.api_key, "steamids": steam_id, "format": "json"}
        response = await self._get(
            "/ISteamUser/GetPlayerSummaries/v2/", params, "player summary"
        )
        if response.is_error:
            raise UpstreamUnavailable(
                f"Failed to fetch data from Steam API (Status: {response.status_code})"
            )

        body = _json_or_none(response)
        data = body.get("response") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise MalformedUpstreamResponse("Unexpected response structure from Steam API.")

        players = data.get("players") or []
        if not players:
            raise ProfileUnreadable("No players found for SteamID.")

        try:
            return PlayerSummary.model_validate(players[0])
        except ValidationError as e:
            raise MalformedUpstreamResponse(f"Unexpected player entry from Steam API: {e}") from e

    async def close(self):
        """Close the HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()


def player_states_from_payload(payload: dict) -> list[PlayerAchievementState]:
    """Extract player achievement states from a GetPlayerAchievements body."""
    stats = payload.get("playerstats") or {}
    if not stats.get("success"):
        raise ProfileUnreadable(_failure_reason(stats) or DEFAULT_PROFILE_MESSAGE)
    try:
        # Games without achievements come back with no list at all
        return [PlayerAchievementState.model_validate(a) for a in stats.get("achievements") or []]
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Unexpected player achievement entry: {e}") from e


def schema_from_payload(payload: dict) -> GameSchema:
    """Extract the game name and achievement definitions from a GetSchemaForGame body."""
    game = payload.get("game") or {}
    achievements = (game.get("availableGameStats") or {}).get("achievements")
    if not isinstance(achievements, list):
        raise MalformedUpstreamResponse("Failed to parse game schema data.")
    try:
        return GameSchema.model_validate(
            {"gameName": game.get("gameName") or "", "achievements": achievements}
        )
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Unexpected schema entry: {e}") from e


def rarities_from_payload(payload: dict | None) -> list[GlobalRarity]:
    """Extract global percentages. Unusable bodies or entries are dropped."""
    if not payload:
        return []
    entries = (payload.get("achievementpercentages") or {}).get("achievements") or []
    rarities = []
    for entry in entries:
        try:
            rarities.append(GlobalRarity.model_validate(entry))
        except ValidationError:
            logger.debug("Skipping unusable global percentage entry: %r", entry)
    return rarities


def _json_or_none(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return None


def _failure_reason(stats) -> str | None:
    """Human-readable reason from a ``playerstats`` block that reports failure."""
    if not isinstance(stats, dict) or stats.get("success") is not False:
        return None
    return stats.get("message") or stats.get("error")
