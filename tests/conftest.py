"""Shared fixtures: an in-memory Redis stand-in and a canned Steam Web API."""

import asyncio
from collections import Counter

import httpx
import pytest

from trophy_mint.cache import CacheStore
from trophy_mint.steam import SteamClient
from trophy_mint.storage import MintLedger

STEAM_ID = "76561197960435530"
APP_ID = 440


def player_payload(unlocked=("TF_PLAY_GAME",), names=("TF_PLAY_GAME", "TF_GET_KILL")):
    return {
        "playerstats": {
            "steamID": STEAM_ID,
            "gameName": "Team Fortress 2",
            "achievements": [
                {
                    "apiname": name,
                    "achieved": 1 if name in unlocked else 0,
                    "unlocktime": 1700000000 if name in unlocked else 0,
                }
                for name in names
            ],
            "success": True,
        }
    }


def schema_payload(names=("TF_PLAY_GAME", "TF_GET_KILL")):
    return {
        "game": {
            "gameName": "Team Fortress 2",
            "gameVersion": "1",
            "availableGameStats": {
                "achievements": [
                    {
                        "name": name,
                        "defaultvalue": 0,
                        "displayName": name.replace("_", " ").title(),
                        "hidden": 0,
                        "description": f"Description of {name}",
                        "icon": f"https://cdn.example/{name}.jpg",
                        "icongray": f"https://cdn.example/{name}_gray.jpg",
                    }
                    for name in names
                ]
            },
        }
    }


def global_payload(percents=None):
    percents = percents if percents is not None else {"TF_PLAY_GAME": 80, "TF_GET_KILL": 40}
    return {
        "achievementpercentages": {
            "achievements": [{"name": name, "percent": p} for name, p in percents.items()]
        }
    }


CONNECT_ERROR = object()


class SteamAPI:
    """Serves canned Steam responses and counts calls per endpoint."""

    def __init__(self):
        self.responses = {
            "GetPlayerAchievements": (200, player_payload()),
            "GetSchemaForGame": (200, schema_payload()),
            "GetGlobalAchievementPercentagesForApp": (200, global_payload()),
            "GetOwnedGames": (200, {"response": {"game_count": 0, "games": []}}),
            "GetPlayerSummaries": (200, {"response": {"players": []}}),
        }
        self.calls = Counter()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.strip("/").split("/")[1]
        self.calls[endpoint] += 1
        self.requests.append(request)

        response = self.responses[endpoint]
        if response is CONNECT_ERROR:
            raise httpx.ConnectError("connection refused", request=request)
        status, body = response
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


class FakeRedis:
    """Async Redis stand-in recording values and expiries."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.data: dict[str, str] = {}
        self.expiries: dict[str, int] = {}
        self.pings = 0
        self.closed = False

    def _check(self):
        if self.fail:
            raise ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    async def ping(self):
        self.pings += 1
        # Let concurrent callers pile up behind the in-flight connect
        await asyncio.sleep(0.01)
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value
        self.expiries[key] = ex

    async def aclose(self):
        self.closed = True


@pytest.fixture()
def steam_api() -> SteamAPI:
    return SteamAPI()


@pytest.fixture()
def steam_client(steam_api) -> SteamClient:
    return SteamClient("test-key", transport=httpx.MockTransport(steam_api.handler))


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def cache(fake_redis) -> CacheStore:
    return CacheStore(client_factory=lambda: fake_redis)


@pytest.fixture()
def broken_cache() -> CacheStore:
    return CacheStore(client_factory=lambda: FakeRedis(fail=True))


@pytest.fixture()
def ledger(tmp_path) -> MintLedger:
    return MintLedger(tmp_path / "data")
