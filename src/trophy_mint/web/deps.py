"""FastAPI dependencies over the shared resources on ``app.state``."""

from fastapi import Depends, Request

from trophy_mint.achievements import AchievementAggregator
from trophy_mint.errors import SteamConfigError, Unauthenticated
from trophy_mint.steam import SteamClient
from trophy_mint.storage import MintLedger

# Cookie set by the Steam OpenID login flow; holds the 64-bit Steam ID
COOKIE_NAME = "steamSession"


def get_identity(request: Request) -> str | None:
    """Steam ID of the current session, or None when not logged in."""
    return request.cookies.get(COOKIE_NAME) or None


def require_identity(identity: str | None = Depends(get_identity)) -> str:
    if not identity:
        raise Unauthenticated()
    return identity


def get_steam_client(request: Request) -> SteamClient:
    steam = request.app.state.steam
    if steam is None:
        raise SteamConfigError("Server configuration error: Missing Steam API Key.")
    return steam


def get_aggregator(request: Request) -> AchievementAggregator:
    aggregator = request.app.state.aggregator
    if aggregator is None:
        raise SteamConfigError("Server configuration error: Missing Steam API Key.")
    return aggregator


def get_ledger(request: Request) -> MintLedger:
    return request.app.state.ledger
