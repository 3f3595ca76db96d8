"""Library routes - owned games and profile summary of the logged-in player."""

from fastapi import APIRouter, Depends

from trophy_mint.steam import SteamClient
from trophy_mint.web.deps import get_steam_client, require_identity

router = APIRouter()


@router.get("/owned-games")
async def owned_games(
    steam_id: str = Depends(require_identity),
    steam: SteamClient = Depends(get_steam_client),
):
    """Owned games, most played first."""
    games = await steam.get_owned_games(steam_id)
    return {
        "game_count": len(games),
        "games": [g.model_dump(by_alias=True) for g in games],
    }


@router.get("/player-summary")
async def player_summary(
    steam_id: str = Depends(require_identity),
    steam: SteamClient = Depends(get_steam_client),
):
    summary = await steam.get_player_summary(steam_id)
    return summary.model_dump(by_alias=True)
