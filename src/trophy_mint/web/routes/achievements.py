"""Achievements route - one player's achievements for one game."""

from fastapi import APIRouter, Depends, Query

from trophy_mint.achievements import AchievementAggregator
from trophy_mint.errors import InvalidParameter, MissingParameter
from trophy_mint.web.deps import get_aggregator, get_identity

router = APIRouter()


@router.get("/achievements")
async def get_achievements(
    app_id: str | None = Query(None, alias="appId", description="Steam application ID"),
    steam_id: str | None = Depends(get_identity),
    aggregator: AchievementAggregator = Depends(get_aggregator),
):
    """Achievements sorted unlocked-first, rarest first within each group."""
    if not steam_id:
        raise MissingParameter("Missing steamId query parameter.")
    if not app_id:
        raise MissingParameter("Missing appId query parameter.")
    try:
        parsed_app_id = int(app_id)
    except ValueError:
        raise InvalidParameter(f"Invalid appId: {app_id}")

    view = await aggregator.get_achievements(steam_id, parsed_app_id)
    return view.model_dump(by_alias=True)
