"""Session route - who is logged in."""

from fastapi import APIRouter, Depends

from trophy_mint.web.deps import require_identity

router = APIRouter(prefix="/session")


@router.get("/status")
async def session_status(steam_id: str = Depends(require_identity)):
    return {"steamId": steam_id}
