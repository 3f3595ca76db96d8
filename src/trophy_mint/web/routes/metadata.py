"""Token metadata route - ERC-1155 metadata for minted achievements.

Token ids are one-way hashes of (appId, achievement), so a token is resolved
through the mint ledger and its display fields come from the game schema.
"""

from fastapi import APIRouter, Depends

from trophy_mint.achievements import AchievementAggregator
from trophy_mint.errors import InvalidParameter, MetadataNotFound
from trophy_mint.storage import MintLedger
from trophy_mint.web.deps import get_aggregator, get_ledger

router = APIRouter(prefix="/metadata")


def parse_token_id(raw: str) -> int:
    """Accept decimal ids, 0x-prefixed hex, or the 64-char hex form of ERC-1155 ``{id}`` URIs.

    A 64-char string of decimal digits only is read as decimal.
    """
    try:
        if raw.lower().startswith("0x"):
            return int(raw, 16)
        if len(raw) == 64 and not raw.isdigit():
            return int(raw, 16)
        return int(raw)
    except ValueError:
        raise InvalidParameter(f"Invalid token id: {raw}")


@router.get("/achievement/{token_id}")
async def achievement_metadata(
    token_id: str,
    ledger: MintLedger = Depends(get_ledger),
    aggregator: AchievementAggregator = Depends(get_aggregator),
):
    record = ledger.find_by_token_id(parse_token_id(token_id))
    if record is None:
        raise MetadataNotFound("Metadata not found for this token ID")

    schema = await aggregator.schema(record.app_id)
    definition = next((a for a in schema.achievements if a.name == record.achievement_id), None)
    if definition is None:
        raise MetadataNotFound("Metadata not found for this token ID")

    return {
        "name": definition.display_name or definition.name,
        "description": definition.description or "",
        "image": definition.icon,
        "attributes": [
            {"trait_type": "Game", "value": schema.game_name},
            {"trait_type": "App ID", "value": record.app_id},
        ],
    }
