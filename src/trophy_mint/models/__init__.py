"""Data models for Trophy Mint."""

from trophy_mint.models.achievement import (
    AchievementDefinition,
    AchievementsView,
    CombinedAchievement,
    GameSchema,
    GlobalRarity,
    OwnedGame,
    PlayerAchievementState,
    PlayerSummary,
)
from trophy_mint.models.mint import (
    MintEvent,
    MintReceipt,
    MintRecord,
    MintResult,
    MintStage,
)

__all__ = [
    # Steam
    "AchievementDefinition",
    "AchievementsView",
    "CombinedAchievement",
    "GameSchema",
    "GlobalRarity",
    "OwnedGame",
    "PlayerAchievementState",
    "PlayerSummary",
    # Chain
    "MintEvent",
    "MintReceipt",
    "MintRecord",
    "MintResult",
    "MintStage",
]
