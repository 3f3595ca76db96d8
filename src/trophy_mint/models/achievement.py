"""Steam achievement data models.

Field aliases follow the Steam Web API JSON keys so upstream payloads validate
directly and responses keep the same shape the frontend already consumes.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SteamModel(BaseModel):
    """Base for models that mirror Steam JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AchievementDefinition(SteamModel):
    """One achievement as published in a game's schema."""

    name: str = Field(description="Internal achievement identifier")
    default_value: int = Field(default=0, alias="defaultvalue")
    display_name: str | None = Field(default=None, alias="displayName")
    hidden: int = 0
    description: str | None = None  # Steam omits it for some hidden achievements
    icon: str | None = None
    icon_gray: str | None = Field(default=None, alias="icongray")


class GameSchema(SteamModel):
    """A game's display name and its achievement definitions, in schema order."""

    game_name: str = Field(default="", alias="gameName")
    achievements: list[AchievementDefinition] = Field(default_factory=list)


class PlayerAchievementState(SteamModel):
    """Whether (and when) a player unlocked an achievement."""

    api_name: str = Field(alias="apiname")
    achieved: int = 0
    unlock_time: int = Field(default=0, alias="unlocktime")  # 0 = never


class GlobalRarity(SteamModel):
    """Share of all players who unlocked an achievement."""

    name: str
    percent: float

    @field_validator("percent", mode="before")
    @classmethod
    def coerce_percent(cls, v):
        # Steam serves percentages as strings for some apps
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                raise ValueError(f"Unparseable percentage: {v!r}")
        return v


class CombinedAchievement(AchievementDefinition):
    """Schema definition joined with player state and global rarity."""

    achieved: bool = False
    unlock_time: int = Field(default=0, alias="unlocktime")
    percent: float = 100.0


class AchievementsView(SteamModel):
    """Response body for one player's achievements in one game."""

    game_name: str = Field(alias="gameName")
    steam_id: str = Field(alias="steamId")
    achievements: list[CombinedAchievement] = Field(default_factory=list)

    @property
    def unlocked(self) -> int:
        return sum(1 for a in self.achievements if a.achieved)

    @property
    def completion_percent(self) -> float:
        """Calculate completion percentage."""
        if not self.achievements:
            return 0.0
        return round(self.unlocked / len(self.achievements) * 100, 1)


class OwnedGame(SteamModel):
    """A game in a player's library."""

    app_id: int = Field(alias="appid")
    name: str = ""
    playtime_forever: int = 0
    playtime_2weeks: int | None = None
    img_icon_url: str | None = None


class PlayerSummary(SteamModel):
    """Public profile summary for a Steam account."""

    steam_id: str = Field(alias="steamid")
    persona_name: str = Field(default="", alias="personaname")
    community_visibility_state: int | None = Field(default=None, alias="communityvisibilitystate")
    profile_state: int | None = Field(default=None, alias="profilestate")
