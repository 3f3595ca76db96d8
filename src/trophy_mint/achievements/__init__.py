"""Combined achievement views."""

from trophy_mint.achievements.aggregator import (
    AchievementAggregator,
    combine_achievements,
    sort_achievements,
)

__all__ = ["AchievementAggregator", "combine_achievements", "sort_achievements"]
