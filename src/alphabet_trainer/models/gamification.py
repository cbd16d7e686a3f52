"""Gamification models: XP, streaks and achievements."""

from collections.abc import Callable
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class XPSystem(BaseModel):
    """Experience points and level position."""

    model_config = ConfigDict(frozen=True)

    total_xp: int = 0
    current_level: int = 1
    xp_to_next_level: int = 100
    xp_in_current_level: int = 0


class StreakData(BaseModel):
    """Answer streak and daily practice streak."""

    model_config = ConfigDict(frozen=True)

    current_streak: int = 0
    longest_streak: int = 0
    daily_streak: int = 0
    longest_daily_streak: int = 0
    last_practice_date: date | None = None
    freeze_available: bool = True


class Rarity(StrEnum):
    """Achievement rarity tiers."""

    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Achievement(BaseModel):
    """Static achievement definition.

    ``condition`` is a pure predicate over the progress snapshot; it is never
    serialized.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    rarity: Rarity
    reward: int
    condition: Callable[[Any], bool] = Field(exclude=True)

    def is_met(self, progress: Any) -> bool:
        return bool(self.condition(progress))

    def public_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class UnlockedAchievement(BaseModel):
    """An achievement the learner has earned."""

    model_config = ConfigDict(frozen=True)

    achievement_id: str
    unlocked_at: datetime = Field(default_factory=datetime.now)
    seen: bool = False
