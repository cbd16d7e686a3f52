"""Experience points and level arithmetic."""

import math
from typing import NamedTuple

from alphabet_trainer.models.gamification import XPSystem

BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.5

# XP reward table
CORRECT_ANSWER_XP = 10
SPEED_BONUS_XP = 5
SPEED_BONUS_THRESHOLD_MS = 3000
STREAK_BONUS_XP = 2  # per answer already in the streak
COMBO_STREAK = 5
COMBO_MULTIPLIER = 1.5
FIRST_TIME_CORRECT_XP = 15


class XPUpdate(NamedTuple):
    system: XPSystem
    leveled_up: bool
    new_level: int


def level_threshold(level: int) -> int:
    """XP needed to advance past ``level``; each level costs 50% more."""
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def create_xp_system() -> XPSystem:
    return XPSystem(
        total_xp=0,
        current_level=1,
        xp_to_next_level=level_threshold(1),
        xp_in_current_level=0,
    )


def reward_for_answer(
    is_correct: bool,
    response_time_ms: float,
    current_streak: int,
    is_first_time_correct: bool,
) -> int:
    """XP earned for a single answer.

    ``current_streak`` is the streak before this answer is counted. The combo
    multiplier applies to the base plus bonuses; the first-time bonus is added
    after it.
    """
    if not is_correct:
        return 0

    xp = CORRECT_ANSWER_XP
    if response_time_ms < SPEED_BONUS_THRESHOLD_MS:
        xp += SPEED_BONUS_XP
    xp += current_streak * STREAK_BONUS_XP

    if current_streak >= COMBO_STREAK:
        xp = math.floor(xp * COMBO_MULTIPLIER)

    if is_first_time_correct:
        xp += FIRST_TIME_CORRECT_XP
    return xp


def apply_xp(system: XPSystem, gained: int) -> XPUpdate:
    """Add XP, crossing as many level boundaries as the reward covers."""
    in_level = system.xp_in_current_level + gained
    level = system.current_level
    to_next = system.xp_to_next_level
    leveled_up = False

    while in_level >= to_next:
        in_level -= to_next
        level += 1
        to_next = level_threshold(level)
        leveled_up = True

    updated = XPSystem(
        total_xp=system.total_xp + gained,
        current_level=level,
        xp_to_next_level=to_next,
        xp_in_current_level=in_level,
    )
    return XPUpdate(system=updated, leveled_up=leveled_up, new_level=level)
