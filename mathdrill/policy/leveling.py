from __future__ import annotations

"""Level-up / level-down policy applied after every scored answer."""

from dataclasses import replace
from typing import Mapping

from ..app.explain import trace as xtrace
from ..levels.level_table import MAX_LEVEL, clamp
from ..stats.stats import MAX_HISTORY, Result, SkillStats, Stats

PROMOTE_STREAK = 3
DEMOTE_MISTAKES = 2

TARGET_BASE_MS = 6000
TARGET_DROP_MS = 300
TARGET_FLOOR_MS = 2400


def target_ms(level: int) -> int:
    """Expected answer time for a level: 6s at the bottom, 2.4s floor."""
    return int(clamp(TARGET_BASE_MS - level * TARGET_DROP_MS, TARGET_FLOOR_MS, TARGET_BASE_MS))


def apply_result(
    stats: Mapping[str, SkillStats],
    skill: str,
    correct: bool,
    elapsed_ms: int,
    *,
    max_level: int = MAX_LEVEL,
) -> Stats:
    """Return new stats with one result folded into `skill`.

    Three correct in a row, the last within the target time of the current
    level, promote. Two misses in a row demote. A level change resets the
    counter that triggered it. `stats` is never mutated.
    """
    current = stats[skill]
    updated = current.with_result(Result(correct=bool(correct), ms=int(elapsed_ms)), MAX_HISTORY)

    next_streak = current.streak + 1 if correct else 0
    next_mistakes = 0 if correct else current.mistake_streak + 1
    next_level = current.level
    leveled_up = False
    leveled_down = False

    if correct and next_streak >= PROMOTE_STREAK and elapsed_ms <= target_ms(current.level):
        next_level = int(clamp(current.level + 1, 1, max_level))
        leveled_up = next_level != current.level

    if not correct and next_mistakes >= DEMOTE_MISTAKES:
        next_level = int(clamp(current.level - 1, 1, max_level))
        leveled_down = next_level != current.level

    if leveled_up or leveled_down:
        xtrace("level_changed", {"skill": skill, "from": current.level, "to": next_level})

    out = dict(stats)
    out[skill] = replace(
        updated,
        level=next_level,
        streak=next_streak if correct and not leveled_up else 0,
        mistake_streak=next_mistakes if not correct and not leveled_down else 0,
    )
    return out
