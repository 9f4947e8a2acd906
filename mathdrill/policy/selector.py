from __future__ import annotations

"""Skill selection for mixed-mode sessions."""

import random
from typing import List, Mapping, Optional, Sequence, Tuple

from ..stats.stats import SkillStats, accuracy

# Score for a skill with no history: a little below "average" so untouched
# skills get attention without being ranked the weakest outright.
NO_DATA_PRIOR = 0.55
# Every skill keeps at least this weight, however well it is going.
MIN_WEIGHT = 0.15


def skill_score(skill_stats: SkillStats) -> float:
    if not skill_stats.history:
        return NO_DATA_PRIOR
    return accuracy(skill_stats)


def weakest_skill(stats: Mapping[str, SkillStats], order: Sequence[str]) -> str:
    """Lowest score wins; ties keep the earlier skill in `order`."""
    weakest = order[0]
    weakest_score = 1.0
    for skill in order:
        score = skill_score(stats[skill])
        if score < weakest_score:
            weakest_score = score
            weakest = skill
    return weakest


def skill_weights(stats: Mapping[str, SkillStats], order: Sequence[str]) -> List[Tuple[str, float]]:
    return [(skill, max(MIN_WEIGHT, 1.0 - skill_score(stats[skill]))) for skill in order]


def pick_skill(
    stats: Mapping[str, SkillStats],
    order: Sequence[str],
    rng: Optional[random.Random] = None,
) -> str:
    """Roulette draw favouring weaker skills; falls back to the first skill."""
    weighted = skill_weights(stats, order)
    total = sum(w for _, w in weighted)
    roll = (rng or random).random() * total
    for skill, weight in weighted:
        roll -= weight
        if roll <= 0:
            return skill
    return order[0]
