from __future__ import annotations

"""Operand ranges per skill and level.

Each skill gets exactly MAX_LEVEL rows. An authored prefix covers the early
levels; the remaining rows are extrapolated with a fixed growth step so
difficulty keeps climbing without hand-tuning fifty rows per skill.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

MAX_LEVEL = 50


@dataclass(frozen=True)
class LevelSpec:
    max_a: int
    max_b: int
    min_a: int = 0
    min_b: int = 0
    allow_negative: bool = False


BASE_ADD_LEVELS: Tuple[int, ...] = (10, 20, 30, 50, 75, 100, 150, 250, 500, 1000, 1500, 2000)
BASE_MUL_LEVELS: Tuple[int, ...] = (5, 9, 12, 15, 20, 25, 30, 40, 50, 60, 75, 90)
BASE_DIV_LEVELS: Tuple[LevelSpec, ...] = (
    LevelSpec(min_a=1, max_a=5, max_b=5),
    LevelSpec(min_a=1, max_a=9, max_b=9),
    LevelSpec(min_a=1, max_a=12, max_b=12),
    LevelSpec(min_a=2, max_a=15, max_b=12),
    LevelSpec(min_a=2, max_a=20, max_b=15),
    LevelSpec(min_a=2, max_a=25, max_b=20),
    LevelSpec(min_a=3, max_a=30, max_b=25),
    LevelSpec(min_a=3, max_a=40, max_b=30),
    LevelSpec(min_a=4, max_a=50, max_b=40),
    LevelSpec(min_a=5, max_a=60, max_b=50),
    LevelSpec(min_a=6, max_a=75, max_b=60),
    LevelSpec(min_a=8, max_a=90, max_b=70),
)


def build_linear_levels(base: Sequence[int], step: int, max_level: int = MAX_LEVEL) -> List[LevelSpec]:
    """Symmetric ranges [0, max] for both operands, +step per extrapolated level."""
    levels = [LevelSpec(max_a=m, max_b=m) for m in list(base)[:max_level]]
    if not levels:
        return levels
    current = levels[-1].max_a
    for _ in range(len(levels), max_level):
        current += step
        levels.append(LevelSpec(max_a=current, max_b=current))
    return levels


def build_div_levels(base: Sequence[LevelSpec], max_level: int = MAX_LEVEL) -> List[LevelSpec]:
    """Divisor range grows by 5, quotient range by 4; divisor floor +1 every 5 levels."""
    levels = list(base)[:max_level]
    if not levels:
        return levels
    start = len(levels)
    last = levels[-1]
    max_a, max_b, min_a = last.max_a, last.max_b, last.min_a
    for i in range(start, max_level):
        max_a += 5
        max_b += 4
        if (i - start + 1) % 5 == 0:
            min_a += 1
        levels.append(LevelSpec(min_a=min_a, max_a=max_a, min_b=0, max_b=max_b))
    return levels


LEVELS: Dict[str, Tuple[LevelSpec, ...]] = {
    "add": tuple(build_linear_levels(BASE_ADD_LEVELS, 250)),
    "sub": tuple(build_linear_levels(BASE_ADD_LEVELS, 250)),
    "mul": tuple(build_linear_levels(BASE_MUL_LEVELS, 5)),
    "div": tuple(build_div_levels(BASE_DIV_LEVELS)),
}


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def level_count(skill: str) -> int:
    return len(LEVELS[skill])


def get_level_spec(skill: str, level: int) -> LevelSpec:
    """LevelSpec for `level`, clamped into the table; never raises for known skills."""
    specs = LEVELS[skill]
    return specs[int(clamp(int(level) - 1, 0, len(specs) - 1))]
