from __future__ import annotations

"""Per-skill stats: bounded result history, projections and formatting."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Tuple

MAX_HISTORY = 12


@dataclass(frozen=True)
class Result:
    correct: bool
    ms: int

    def to_json(self) -> Dict[str, Any]:
        return {"correct": self.correct, "ms": self.ms}


@dataclass(frozen=True)
class SkillStats:
    level: int = 1
    streak: int = 0
    mistake_streak: int = 0
    history: Tuple[Result, ...] = field(default_factory=tuple)

    def with_result(self, result: Result, limit: int = MAX_HISTORY) -> "SkillStats":
        """Copy with `result` appended; the oldest entries fall off past `limit`."""
        return replace(self, history=(self.history + (result,))[-limit:])

    def to_json(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "streak": self.streak,
            "mistakeStreak": self.mistake_streak,
            "history": [r.to_json() for r in self.history],
        }


# Skill key -> SkillStats. Treated as immutable; updates build a new dict.
Stats = Dict[str, SkillStats]


def new_stats(skills: Iterable[str]) -> Stats:
    """Fresh stats: level 1, zero streaks, empty history for every skill."""
    return {s: SkillStats() for s in skills}


def stats_to_json(stats: Mapping[str, SkillStats]) -> Dict[str, Any]:
    return {k: v.to_json() for k, v in stats.items()}


def accuracy(skill_stats: SkillStats) -> float:
    """Share of correct results in the window, 0 when empty."""
    history = skill_stats.history
    if not history:
        return 0.0
    return sum(1 for r in history if r.correct) / len(history)


def average_ms(skill_stats: SkillStats) -> float:
    history = skill_stats.history
    if not history:
        return 0.0
    return sum(r.ms for r in history) / len(history)


def overall_summary(stats: Mapping[str, SkillStats]) -> Dict[str, float]:
    """Attempts, accuracy and mean time pooled across every skill's window."""
    pooled = [r for s in stats.values() for r in s.history]
    if not pooled:
        return {"attempts": 0, "accuracy": 0.0, "average_ms": 0.0}
    return {
        "attempts": len(pooled),
        "accuracy": sum(1 for r in pooled if r.correct) / len(pooled),
        "average_ms": sum(r.ms for r in pooled) / len(pooled),
    }


def percent(part: int, whole: int) -> int:
    """Whole-number percent of part/whole with halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def _correct(skill_stats: SkillStats) -> int:
    return sum(1 for r in skill_stats.history if r.correct)


def format_summary(stats: Mapping[str, SkillStats], labels: Mapping[str, str] | None = None) -> str:
    """Return a human-readable summary of stats."""
    labels = labels or {}
    overall = overall_summary(stats)
    pooled_correct = sum(_correct(s) for s in stats.values())
    if overall["attempts"]:
        lines = [
            f"Overall: {percent(pooled_correct, overall['attempts'])}% over {overall['attempts']} attempts, "
            f"avg {overall['average_ms'] / 1000:.1f}s"
        ]
    else:
        lines = ["Overall: no attempts yet"]
    for skill, s in stats.items():
        name = labels.get(skill, skill)
        if not s.history:
            lines.append(f"{name} (level {s.level}): no data yet")
            continue
        lines.append(
            f"{name} (level {s.level}): {percent(_correct(s), len(s.history))}% of {len(s.history)}, "
            f"avg {average_ms(s) / 1000:.1f}s"
        )
    return "\n".join(lines)
