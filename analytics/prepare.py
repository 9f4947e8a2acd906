from __future__ import annotations

"""Flatten per-skill stats into DataFrames."""

from typing import Mapping

import pandas as pd

from mathdrill.drills.base_provider import TrainingProvider
from mathdrill.stats.stats import SkillStats

ATTEMPT_COLUMNS = ["skill", "attempt_idx", "correct", "ms"]
SKILL_COLUMNS = ["skill", "label", "level", "target_ms"]


def attempts_frame(stats: Mapping[str, SkillStats]) -> pd.DataFrame:
    """One row per result in every skill's window, oldest first within a skill."""
    rows = [
        {"skill": skill, "attempt_idx": i, "correct": r.correct, "ms": r.ms}
        for skill, s in stats.items()
        for i, r in enumerate(s.history)
    ]
    if not rows:
        return pd.DataFrame(
            {
                "skill": pd.Series(dtype="string"),
                "attempt_idx": pd.Series(dtype="int64"),
                "correct": pd.Series(dtype="bool"),
                "ms": pd.Series(dtype="int64"),
            }
        )
    df = pd.DataFrame(rows, columns=ATTEMPT_COLUMNS)
    df["skill"] = df["skill"].astype("string")
    return df


def skills_frame(stats: Mapping[str, SkillStats], provider: TrainingProvider) -> pd.DataFrame:
    """Level and target time per skill, in the provider's skill order."""
    rows = [
        {
            "skill": skill,
            "label": provider.skills[skill].label,
            "level": stats[skill].level,
            "target_ms": provider.target_ms(stats[skill].level),
        }
        for skill in provider.skill_order
    ]
    df = pd.DataFrame(rows, columns=SKILL_COLUMNS)
    df["skill"] = df["skill"].astype("string")
    return df
