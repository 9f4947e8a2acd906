from __future__ import annotations

"""Per-skill report built from the bounded history windows."""

from typing import Mapping

import numpy as np
import pandas as pd

from mathdrill.drills.base_provider import TrainingProvider
from mathdrill.stats.stats import SkillStats

from .config import AnalyticsConfig
from .prepare import attempts_frame, skills_frame
from .smoothing import ewma_by_skill, latest_smoothed


def compute_report(
    stats: Mapping[str, SkillStats],
    provider: TrainingProvider,
    cfg: AnalyticsConfig | None = None,
) -> pd.DataFrame:
    """Accuracy, timing and a composite mark per skill.

    Columns: skill, label, level, target_ms, attempts, correct, acc,
    avg_ms, ms_trend, on_pace, rt_factor, mark. Skills without attempts get
    zeros (and on_pace False), matching the stats projections.
    """
    cfg = cfg or AnalyticsConfig()
    out = skills_frame(stats, provider)
    att = attempts_frame(stats)

    if att.empty:
        out = out.assign(attempts=0, correct=0, avg_ms=0.0, ms_trend=0.0)
    else:
        agg = (
            att.groupby("skill", observed=True)
            .agg(attempts=("ms", "size"), correct=("correct", "sum"), avg_ms=("ms", "mean"))
            .reset_index()
        )
        trend = latest_smoothed(ewma_by_skill(att, "ms", cfg.smoothing_span), "ms").rename("ms_trend")
        out = out.merge(agg, on="skill", how="left")
        out = out.merge(trend.reset_index(), on="skill", how="left")
    out["attempts"] = out["attempts"].fillna(0).astype("int64")
    out["correct"] = out["correct"].fillna(0).astype("int64")
    out["avg_ms"] = out["avg_ms"].fillna(0.0).astype("float64")
    out["ms_trend"] = out["ms_trend"].fillna(0.0).astype("float64")

    attempts = out["attempts"].to_numpy()
    out["acc"] = np.where(attempts > 0, out["correct"] / np.maximum(attempts, 1), 0.0)
    out["on_pace"] = (attempts > 0) & (out["avg_ms"] <= out["target_ms"])

    # 1.0 at or under target, decaying as the average overshoots it
    ratio = out["avg_ms"] / out["target_ms"].astype("float64")
    out["rt_factor"] = np.minimum(1.0, np.exp(-float(cfg.alpha) * (ratio - 1.0)))
    out["mark"] = (out["acc"] * out["rt_factor"]).clip(0, 1)
    return out


def overall_row(report: pd.DataFrame) -> dict:
    """Pooled attempts, accuracy and mean time across skills."""
    attempts = int(report["attempts"].sum())
    if attempts == 0:
        return {"attempts": 0, "accuracy": 0.0, "average_ms": 0.0}
    return {
        "attempts": attempts,
        "accuracy": float(report["correct"].sum()) / attempts,
        "average_ms": float((report["avg_ms"] * report["attempts"]).sum()) / attempts,
    }
