from __future__ import annotations

"""Smoothing utilities (EWMA by skill)."""

import pandas as pd


def ewma_by_skill(df: pd.DataFrame, value_col: str, span: int) -> pd.DataFrame:
    """Apply EWMA smoothing per skill over attempt order.

    Returns a copy of df with a new column f"{value_col}_smooth", rows sorted
    by (skill, attempt_idx).
    """
    g = df.sort_values(["skill", "attempt_idx"], kind="stable").copy()
    if g.empty:
        g[f"{value_col}_smooth"] = pd.Series(dtype="float64")
        return g
    g[f"{value_col}_smooth"] = (
        g.groupby("skill", observed=True)[value_col]
        .transform(lambda s: s.astype("float64").ewm(span=span).mean())
        .astype("float64")
    )
    return g


def latest_smoothed(df: pd.DataFrame, value_col: str) -> pd.Series:
    """Last smoothed value per skill (the current trend level)."""
    col = f"{value_col}_smooth"
    if df.empty:
        return pd.Series(dtype="float64", name=col)
    return df.groupby("skill", observed=True)[col].last()
