from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for the stats report.

    - alpha: speed penalty scale (>0); rt_factor = exp(-alpha * (avg_ms/target_ms - 1)) capped at 1
    - smoothing_span: EWMA span in attempts (>1) for the response-time trend
    """

    alpha: float = Field(0.9, gt=0)
    smoothing_span: int = Field(4, gt=1)
