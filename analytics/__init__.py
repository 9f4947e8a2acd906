from .config import AnalyticsConfig
from .metrics import compute_report, overall_row
from .prepare import attempts_frame, skills_frame
from .smoothing import ewma_by_skill, latest_smoothed

__all__ = [
    "AnalyticsConfig",
    "compute_report",
    "overall_row",
    "attempts_frame",
    "skills_frame",
    "ewma_by_skill",
    "latest_smoothed",
]
