from .stats import (  # noqa: F401
    MAX_HISTORY,
    Result,
    SkillStats,
    Stats,
    accuracy,
    average_ms,
    format_summary,
    new_stats,
    overall_summary,
    percent,
    stats_to_json,
)
