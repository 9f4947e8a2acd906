"""Level tables for the math drills."""

from .level_table import LEVELS, MAX_LEVEL, LevelSpec, get_level_spec, level_count

__all__ = ["LEVELS", "MAX_LEVEL", "LevelSpec", "get_level_spec", "level_count"]
