from __future__ import annotations

"""Pydantic models for the persisted session and settings blobs."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultModel(BaseModel):
    correct: bool
    ms: int = Field(ge=0)

    @field_validator("ms", mode="before")
    @classmethod
    def _round_ms(cls, v):  # stored by clients as float milliseconds
        if isinstance(v, float):
            return int(round(v))
        return v


class SkillStatsModel(BaseModel):
    level: int = Field(default=1, ge=1)
    streak: int = Field(default=0, ge=0)
    mistakeStreak: int = Field(default=0, ge=0)
    history: List[ResultModel] = Field(default_factory=list)


class SessionBlob(BaseModel):
    """`{"stats": {...}, "mode": "add" | ... | "mix"}`; both parts optional on read."""

    stats: Optional[Dict[str, SkillStatsModel]] = None
    mode: Optional[str] = None


class SettingsBlob(BaseModel):
    """Provider-specific keys; unknown keys are kept and sorted out by the provider."""

    model_config = ConfigDict(extra="allow")
