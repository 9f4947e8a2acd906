from __future__ import annotations

"""Training provider abstractions: the capability set the session engine drives.

A provider owns everything subject-specific (skills, question factory,
leveling, answer parsing, settings controls). The session manager only
talks to this interface, so a new drill subject is a new subclass.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, List, Literal, Mapping, Optional, Sequence, TypeVar

from ..stats.stats import SkillStats, Stats

ParseError = Literal["empty", "incomplete", "invalid"]

Q = TypeVar("Q")
S = TypeVar("S", bound="TrainingSettings")


@dataclass(frozen=True)
class TrainingSettings:
    question_count: int = 10
    time_limit_seconds: int = 10


@dataclass(frozen=True)
class SkillDefinition:
    label: str
    symbol: str
    subtitle: str


@dataclass(frozen=True)
class ParseResult:
    value: Any = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AnswerErrors:
    empty: str
    incomplete: str
    invalid: str
    empty_keypad: Optional[str] = None

    def message(self, error: ParseError, use_keypad: bool = False) -> str:
        if error == "empty":
            if use_keypad and self.empty_keypad:
                return self.empty_keypad
            return self.empty
        if error == "incomplete":
            return self.incomplete
        return self.invalid


@dataclass(frozen=True)
class SettingControl:
    """Bounds, step and accessors for one settings field.

    `id` is the settings attribute; `key` is its name in the persisted blob.
    """

    id: str
    key: str
    label: str
    min: int
    max: int
    step: int
    hint: str = ""
    formatter: Optional[Callable[[int], str]] = None

    def get_value(self, settings: Any) -> int:
        return getattr(settings, self.id)

    def set_value(self, settings: S, value: int) -> S:
        return replace(settings, **{self.id: int(min(max(value, self.min), self.max))})

    def format_value(self, value: int) -> str:
        if self.formatter is not None:
            return self.formatter(value)
        return str(value)


def normalize_settings(settings: S, controls: Sequence[SettingControl]) -> S:
    """Re-clamp every controlled field into its bounds."""
    out = settings
    for control in controls:
        value = control.get_value(out)
        clamped = min(max(value, control.min), control.max)
        if value != clamped:
            out = control.set_value(out, clamped)
    return out


class AnswerContract(ABC, Generic[Q]):
    """How typed input becomes an answer value and how it is judged."""

    errors: AnswerErrors
    placeholder: str = ""

    def allow_negative(self, question: Q, settings: Any) -> bool:
        return False

    @abstractmethod
    def sanitize(self, raw: str, allow_negative: bool) -> str: ...

    @abstractmethod
    def parse(self, text: str, allow_negative: bool) -> ParseResult: ...

    @abstractmethod
    def is_correct(self, value: Any, question: Q) -> bool: ...

    @abstractmethod
    def format_expected(self, question: Q) -> str: ...

    def keypad_rows(self, allow_negative: bool) -> Optional[List[List[str]]]:
        return None


class TrainingProvider(ABC, Generic[Q, S]):
    """Abstract drill subject."""

    id: str
    title: str
    description: str
    skill_order: Sequence[str]
    skills: Mapping[str, SkillDefinition]
    max_level: int
    default_settings: S
    setting_controls: Sequence[SettingControl]
    answer: AnswerContract[Q]

    def create_default_stats(self) -> Stats:
        return {skill: SkillStats() for skill in self.skill_order}

    @abstractmethod
    def create_question(
        self,
        skill: str,
        level: int,
        settings: S,
        stats: Mapping[str, SkillStats],
        rng: Optional[random.Random] = None,
    ) -> Q: ...

    @abstractmethod
    def question_text(self, question: Q) -> str: ...

    @abstractmethod
    def apply_result(self, stats: Mapping[str, SkillStats], skill: str, correct: bool, elapsed_ms: int) -> Stats: ...

    @abstractmethod
    def accuracy(self, skill_stats: SkillStats) -> float: ...

    @abstractmethod
    def average_ms(self, skill_stats: SkillStats) -> float: ...

    @abstractmethod
    def target_ms(self, level: int) -> int: ...

    @abstractmethod
    def weakest_skill(self, stats: Mapping[str, SkillStats]) -> str: ...

    @abstractmethod
    def pick_skill(self, stats: Mapping[str, SkillStats], rng: Optional[random.Random] = None) -> str: ...

    def control(self, control_id: str) -> Optional[SettingControl]:
        for c in self.setting_controls:
            if c.id == control_id:
                return c
        return None

    def settings_from_json(self, data: Optional[Mapping[str, Any]], base: Optional[S] = None) -> S:
        """`base` (or the defaults) overlaid with whatever blob fields are usable, then clamped."""
        settings = self.default_settings if base is None else base
        for control in self.setting_controls:
            raw = (data or {}).get(control.key)
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                continue
            if raw != raw or raw in (float("inf"), float("-inf")):
                continue
            settings = replace(settings, **{control.id: int(raw)})
        return normalize_settings(settings, self.setting_controls)

    def settings_to_json(self, settings: S) -> Dict[str, int]:
        return {c.key: c.get_value(settings) for c in self.setting_controls}
