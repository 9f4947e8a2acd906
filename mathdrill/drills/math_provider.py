from __future__ import annotations

"""Math drill provider: four arithmetic skills over the adaptive level tables."""

import math
import random
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional

from ..levels.level_table import MAX_LEVEL
from ..policy.leveling import apply_result, target_ms
from ..policy.selector import pick_skill, weakest_skill
from ..stats.stats import SkillStats, Stats, accuracy, average_ms
from .base_provider import (
    AnswerContract,
    AnswerErrors,
    ParseResult,
    SettingControl,
    SkillDefinition,
    TrainingProvider,
    TrainingSettings,
)
from .questions import SKILL_LABELS, SKILL_SYMBOLS, Question, generate_question


@dataclass(frozen=True)
class MathSettings(TrainingSettings):
    # 0 disables negative subtraction answers; N enables them from level N.
    negative_level: int = 0


SKILL_ORDER = ("add", "sub", "mul", "div")

SKILL_DEFINITIONS = {
    "add": SkillDefinition(SKILL_LABELS["add"], SKILL_SYMBOLS["add"], "Sum drills"),
    "sub": SkillDefinition(SKILL_LABELS["sub"], SKILL_SYMBOLS["sub"], "Minus drills"),
    "mul": SkillDefinition(SKILL_LABELS["mul"], SKILL_SYMBOLS["mul"], "Times tables"),
    "div": SkillDefinition(SKILL_LABELS["div"], SKILL_SYMBOLS["div"], "Quotient practice"),
}

SETTING_CONTROLS = (
    SettingControl(
        id="question_count",
        key="questionCount",
        label="Questions per session",
        hint="Default is 10",
        min=5,
        max=50,
        step=1,
    ),
    SettingControl(
        id="time_limit_seconds",
        key="timeLimitSeconds",
        label="Time per question",
        hint="Seconds allowed",
        min=5,
        max=60,
        step=5,
        formatter=lambda v: f"{v}s",
    ),
    SettingControl(
        id="negative_level",
        key="negativeLevel",
        label="Negative answers (subtraction)",
        hint="Start showing negatives from a level.",
        min=0,
        max=MAX_LEVEL,
        step=1,
        formatter=lambda v: "Off" if v == 0 else f"Level {v}+",
    ),
)

_NOT_NUMERIC = re.compile(r"[^0-9-]")


def negatives_unlocked(skill: str, level: int, settings: MathSettings) -> bool:
    return skill == "sub" and settings.negative_level > 0 and level >= settings.negative_level


def sanitize_numeric_input(raw: str, allow_negative: bool) -> str:
    """Keep digits and minus signs; only a leading minus survives, and only if allowed."""
    cleaned = _NOT_NUMERIC.sub("", raw)
    if not allow_negative:
        return cleaned.replace("-", "")
    if "-" in cleaned:
        cleaned = cleaned[0] + cleaned[1:].replace("-", "")
    return cleaned


def parse_numeric_input(text: str) -> ParseResult:
    if not text:
        return ParseResult(error="empty")
    if text == "-":
        return ParseResult(error="incomplete")
    try:
        value = float(text)
    except ValueError:
        return ParseResult(error="invalid")
    if not math.isfinite(value):
        return ParseResult(error="invalid")
    return ParseResult(value=int(value) if value.is_integer() else value)


class NumericAnswer(AnswerContract[Question]):
    placeholder = "Type your answer"
    errors = AnswerErrors(
        empty="Type an answer.",
        empty_keypad="Tap numbers to continue.",
        incomplete="Type a number.",
        invalid="Numbers only for now.",
    )

    def allow_negative(self, question: Question, settings: MathSettings) -> bool:
        return negatives_unlocked(question.skill, question.level, settings)

    def sanitize(self, raw: str, allow_negative: bool) -> str:
        return sanitize_numeric_input(raw, allow_negative)

    def parse(self, text: str, allow_negative: bool) -> ParseResult:
        return parse_numeric_input(text)

    def is_correct(self, value: float, question: Question) -> bool:
        return value == question.answer

    def format_expected(self, question: Question) -> str:
        return str(question.answer)

    def keypad_rows(self, allow_negative: bool) -> List[List[str]]:
        rows = [["7", "8", "9"], ["4", "5", "6"], ["1", "2", "3"]]
        if allow_negative:
            return rows + [["-", "0", "DEL", "CLR"]]
        return rows + [["CLR", "0", "DEL"]]


class MathTrainingProvider(TrainingProvider[Question, MathSettings]):
    id = "math"
    title = "Math Training"
    description = "Adaptive arithmetic drills across four skills."
    skill_order = SKILL_ORDER
    skills = SKILL_DEFINITIONS
    max_level = MAX_LEVEL
    default_settings = MathSettings(question_count=10, time_limit_seconds=10, negative_level=0)
    setting_controls = SETTING_CONTROLS

    def __init__(self) -> None:
        self.answer = NumericAnswer()

    def create_question(
        self,
        skill: str,
        level: int,
        settings: MathSettings,
        stats: Mapping[str, SkillStats],
        rng: Optional[random.Random] = None,
    ) -> Question:
        return generate_question(skill, level, allow_negative=negatives_unlocked(skill, level, settings), rng=rng)

    def question_text(self, question: Question) -> str:
        return question.text

    def apply_result(self, stats: Mapping[str, SkillStats], skill: str, correct: bool, elapsed_ms: int) -> Stats:
        return apply_result(stats, skill, correct, elapsed_ms, max_level=self.max_level)

    def accuracy(self, skill_stats: SkillStats) -> float:
        return accuracy(skill_stats)

    def average_ms(self, skill_stats: SkillStats) -> float:
        return average_ms(skill_stats)

    def target_ms(self, level: int) -> int:
        return target_ms(level)

    def weakest_skill(self, stats: Mapping[str, SkillStats]) -> str:
        return weakest_skill(stats, self.skill_order)

    def pick_skill(self, stats: Mapping[str, SkillStats], rng: Optional[random.Random] = None) -> str:
        return pick_skill(stats, self.skill_order, rng)
