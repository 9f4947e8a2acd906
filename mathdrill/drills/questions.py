from __future__ import annotations

"""Arithmetic question generation from the level tables."""

import random
from dataclasses import dataclass
from typing import Optional

from ..levels.level_table import get_level_spec
from ..util.randomness import make_question_id, random_int

SKILL_LABELS = {
    "add": "Addition",
    "sub": "Subtraction",
    "mul": "Multiplication",
    "div": "Division",
}

SKILL_SYMBOLS = {
    "add": "+",
    "sub": "-",
    "mul": "x",
    "div": "/",
}


@dataclass(frozen=True)
class Question:
    """One drill prompt. `id` only marks a new turn; it says nothing about content."""

    id: str
    skill: str
    level: int
    text: str
    answer: int


def generate_question(
    skill: str,
    level: int,
    allow_negative: Optional[bool] = None,
    rng: Optional[random.Random] = None,
) -> Question:
    """Draw a question for `skill` at `level`.

    Subtraction keeps the drawn order only when negatives are allowed;
    otherwise the larger operand goes first. Division builds the dividend
    from divisor and quotient so the answer is always a whole number.
    """
    if skill not in SKILL_LABELS:
        raise KeyError(f"Unknown skill: {skill}")
    spec = get_level_spec(skill, level)
    a = random_int(spec.min_a, spec.max_a, rng)
    b = random_int(spec.min_b, spec.max_b, rng)
    qid = make_question_id(skill, rng)

    if skill == "add":
        return Question(id=qid, skill=skill, level=level, text=f"{a} + {b}", answer=a + b)

    if skill == "sub":
        negatives = spec.allow_negative if allow_negative is None else allow_negative
        high, low = (a, b) if negatives else (max(a, b), min(a, b))
        return Question(id=qid, skill=skill, level=level, text=f"{high} - {low}", answer=high - low)

    if skill == "mul":
        return Question(id=qid, skill=skill, level=level, text=f"{a} x {b}", answer=a * b)

    divisor = max(1, a)
    quotient = b
    dividend = divisor * quotient
    return Question(id=qid, skill=skill, level=level, text=f"{dividend} / {divisor}", answer=quotient)
