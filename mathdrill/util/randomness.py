from __future__ import annotations

"""Randomness helpers for operand draws, question ids and seeding."""

import math
import os
import random
import time
from typing import Optional

import numpy as np


def seed_if_needed(rng: Optional[random.Random] = None) -> None:
    """Seed RNGs if SEED env var is set."""
    seed = os.environ.get("SEED")
    if seed is None:
        return
    try:
        s = int(seed)
    except ValueError:
        return
    (rng or random).seed(s)
    np.random.seed(s)


def random_int(lo: int, hi: int, rng: Optional[random.Random] = None) -> int:
    """Uniform integer in [lo, hi] (inclusive), bounds rounded inward."""
    safe_lo = math.ceil(lo)
    safe_hi = math.floor(hi)
    return (rng or random).randint(safe_lo, safe_hi)


def make_question_id(skill: str, rng: Optional[random.Random] = None) -> str:
    """Skill, wall-clock milliseconds and a random hex suffix."""
    suffix = "%012x" % (rng or random).getrandbits(48)
    return f"{skill}-{int(time.time() * 1000)}-{suffix}"
