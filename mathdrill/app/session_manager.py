from __future__ import annotations

"""Session Manager: screens, per-question countdown, auto-advance, persistence.

The manager is front-end agnostic. A presentation layer reads its state,
calls its actions and listens to the event bus; time only moves through the
injected scheduler, so the whole drill is deterministic under a
ManualScheduler.

Timer discipline: the countdown and auto-advance slots are each cancelled
before being re-armed, and every callback carries the id of the question it
was armed for. A callback that fires for a stale question, or after the
question was already scored, does nothing.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from ..config.config import EngineConfig
from ..drills.base_provider import TrainingProvider
from ..stats.stats import Stats, percent
from ..storage.store import (
    BlobStore,
    MemoryStore,
    decode_session_blob,
    decode_settings_blob,
    encode_session_blob,
    safe_read,
    safe_write,
)
from .drill_registry import MIX_MODE, mode_keys
from .events import EventBus
from .explain import trace as xtrace
from .scheduler import Scheduler, TimerHandle

Screen = Literal["menu", "drill", "summary", "stats", "settings"]


@dataclass(frozen=True)
class Feedback:
    correct: bool
    expected: str
    ms: int
    skill: str
    level: int
    timed_out: bool = False


@dataclass
class DrillState:
    """Ephemeral per-run state; rebuilt by start_session, cleared on menu return."""

    correct_count: int = 0
    wrong_count: int = 0
    question_index: int = 1
    question: Any = None
    answer_text: str = ""
    feedback: Optional[Feedback] = None
    error: Optional[str] = None
    time_left: int = 0
    answered: bool = False
    started_at_ms: int = 0
    history: List[Feedback] = field(default_factory=list)


class SessionManager:
    def __init__(
        self,
        provider: TrainingProvider,
        scheduler: Scheduler,
        *,
        store: Optional[BlobStore] = None,
        config: EngineConfig = EngineConfig(),
        bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        on_session_complete: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        self.provider = provider
        self.scheduler = scheduler
        self.store = store if store is not None else MemoryStore()
        self.config = config
        self.bus = bus or EventBus()
        self.rng = rng or random.Random()
        self.on_session_complete = on_session_complete

        self.screen: Screen = "menu"
        self.state = DrillState()
        self._countdown: Optional[TimerHandle] = None
        self._advance: Optional[TimerHandle] = None

        self._modes = mode_keys(provider)
        self.default_settings = provider.settings_from_json(config.settings)
        saved_settings = decode_settings_blob(safe_read(self.store, config.settings_key))
        self.settings = provider.settings_from_json(saved_settings, base=self.default_settings)

        stats, mode = decode_session_blob(
            safe_read(self.store, config.session_key),
            provider.skill_order,
            provider.max_level,
            self._modes,
        )
        self.stats: Stats = stats if stats is not None else provider.create_default_stats()
        fallback_mode = config.default_mode if config.default_mode in self._modes else MIX_MODE
        self.mode: str = mode or fallback_mode
        self.state.time_left = self.settings.time_limit_seconds

    # ----- derived views -------------------------------------------------

    @property
    def question(self) -> Any:
        return self.state.question

    @property
    def awaiting_answer(self) -> bool:
        return self.screen == "drill" and self.state.question is not None and not self.state.answered

    @property
    def allow_negative_answer(self) -> bool:
        q = self.state.question
        if q is None:
            return False
        return self.provider.answer.allow_negative(q, self.settings)

    @property
    def keypad_rows(self) -> Optional[List[List[str]]]:
        return self.provider.answer.keypad_rows(self.allow_negative_answer)

    @property
    def question_text(self) -> Optional[str]:
        q = self.state.question
        return None if q is None else self.provider.question_text(q)

    @property
    def target_ms(self) -> Optional[int]:
        q = self.state.question
        return None if q is None else self.provider.target_ms(q.level)

    def weakest_skill(self) -> str:
        return self.provider.weakest_skill(self.stats)

    def summary(self) -> Dict[str, Any]:
        correct = self.state.correct_count
        wrong = self.state.wrong_count
        total = correct + wrong
        return {
            "mode": self.mode,
            "correct": correct,
            "wrong": wrong,
            "total": total,
            "accuracy": percent(correct, total),
        }

    # ----- screens -------------------------------------------------------

    def _set_screen(self, screen: Screen) -> None:
        if screen != self.screen:
            self.screen = screen
            self.bus.emit("screen_changed", screen)

    def start_session(self, mode: Optional[str] = None) -> None:
        mode = self.mode if mode is None else mode
        if mode not in self._modes:
            raise ValueError(f"Unknown mode: {mode}")
        self._cancel_timers()
        self.mode = mode
        self.state = DrillState()
        self._persist_session()
        self._set_screen("drill")
        xtrace("session_started", {"mode": mode, "questions": self.settings.question_count})
        self._begin_question(self._create_question())

    def practice_again(self) -> None:
        self.start_session(self.mode)

    def go_to_menu(self) -> None:
        self._clear_drill()
        self._set_screen("menu")

    def show_stats(self) -> None:
        self._clear_drill()
        self._set_screen("stats")

    def show_settings(self) -> None:
        self._clear_drill()
        self._set_screen("settings")

    def _clear_drill(self) -> None:
        self._cancel_timers()
        self.state.question = None
        self.state.feedback = None
        self.state.error = None
        self.state.answer_text = ""
        self.state.answered = False

    # ----- questions -----------------------------------------------------

    def _create_question(self) -> Any:
        if self.mode == MIX_MODE:
            skill = self.provider.pick_skill(self.stats, self.rng)
        else:
            skill = self.mode
        level = self.stats[skill].level
        q = self.provider.create_question(skill, level, self.settings, self.stats, self.rng)
        xtrace("question_created", {"index": self.state.question_index, "skill": skill, "level": level})
        return q

    def _begin_question(self, question: Any) -> None:
        self._cancel_timers()
        st = self.state
        st.question = question
        st.answer_text = ""
        st.error = None
        st.feedback = None
        st.answered = False
        st.started_at_ms = self.scheduler.now_ms()
        st.time_left = self.settings.time_limit_seconds
        qid = question.id
        self._countdown = self.scheduler.call_every(self.config.tick_ms, lambda: self._on_tick(qid))
        self.bus.emit("question_started", {"index": st.question_index, "question": question})

    def next_question(self) -> None:
        st = self.state
        if st.question is None or not st.answered:
            return
        self._cancel_advance()
        next_index = st.question_index + 1
        if next_index > self.settings.question_count:
            self._cancel_timers()
            st.question = None
            st.answered = False
            self._set_screen("summary")
            summary = self.summary()
            xtrace("session_ended", summary)
            self.bus.emit("session_completed", summary)
            if self.on_session_complete is not None:
                self.on_session_complete(summary)
            return
        st.question_index = next_index
        self._begin_question(self._create_question())

    # ----- answering -----------------------------------------------------

    def set_answer(self, raw: str) -> None:
        if self.state.question is None:
            return
        self.state.answer_text = self.provider.answer.sanitize(raw, self.allow_negative_answer)
        self.state.error = None

    def press_key(self, key: str) -> None:
        """Keypad editing: digits, CLR, DEL and a sign toggle when negatives are allowed."""
        st = self.state
        if st.question is None or st.answered:
            return
        st.error = None
        prev = st.answer_text
        if key == "CLR":
            st.answer_text = ""
        elif key == "DEL":
            st.answer_text = prev[:-1]
        elif key == "-":
            if not self.allow_negative_answer:
                return
            if prev.startswith("-"):
                st.answer_text = prev[1:]
            elif prev == "":
                st.answer_text = "-"
            else:
                st.answer_text = f"-{prev}"
        elif key.isdigit():
            if prev == "0":
                st.answer_text = key
            elif prev == "-0":
                st.answer_text = f"-{key}"
            else:
                st.answer_text = prev + key

    def submit(self, answer: Optional[str] = None, *, use_keypad: bool = False) -> Optional[Feedback]:
        """Score the current input; returns the feedback, or None if nothing was scored.

        Rejected input sets `state.error` and leaves the countdown running.
        """
        if not self.awaiting_answer:
            return None
        if answer is not None:
            self.set_answer(answer)
        contract = self.provider.answer
        allow_negative = self.allow_negative_answer
        cleaned = contract.sanitize(self.state.answer_text.strip(), allow_negative)
        parsed = contract.parse(cleaned, allow_negative)
        if not parsed.ok:
            self.state.error = contract.errors.message(parsed.error, use_keypad)
            self.bus.emit("input_rejected", {"error": parsed.error, "message": self.state.error})
            return None
        elapsed = self.scheduler.now_ms() - self.state.started_at_ms
        correct = bool(contract.is_correct(parsed.value, self.state.question))
        self._cancel_advance()
        return self._apply_result(correct, elapsed)

    def _on_tick(self, question_id: str) -> None:
        st = self.state
        if self.screen != "drill" or st.question is None or st.question.id != question_id or st.answered:
            return
        if st.time_left <= 1:
            st.time_left = 0
            self._cancel_countdown()
            self._handle_timeout()
            return
        st.time_left -= 1
        self.bus.emit("tick", st.time_left)

    def _handle_timeout(self) -> None:
        if not self.awaiting_answer:
            return
        elapsed = self.scheduler.now_ms() - self.state.started_at_ms
        xtrace("timeout", {"index": self.state.question_index, "elapsed_ms": elapsed})
        self._apply_result(False, elapsed, timed_out=True)

    def _apply_result(self, correct: bool, elapsed_ms: int, timed_out: bool = False) -> Feedback:
        st = self.state
        q = st.question
        self._cancel_countdown()
        self.stats = self.provider.apply_result(self.stats, q.skill, correct, elapsed_ms)
        fb = Feedback(
            correct=correct,
            expected=self.provider.answer.format_expected(q),
            ms=int(elapsed_ms),
            skill=q.skill,
            level=q.level,
            timed_out=timed_out,
        )
        st.feedback = fb
        st.history.append(fb)
        if correct:
            st.correct_count += 1
        else:
            st.wrong_count += 1
        st.error = None
        st.answered = True
        xtrace("graded", {"index": st.question_index, "skill": q.skill, "correct": correct, "ms": int(elapsed_ms)})
        self._persist_session()
        self.bus.emit("answer_scored", fb)
        if correct or timed_out:
            self._arm_advance(q.id)
        return fb

    def _arm_advance(self, question_id: str) -> None:
        self._cancel_advance()
        self._advance = self.scheduler.call_later(
            self.config.auto_advance_ms, lambda: self._on_auto_advance(question_id)
        )

    def _on_auto_advance(self, question_id: str) -> None:
        st = self.state
        if self.screen != "drill" or st.question is None or st.question.id != question_id or not st.answered:
            return
        self.next_question()

    # ----- stats & settings ------------------------------------------------

    def reset_stats(self) -> None:
        self.stats = self.provider.create_default_stats()
        self._persist_session()
        self.bus.emit("stats_reset", None)

    def adjust_setting(self, control_id: str, delta: int) -> None:
        control = self.provider.control(control_id)
        if control is None:
            return
        current = control.get_value(self.settings)
        self.settings = control.set_value(self.settings, current + control.step * delta)
        safe_write(self.store, self.config.settings_key, self.provider.settings_to_json(self.settings))
        self.bus.emit("settings_changed", self.settings)

    def _persist_session(self) -> None:
        safe_write(self.store, self.config.session_key, encode_session_blob(self.stats, self.mode))

    # ----- timers --------------------------------------------------------

    def _cancel_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _cancel_advance(self) -> None:
        if self._advance is not None:
            self._advance.cancel()
            self._advance = None

    def _cancel_timers(self) -> None:
        self._cancel_countdown()
        self._cancel_advance()
