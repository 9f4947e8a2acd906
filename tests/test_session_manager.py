import json
import random
import unittest
from dataclasses import replace

from mathdrill.app.scheduler import ManualScheduler
from mathdrill.app.session_manager import SessionManager
from mathdrill.config.config import EngineConfig
from mathdrill.drills.math_provider import SETTING_CONTROLS, SKILL_ORDER, MathTrainingProvider
from mathdrill.storage.store import MemoryStore

SESSION_KEY = "mathdrill:session"
SETTINGS_KEY = "mathdrill:settings"


class ShortSessionProvider(MathTrainingProvider):
    """Math provider that allows sessions shorter than five questions."""

    setting_controls = (replace(SETTING_CONTROLS[0], min=1),) + SETTING_CONTROLS[1:]


class BrokenStore:
    def read_json(self, key):
        raise OSError("disk gone")

    def write_json(self, key, value):
        raise OSError("disk gone")


def _manager(settings=None, session=None, provider=None, store=None, **kwargs):
    if store is None:
        store = MemoryStore()
        if settings is not None:
            store.data[SETTINGS_KEY] = json.dumps(settings)
        if session is not None:
            store.data[SESSION_KEY] = session if isinstance(session, str) else json.dumps(session)
    scheduler = ManualScheduler()
    sm = SessionManager(
        provider or MathTrainingProvider(),
        scheduler,
        store=store,
        rng=random.Random(5),
        **kwargs,
    )
    return sm, scheduler, store


def _right(sm):
    return str(sm.question.answer)


def _wrong(sm):
    return str(sm.question.answer + 1)


class SessionFlowTests(unittest.TestCase):
    def test_three_question_session_summary(self) -> None:
        completed = []
        sm, clock, _ = _manager(
            settings={"questionCount": 3},
            provider=ShortSessionProvider(),
            on_session_complete=completed.append,
        )
        events = []
        sm.bus.subscribe("session_completed", events.append)
        sm.start_session("add")
        self.assertEqual(sm.screen, "drill")
        self.assertEqual(sm.state.question_index, 1)

        clock.advance(1500)
        fb = sm.submit(_right(sm))
        self.assertTrue(fb.correct)
        self.assertEqual(fb.ms, 1500)
        clock.advance(700)
        self.assertEqual(sm.state.question_index, 2)

        fb = sm.submit(_wrong(sm))
        self.assertFalse(fb.correct)
        self.assertFalse(fb.timed_out)
        clock.advance(5000)
        # a wrong answer waits for the user
        self.assertEqual(sm.state.question_index, 2)
        self.assertTrue(sm.state.answered)
        sm.next_question()
        self.assertEqual(sm.state.question_index, 3)

        sm.submit(_right(sm))
        clock.advance(700)
        self.assertEqual(sm.screen, "summary")
        self.assertIsNone(sm.question)
        expected = {"mode": "add", "correct": 2, "wrong": 1, "total": 3, "accuracy": 67}
        self.assertEqual(sm.summary(), expected)
        self.assertEqual(completed, [expected])
        self.assertEqual(events, [expected])
        self.assertEqual(clock.pending(), 0)

    def test_summary_rounds_half_percent_up(self) -> None:
        sm, _, _ = _manager(settings={"questionCount": 8})
        sm.start_session("add")
        for i in range(8):
            sm.submit(_right(sm) if i < 5 else _wrong(sm))
            sm.next_question()
        self.assertEqual(sm.screen, "summary")
        summary = sm.summary()
        self.assertEqual((summary["correct"], summary["wrong"]), (5, 3))
        self.assertEqual(summary["accuracy"], 63)

    def test_mix_mode_draws_known_skills(self) -> None:
        sm, _, _ = _manager()
        self.assertEqual(sm.mode, "mix")
        sm.start_session()
        self.assertIn(sm.question.skill, SKILL_ORDER)

    def test_single_skill_mode_uses_that_skill_and_level(self) -> None:
        sm, _, _ = _manager(session={"stats": {"div": {"level": 7}}, "mode": "div"})
        sm.start_session()
        self.assertEqual(sm.question.skill, "div")
        self.assertEqual(sm.question.level, 7)

    def test_unknown_mode_rejected(self) -> None:
        sm, _, _ = _manager()
        with self.assertRaises(ValueError):
            sm.start_session("pow")
        self.assertEqual(sm.screen, "menu")

    def test_next_question_requires_an_answer(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("add")
        first = sm.question
        sm.next_question()
        self.assertIs(sm.question, first)
        self.assertEqual(sm.state.question_index, 1)

    def test_submit_after_scoring_is_ignored(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("add")
        self.assertIsNotNone(sm.submit(_right(sm)))
        self.assertIsNone(sm.submit(_right(sm)))
        self.assertEqual(sm.state.correct_count, 1)

    def test_practice_again_restarts_same_mode(self) -> None:
        sm, clock, _ = _manager(settings={"questionCount": 1}, provider=ShortSessionProvider())
        sm.start_session("mul")
        sm.submit(_right(sm))
        clock.advance(700)
        self.assertEqual(sm.screen, "summary")
        sm.practice_again()
        self.assertEqual(sm.screen, "drill")
        self.assertEqual(sm.question.skill, "mul")
        self.assertEqual(sm.summary()["total"], 0)

    def test_screen_events(self) -> None:
        sm, _, _ = _manager()
        screens = []
        sm.bus.subscribe("screen_changed", screens.append)
        sm.show_stats()
        sm.show_settings()
        sm.go_to_menu()
        sm.start_session("add")
        self.assertEqual(screens, ["stats", "settings", "menu", "drill"])


class TimerTests(unittest.TestCase):
    def test_countdown_then_timeout_then_auto_advance(self) -> None:
        sm, clock, _ = _manager()
        ticks = []
        sm.bus.subscribe("tick", ticks.append)
        sm.start_session("mul")
        self.assertEqual(sm.state.time_left, 10)

        clock.advance(9999)
        self.assertEqual(ticks, [9, 8, 7, 6, 5, 4, 3, 2, 1])
        self.assertTrue(sm.awaiting_answer)

        clock.advance(1)
        fb = sm.state.feedback
        self.assertTrue(fb.timed_out)
        self.assertFalse(fb.correct)
        self.assertEqual(fb.ms, 10000)
        self.assertEqual(sm.state.time_left, 0)
        self.assertEqual(sm.state.wrong_count, 1)
        self.assertFalse(sm.stats["mul"].history[-1].correct)

        clock.advance(699)
        self.assertEqual(sm.state.question_index, 1)
        clock.advance(1)
        self.assertEqual(sm.state.question_index, 2)
        self.assertEqual(sm.state.time_left, 10)
        self.assertTrue(sm.awaiting_answer)

    def test_rejected_input_keeps_countdown_running(self) -> None:
        sm, clock, _ = _manager()
        rejected = []
        sm.bus.subscribe("input_rejected", rejected.append)
        sm.start_session("add")
        clock.advance(3000)
        self.assertIsNone(sm.submit(""))
        self.assertEqual(sm.state.error, "Type an answer.")
        self.assertIsNone(sm.submit("", use_keypad=True))
        self.assertEqual(sm.state.error, "Tap numbers to continue.")
        self.assertEqual(rejected[0]["error"], "empty")
        self.assertTrue(sm.awaiting_answer)
        self.assertEqual(sm.state.time_left, 7)

        clock.advance(7000)
        self.assertTrue(sm.state.feedback.timed_out)

    def test_scoring_stops_the_countdown(self) -> None:
        sm, clock, _ = _manager()
        sm.start_session("add")
        sm.submit(_wrong(sm))
        left = sm.state.time_left
        clock.advance(60000)
        self.assertEqual(sm.state.time_left, left)
        self.assertEqual(sm.state.wrong_count, 1)
        self.assertEqual(clock.pending(), 0)

    def test_menu_cancels_pending_advance(self) -> None:
        sm, clock, _ = _manager()
        sm.start_session("add")
        sm.submit(_right(sm))
        sm.go_to_menu()
        self.assertEqual(clock.pending(), 0)
        clock.advance(5000)
        self.assertEqual(sm.screen, "menu")
        self.assertIsNone(sm.question)

    def test_restart_discards_previous_advance(self) -> None:
        sm, clock, _ = _manager()
        sm.start_session("add")
        sm.submit(_right(sm))
        sm.start_session("sub")
        fresh = sm.question
        self.assertEqual(clock.pending(), 1)
        clock.advance(700)
        self.assertIs(sm.question, fresh)
        self.assertEqual(sm.state.question_index, 1)
        self.assertTrue(sm.awaiting_answer)

    def test_tick_for_stale_question_is_ignored(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("add")
        sm._on_tick("add-0-000000000000")
        self.assertEqual(sm.state.time_left, 10)
        sm._on_auto_advance("add-0-000000000000")
        self.assertEqual(sm.state.question_index, 1)

    def test_custom_tick_and_advance_intervals(self) -> None:
        cfg = EngineConfig(tick_ms=500, auto_advance_ms=100)
        sm, clock, _ = _manager(config=cfg)
        sm.start_session("add")
        clock.advance(1000)
        self.assertEqual(sm.state.time_left, 8)
        sm.submit(_right(sm))
        clock.advance(100)
        self.assertEqual(sm.state.question_index, 2)


class AnswerInputTests(unittest.TestCase):
    def test_lone_minus_without_negatives_is_empty(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("sub")
        self.assertFalse(sm.allow_negative_answer)
        self.assertIsNone(sm.submit("-"))
        self.assertEqual(sm.state.error, "Type an answer.")
        self.assertTrue(sm.awaiting_answer)

    def test_lone_minus_with_negatives_is_incomplete(self) -> None:
        sm, _, _ = _manager(settings={"negativeLevel": 1})
        sm.start_session("sub")
        self.assertTrue(sm.allow_negative_answer)
        self.assertIsNone(sm.submit("-"))
        self.assertEqual(sm.state.error, "Type a number.")

    def test_set_answer_sanitizes(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("sub")
        sm.set_answer("-1a2")
        self.assertEqual(sm.state.answer_text, "12")

        sm, _, _ = _manager(settings={"negativeLevel": 1})
        sm.start_session("sub")
        sm.set_answer("-1a-2")
        self.assertEqual(sm.state.answer_text, "-12")

    def test_negatives_follow_level_threshold(self) -> None:
        sm, _, _ = _manager(settings={"negativeLevel": 4}, session={"stats": {"sub": {"level": 3}}})
        sm.start_session("sub")
        self.assertFalse(sm.allow_negative_answer)
        sm, _, _ = _manager(settings={"negativeLevel": 4}, session={"stats": {"sub": {"level": 4}}})
        sm.start_session("sub")
        self.assertTrue(sm.allow_negative_answer)
        sm.start_session("add")
        self.assertFalse(sm.allow_negative_answer)

    def test_keypad_editing(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("add")
        self.assertEqual(sm.keypad_rows[-1], ["CLR", "0", "DEL"])
        for key in ("0", "5", "1", "2"):
            sm.press_key(key)
        self.assertEqual(sm.state.answer_text, "512")
        sm.press_key("DEL")
        self.assertEqual(sm.state.answer_text, "51")
        sm.press_key("-")
        self.assertEqual(sm.state.answer_text, "51")
        sm.press_key("CLR")
        self.assertEqual(sm.state.answer_text, "")

    def test_keypad_sign_toggle(self) -> None:
        sm, _, _ = _manager(settings={"negativeLevel": 1})
        sm.start_session("sub")
        self.assertEqual(sm.keypad_rows[-1], ["-", "0", "DEL", "CLR"])
        sm.press_key("-")
        self.assertEqual(sm.state.answer_text, "-")
        sm.press_key("-")
        self.assertEqual(sm.state.answer_text, "")
        for key in ("-", "0", "7"):
            sm.press_key(key)
        self.assertEqual(sm.state.answer_text, "-7")
        sm.press_key("-")
        self.assertEqual(sm.state.answer_text, "7")
        sm.press_key("-")
        self.assertEqual(sm.state.answer_text, "-7")

    def test_keypad_ignored_once_answered(self) -> None:
        sm, _, _ = _manager()
        sm.start_session("add")
        sm.submit(_wrong(sm))
        before = sm.state.answer_text
        sm.press_key("9")
        sm.press_key("CLR")
        self.assertEqual(sm.state.answer_text, before)


class PersistenceTests(unittest.TestCase):
    def test_scored_answer_is_persisted_and_reloaded(self) -> None:
        sm, _, store = _manager()
        sm.start_session("add")
        sm.submit(_right(sm))
        blob = json.loads(store.data[SESSION_KEY])
        self.assertEqual(blob["mode"], "add")
        self.assertEqual(len(blob["stats"]["add"]["history"]), 1)

        again, _, _ = _manager(store=store)
        self.assertEqual(again.mode, "add")
        self.assertEqual(len(again.stats["add"].history), 1)
        self.assertTrue(again.stats["add"].history[0].correct)

    def test_malformed_session_blob_falls_back(self) -> None:
        for raw in ("not json", {"stats": {"add": {"level": "x"}}}, {"stats": []}, [1, 2]):
            sm, _, _ = _manager(session=raw)
            self.assertEqual(sm.mode, "mix")
            self.assertEqual(set(sm.stats), set(SKILL_ORDER))
            self.assertTrue(all(s.level == 1 for s in sm.stats.values()))

    def test_partial_session_blob_is_repaired(self) -> None:
        sm, _, _ = _manager(session={"stats": {"add": {"level": 999}, "pow": {"level": 2}}, "mode": "nope"})
        self.assertEqual(sm.stats["add"].level, 50)
        self.assertEqual(sm.stats["sub"].level, 1)
        self.assertNotIn("pow", sm.stats)
        self.assertEqual(sm.mode, "mix")

    def test_storage_failures_do_not_interrupt(self) -> None:
        sm, clock, _ = _manager(store=BrokenStore())
        self.assertEqual(sm.settings.question_count, 10)
        sm.start_session("add")
        fb = sm.submit(_right(sm))
        self.assertTrue(fb.correct)
        clock.advance(700)
        self.assertEqual(sm.state.question_index, 2)
        sm.adjust_setting("question_count", 1)
        self.assertEqual(sm.settings.question_count, 11)

    def test_reset_stats(self) -> None:
        sm, _, store = _manager(session={"stats": {"mul": {"level": 9, "streak": 2}}, "mode": "mul"})
        resets = []
        sm.bus.subscribe("stats_reset", resets.append)
        sm.reset_stats()
        self.assertTrue(all(s.level == 1 and not s.history for s in sm.stats.values()))
        self.assertEqual(json.loads(store.data[SESSION_KEY])["stats"]["mul"]["level"], 1)
        self.assertEqual(resets, [None])


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        sm, _, _ = _manager()
        self.assertEqual(sm.settings.question_count, 10)
        self.assertEqual(sm.settings.time_limit_seconds, 10)
        self.assertEqual(sm.settings.negative_level, 0)

    def test_saved_blob_is_clamped_and_filtered(self) -> None:
        sm, _, _ = _manager(settings={"questionCount": "lots", "timeLimitSeconds": 100, "negativeLevel": -4})
        self.assertEqual(sm.settings.question_count, 10)
        self.assertEqual(sm.settings.time_limit_seconds, 60)
        self.assertEqual(sm.settings.negative_level, 0)

    def test_config_settings_then_saved_blob(self) -> None:
        cfg = EngineConfig(settings={"questionCount": 20, "timeLimitSeconds": 30})
        sm, _, _ = _manager(config=cfg)
        self.assertEqual(sm.settings.question_count, 20)
        sm, _, _ = _manager(config=cfg, settings={"questionCount": 7})
        self.assertEqual(sm.settings.question_count, 7)
        self.assertEqual(sm.settings.time_limit_seconds, 30)

    def test_adjust_setting_steps_clamps_and_persists(self) -> None:
        sm, _, store = _manager()
        changed = []
        sm.bus.subscribe("settings_changed", changed.append)
        sm.adjust_setting("time_limit_seconds", 1)
        self.assertEqual(sm.settings.time_limit_seconds, 15)
        sm.adjust_setting("question_count", -100)
        self.assertEqual(sm.settings.question_count, 5)
        self.assertEqual(
            json.loads(store.data[SETTINGS_KEY]),
            {"questionCount": 5, "timeLimitSeconds": 15, "negativeLevel": 0},
        )
        self.assertEqual(len(changed), 2)

    def test_unknown_control_is_ignored(self) -> None:
        sm, _, store = _manager()
        before = sm.settings
        sm.adjust_setting("volume", 1)
        self.assertEqual(sm.settings, before)
        self.assertNotIn(SETTINGS_KEY, store.data)

    def test_time_limit_applies_to_next_question(self) -> None:
        sm, _, _ = _manager()
        sm.adjust_setting("time_limit_seconds", 2)
        sm.start_session("add")
        self.assertEqual(sm.state.time_left, 20)


if __name__ == "__main__":
    unittest.main()
