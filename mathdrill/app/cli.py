from __future__ import annotations

"""Terminal driver for mathdrill using SessionManager and the provider registry."""

import argparse
import time
from typing import Any, Optional

from analytics import AnalyticsConfig, compute_report, overall_row

from ..config.config import EngineConfig, load_config, to_engine_config, validate_config
from ..stats.stats import format_summary, percent
from ..storage.store import JsonFileStore
from ..util.randomness import seed_if_needed
from .drill_registry import list_modes, make_provider
from .events import EventBus
from .scheduler import RealtimeScheduler
from .session_manager import Feedback, SessionManager


def _engine_config(args: argparse.Namespace) -> EngineConfig:
    cfg = validate_config(load_config(getattr(args, "config", None)))
    if getattr(args, "explain", False):
        cfg["explain"] = True
    return to_engine_config(cfg)


def _build_manager(cfg: EngineConfig, scheduler: Optional[RealtimeScheduler] = None) -> SessionManager:
    provider = make_provider(cfg.provider)
    return SessionManager(
        provider,
        scheduler or RealtimeScheduler(),
        store=JsonFileStore(cfg.storage_dir),
        config=cfg,
        bus=EventBus(),
    )


def _print_feedback(fb: Feedback) -> None:
    if fb.correct:
        print(f"Correct. ({fb.ms / 1000:.1f}s)")
    elif fb.timed_out:
        print(f"Time's up. Answer: {fb.expected}")
    else:
        print(f"Not yet. Answer: {fb.expected}")


def _print_report(sm: SessionManager) -> None:
    report = compute_report(sm.stats, sm.provider, AnalyticsConfig())
    overall = overall_row(report)
    print("Recent performance (last 12 attempts per skill):")
    if overall["attempts"]:
        pct = percent(int(report["correct"].sum()), overall["attempts"])
        print(
            f"  Overall: {pct}% over {overall['attempts']} attempts, "
            f"avg {overall['average_ms'] / 1000:.1f}s"
        )
    for row in report.itertuples(index=False):
        if row.attempts == 0:
            print(f"  {row.label:<15} lvl {row.level:>2}  No data yet")
            continue
        pace = "on pace" if row.on_pace else "slow"
        print(
            f"  {row.label:<15} lvl {row.level:>2}  {percent(int(row.correct), int(row.attempts)):>3}%  "
            f"avg {row.avg_ms / 1000:.1f}s / target {row.target_ms / 1000:.1f}s ({pace})"
        )
    print(f"  Weakest: {sm.provider.skills[sm.weakest_skill()].label}")


def _run_drill(sm: SessionManager, scheduler: RealtimeScheduler, mode: str) -> dict[str, Any]:
    sm.bus.subscribe("answer_scored", _print_feedback)
    sm.start_session(mode)
    n = sm.settings.question_count
    while sm.screen == "drill":
        scheduler.poll()
        st = sm.state
        if st.question is None:
            break
        if not st.answered:
            target = sm.target_ms / 1000
            try:
                raw = input(f"Q{st.question_index}/{n} [{st.time_left}s, target {target:.1f}s] {sm.question_text} = ")
            except EOFError:
                sm.go_to_menu()
                break
            # Fire ticks (and a possible timeout) that came due while typing
            scheduler.poll()
            if not sm.awaiting_answer:
                continue
            if sm.submit(raw) is None and st.error:
                print(st.error)
            continue
        fb = st.feedback
        if fb is not None and (fb.correct or fb.timed_out):
            time.sleep(sm.config.auto_advance_ms / 1000)
            scheduler.poll()
        else:
            try:
                input("Press Enter for the next question...")
            except EOFError:
                sm.go_to_menu()
                break
            sm.next_question()
    return sm.summary()


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="mathdrill")
    p.add_argument("--config", default=None, help="Path to YAML config")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list-modes")
    sub.add_parser("show-settings")
    sub.add_parser("stats")
    sub.add_parser("reset-stats")

    sp = sub.add_parser("set")
    sp.add_argument("control", help="Setting id, e.g. question_count")
    sp.add_argument("steps", type=int, help="Number of steps to move (negative to lower)")

    rp = sub.add_parser("run")
    rp.add_argument("--mode", default=None, help="mix or a skill key")
    rp.add_argument("--questions", type=int, default=None, help="Questions for this run only")
    rp.add_argument("--time-limit", type=int, default=None, help="Seconds per question for this run only")
    rp.add_argument("--explain", action="store_true")

    args = p.parse_args(argv)
    cfg = _engine_config(args)
    if cfg.explain:
        from .explain import enable as explain_enable
        explain_enable(True)

    if args.cmd == "list-modes":
        provider = make_provider(cfg.provider)
        for m in list_modes(provider):
            print(f"{m.key}: {m.label} ({m.icon}) - {m.subtitle}")
        return 0

    sm = _build_manager(cfg)

    if args.cmd == "show-settings":
        for c in sm.provider.setting_controls:
            value = c.get_value(sm.settings)
            print(f"{c.id}: {c.format_value(value)}  [{c.min}..{c.max}, step {c.step}] {c.label}")
        return 0

    if args.cmd == "set":
        if sm.provider.control(args.control) is None:
            print(f"Unknown setting: {args.control}")
            return 2
        sm.adjust_setting(args.control, args.steps)
        c = sm.provider.control(args.control)
        print(f"{c.id}: {c.format_value(c.get_value(sm.settings))}")
        return 0

    if args.cmd == "stats":
        _print_report(sm)
        return 0

    if args.cmd == "reset-stats":
        sm.reset_stats()
        print("Stats reset.")
        return 0

    if args.cmd == "run":
        seed_if_needed(sm.rng)
        # One-off overrides; clamped like saved settings but not persisted
        for control_id, value in (("question_count", args.questions), ("time_limit_seconds", args.time_limit)):
            if value is not None:
                sm.settings = sm.provider.control(control_id).set_value(sm.settings, value)
        scheduler = sm.scheduler
        summary = _run_drill(sm, scheduler, args.mode or sm.mode)
        print("\nSession Summary:")
        print(f"Accuracy {summary['accuracy']}%  Correct {summary['correct']}  Wrong {summary['wrong']}")
        print(format_summary(sm.stats, {k: d.label for k, d in sm.provider.skills.items()}))
        return 0

    return 1
