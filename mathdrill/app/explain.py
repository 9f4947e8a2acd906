from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the CLI flag or `explain: true` in the config and emit terse,
readable lines at milestones: session start/end, question created, graded,
timeout, level change, persistence failures.
"""

import json
import sys
from typing import Any, Dict, TextIO

_ENABLED = False
_STREAM: TextIO | None = None


def enable(flag: bool = True, stream: TextIO | None = None) -> None:
    global _ENABLED, _STREAM
    _ENABLED = bool(flag)
    _STREAM = stream


def enabled() -> bool:
    return _ENABLED


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    out = _STREAM or sys.stdout
    try:
        data = (payload or {})
        # keep it short; one line JSON
        print(f"[EXPLAIN] {event} :: {json.dumps(data, separators=(',', ':'), default=str)}", file=out)
    except (TypeError, ValueError):
        print(f"[EXPLAIN] {event}", file=out)
