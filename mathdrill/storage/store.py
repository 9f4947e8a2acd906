from __future__ import annotations

"""Best-effort persistence for the two JSON blobs (session, settings).

Reads return None for anything missing or malformed; writes never raise.
The session engine treats persistence as a side effect it does not wait on.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from pydantic import ValidationError

from ..app.explain import trace as xtrace
from ..stats.stats import MAX_HISTORY, Result, SkillStats, Stats, stats_to_json
from .schema import SessionBlob, SettingsBlob


class BlobStore(Protocol):
    def read_json(self, key: str) -> Any: ...

    def write_json(self, key: str, value: Any) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        # raw JSON text per key, like a browser's localStorage
        self.data: Dict[str, str] = dict(initial or {})

    def read_json(self, key: str) -> Any:
        raw = self.data.get(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    def write_json(self, key: str, value: Any) -> None:
        self.data[key] = json.dumps(value)


class JsonFileStore:
    """One `<key>.json` file per blob under `root` (':' in keys becomes '.')."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key.replace(':', '.')}.json"

    def read_json(self, key: str) -> Any:
        p = self.path_for(key)
        if not p.exists():
            return None
        try:
            with p.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            xtrace("storage_read_failed", {"key": key, "error": repr(exc)})
            return None

    def write_json(self, key: str, value: Any) -> None:
        p = self.path_for(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
        except (OSError, TypeError, ValueError) as exc:
            # Best-effort; the drill keeps its in-memory state
            xtrace("storage_write_failed", {"key": key, "error": repr(exc)})


def safe_write(store: BlobStore, key: str, value: Any) -> None:
    """Write through any store, tracing instead of raising on failure."""
    try:
        store.write_json(key, value)
    except Exception as exc:
        xtrace("storage_write_failed", {"key": key, "error": repr(exc)})


def safe_read(store: BlobStore, key: str) -> Any:
    try:
        return store.read_json(key)
    except Exception as exc:
        xtrace("storage_read_failed", {"key": key, "error": repr(exc)})
        return None


def decode_session_blob(
    data: Any,
    skill_order: Sequence[str],
    max_level: int,
    modes: Sequence[str],
) -> Tuple[Optional[Stats], Optional[str]]:
    """Validate a session blob into (stats, mode); unusable parts come back None.

    Skills missing from the blob start fresh, unknown skills are dropped and
    levels are clamped into [1, max_level].
    """
    if not isinstance(data, dict):
        return None, None
    try:
        blob = SessionBlob.model_validate(data)
    except ValidationError as exc:
        xtrace("session_blob_rejected", {"errors": exc.error_count()})
        return None, None

    stats: Optional[Stats] = None
    if blob.stats is not None:
        stats = {}
        for skill in skill_order:
            m = blob.stats.get(skill)
            if m is None:
                stats[skill] = SkillStats()
                continue
            history = tuple(Result(correct=r.correct, ms=r.ms) for r in m.history)[-MAX_HISTORY:]
            stats[skill] = SkillStats(
                level=min(m.level, max_level),
                streak=m.streak,
                mistake_streak=m.mistakeStreak,
                history=history,
            )
    mode = blob.mode if blob.mode in modes else None
    return stats, mode


def encode_session_blob(stats: Stats, mode: str) -> Dict[str, Any]:
    return {"stats": stats_to_json(stats), "mode": mode}


def decode_settings_blob(data: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(data, dict):
        return None
    try:
        return SettingsBlob.model_validate(data).model_dump()
    except ValidationError:
        return None
