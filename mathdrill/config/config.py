from __future__ import annotations

"""Configuration loading and validation for mathdrill.

This module loads YAML configuration, applies defaults, sanity-checks
values and freezes the result into an `EngineConfig` that is handed to the
session manager at construction.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

ALLOWED_PROVIDERS = {"math"}

DEFAULT_AUTO_ADVANCE_MS = 700
DEFAULT_TICK_MS = 1000


@dataclass(frozen=True)
class EngineConfig:
    provider: str = "math"
    storage_dir: Path = Path("./.mathdrill")
    storage_prefix: str = "mathdrill"
    default_mode: str = "mix"
    auto_advance_ms: int = DEFAULT_AUTO_ADVANCE_MS
    tick_ms: int = DEFAULT_TICK_MS
    explain: bool = False
    settings: Mapping[str, Any] = field(default_factory=dict)

    @property
    def session_key(self) -> str:
        return f"{self.storage_prefix}:session"

    @property
    def settings_key(self) -> str:
        return f"{self.storage_prefix}:settings"


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"WARNING: Config file {path} is not a mapping, using defaults.")
        return {}
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def _positive_int(section: Dict[str, Any], name: str, default: int) -> None:
    value = section.get(name)
    try:
        ok = int(value) > 0
    except (TypeError, ValueError):
        ok = False
    if not ok:
        print(f"WARNING: Invalid {name} '{value}', using {default}.")
        section[name] = default
    else:
        section[name] = int(value)


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    cfg.setdefault("provider", "math")
    cfg.setdefault("explain", False)
    cfg.setdefault("storage", {})
    cfg.setdefault("session", {})
    cfg.setdefault("settings", {})

    storage = cfg["storage"]
    session = cfg["session"]

    storage.setdefault("dir", "./.mathdrill")
    storage.setdefault("prefix", "mathdrill")

    session.setdefault("default_mode", "mix")
    session.setdefault("auto_advance_ms", DEFAULT_AUTO_ADVANCE_MS)
    session.setdefault("tick_ms", DEFAULT_TICK_MS)

    provider = cfg.get("provider")
    if provider not in ALLOWED_PROVIDERS:
        print(f"WARNING: Unsupported provider '{provider}', using 'math'.")
        cfg["provider"] = "math"

    _positive_int(session, "auto_advance_ms", DEFAULT_AUTO_ADVANCE_MS)
    _positive_int(session, "tick_ms", DEFAULT_TICK_MS)

    if not isinstance(cfg["settings"], dict):
        print("WARNING: 'settings' must be a mapping, ignoring it.")
        cfg["settings"] = {}

    cfg["explain"] = bool(cfg["explain"])
    return cfg


def to_engine_config(cfg: Dict[str, Any]) -> EngineConfig:
    """Freeze a validated config dictionary."""
    return EngineConfig(
        provider=str(cfg["provider"]),
        storage_dir=Path(cfg["storage"]["dir"]),
        storage_prefix=str(cfg["storage"]["prefix"]),
        default_mode=str(cfg["session"]["default_mode"]),
        auto_advance_ms=int(cfg["session"]["auto_advance_ms"]),
        tick_ms=int(cfg["session"]["tick_ms"]),
        explain=bool(cfg["explain"]),
        settings=dict(cfg["settings"]),
    )
