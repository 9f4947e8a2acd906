"""mathdrill package initialization.

Adaptive arithmetic drills: level tables, leveling policy, skill selection
and a timer-driven session manager that a front end can sit on top of.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .app.drill_registry import list_modes, make_provider  # noqa: E402
from .app.scheduler import ManualScheduler, RealtimeScheduler  # noqa: E402
from .app.session_manager import Feedback, SessionManager  # noqa: E402
from .config.config import EngineConfig  # noqa: E402
from .drills.math_provider import MathSettings, MathTrainingProvider  # noqa: E402

__all__ = [
    "__version__",
    "EngineConfig",
    "Feedback",
    "ManualScheduler",
    "MathSettings",
    "MathTrainingProvider",
    "RealtimeScheduler",
    "SessionManager",
    "list_modes",
    "make_provider",
]
