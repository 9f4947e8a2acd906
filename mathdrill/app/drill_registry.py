from __future__ import annotations

"""Provider registry and mode metadata.

Discover providers, expose the selectable modes (mix + one per skill) and
construct provider instances via a simple factory.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

from ..drills.base_provider import TrainingProvider
from ..drills.math_provider import MathTrainingProvider

MIX_MODE = "mix"


@dataclass(frozen=True)
class ModeMeta:
    key: str
    label: str
    subtitle: str
    icon: str


_FACTORIES: Dict[str, Callable[[], TrainingProvider]] = {
    "math": MathTrainingProvider,
}


def list_providers() -> List[str]:
    return list(_FACTORIES)


def make_provider(provider_id: str) -> TrainingProvider:
    try:
        factory = _FACTORIES[provider_id]
    except KeyError:
        raise KeyError(f"Unknown provider id: {provider_id}") from None
    return factory()


def list_modes(provider: TrainingProvider) -> List[ModeMeta]:
    """Random mix first, then one mode per skill in the provider's order."""
    modes = [ModeMeta(key=MIX_MODE, label="Random mix", subtitle="Adaptive blend", icon="M")]
    for skill in provider.skill_order:
        d = provider.skills[skill]
        modes.append(ModeMeta(key=skill, label=d.label, subtitle=d.subtitle, icon=d.symbol))
    return modes


def mode_keys(provider: TrainingProvider) -> List[str]:
    return [m.key for m in list_modes(provider)]


def get_mode(provider: TrainingProvider, key: str) -> ModeMeta:
    for m in list_modes(provider):
        if m.key == key:
            return m
    raise KeyError(f"Unknown mode: {key}")
