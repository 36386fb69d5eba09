"""Host collaborator contracts and the in-memory reference host."""

from .protocols import (
    ExpressionEvaluator,
    HintPresenter,
    InputPeek,
    KeyBinder,
    Layer,
    LayerFactory,
    Notifier,
    OptionKey,
    OptionSnapshot,
    OptionsStore,
)
from .services import HostServices
from .simulated import MemoryOptions, SimulatedHost

__all__ = [
    "ExpressionEvaluator",
    "HintPresenter",
    "HostServices",
    "InputPeek",
    "KeyBinder",
    "Layer",
    "LayerFactory",
    "MemoryOptions",
    "Notifier",
    "OptionKey",
    "OptionSnapshot",
    "OptionsStore",
    "SimulatedHost",
]
