"""Hydra instances, their controller state machine and the manager."""

from .config import HydraConfig
from .controller import HydraController
from .hydra import Hydra
from .layer import LayerConfig, LayerInput, build_layer_input
from .manager import HydraManager
from .state import ActiveModeSlot, ModeState

__all__ = [
    "ActiveModeSlot",
    "Hydra",
    "HydraConfig",
    "HydraController",
    "HydraManager",
    "LayerConfig",
    "LayerInput",
    "ModeState",
    "build_layer_input",
]
