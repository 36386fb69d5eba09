"""Modal keybinding layers ("hydras") for keyboard-driven hosts."""

from .errors import (
    AccessorMisuse,
    ConfigConflict,
    HydraError,
    MissingCollaborator,
    ValidationError,
)
from .heads import Color, ForeignKeys, color_from_config, config_from_color
from .modes import ActiveModeSlot, Hydra, HydraManager, ModeState

__all__ = [
    "AccessorMisuse",
    "ActiveModeSlot",
    "Color",
    "ConfigConflict",
    "ForeignKeys",
    "Hydra",
    "HydraError",
    "HydraManager",
    "MissingCollaborator",
    "ModeState",
    "ValidationError",
    "color_from_config",
    "config_from_color",
]

__version__ = "0.1.0"
