"""Head compilation and the color policy governing exits."""

from .colors import Color, ForeignKeys, color_from_config, config_from_color, head_color
from .models import Head, HeadAction, HeadDisplay, HeadOptions
from .table import EXIT_HEAD, HeadTable
from .validation import validate_config, validate_heads, validate_input

__all__ = [
    "Color",
    "ForeignKeys",
    "color_from_config",
    "config_from_color",
    "head_color",
    "Head",
    "HeadAction",
    "HeadDisplay",
    "HeadOptions",
    "HeadTable",
    "EXIT_HEAD",
    "validate_config",
    "validate_heads",
    "validate_input",
]
