"""Color policy: mapping between raw exit/foreign-key flags and named colors."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ForeignKeys(str, Enum):
    """What happens to a key that matches no head."""

    NONE = "none"
    WARN = "warn"
    RUN = "run"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ForeignKeys":
        if value is None:
            return cls.NONE
        return cls(value)


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"
    AMARANTH = "amaranth"
    TEAL = "teal"
    PINK = "pink"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def warns(self) -> bool:
        """Whether foreign keys are rejected with a warning."""

        return self in (Color.AMARANTH, Color.TEAL)


def color_from_config(foreign_keys: ForeignKeys, exit: bool) -> Color:
    """Derive a color from the raw flags.

    ``run`` without ``exit`` has no color of its own and reads as Blue; Pink
    is never derived and must be requested explicitly.
    """

    if foreign_keys in (ForeignKeys.WARN, ForeignKeys.RUN):
        if exit:
            return Color.TEAL
        return Color.AMARANTH if foreign_keys is ForeignKeys.WARN else Color.BLUE
    return Color.BLUE if exit else Color.RED


_RAW_FLAGS: dict[Color, tuple[ForeignKeys, bool]] = {
    Color.RED: (ForeignKeys.NONE, False),
    Color.BLUE: (ForeignKeys.NONE, True),
    Color.AMARANTH: (ForeignKeys.WARN, False),
    Color.TEAL: (ForeignKeys.WARN, True),
}


def config_from_color(color: Color) -> tuple[ForeignKeys, bool]:
    try:
        return _RAW_FLAGS[color]
    except KeyError as exc:
        raise ValueError(f"{color.display_name} has no raw-flag representation") from exc


def head_color(foreign_keys: ForeignKeys, exit: bool) -> Color:
    """Effective color of a head that sets ``exit`` explicitly."""

    return color_from_config(foreign_keys, exit)


__all__ = [
    "Color",
    "ForeignKeys",
    "color_from_config",
    "config_from_color",
    "head_color",
]
