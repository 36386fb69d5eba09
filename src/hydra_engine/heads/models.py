"""Records describing compiled heads and their hint metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Mapping, Optional, Union

from hydra_engine.errors import ValidationError

from .colors import Color

HeadAction = Union[None, str, Callable[[], object]]
# ``False`` hides the head from the generated hint, ``None`` shows the bare key.
Description = Union[str, None, Literal[False]]

HEAD_OPTION_KEYS = frozenset({"exit", "private", "expr", "remap", "desc", "mode"})


def normalize_modes(value: object, *, field: str) -> tuple[str, ...]:
    if isinstance(value, str):
        modes: tuple[object, ...] = (value,)
    elif isinstance(value, (list, tuple)):
        modes = tuple(value)
    else:
        raise ValidationError(f"{field} must be a string or a list of strings", field=field)
    if not modes or not all(isinstance(mode, str) and mode for mode in modes):
        raise ValidationError(f"{field} must name at least one mode", field=field)
    return tuple(dict.fromkeys(modes))  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class HeadOptions:
    """Closed set of per-head options."""

    exit: Optional[bool] = None
    private: bool = False
    expr: bool = False
    remap: bool = False
    desc: Description = None
    modes: Optional[tuple[str, ...]] = None

    @classmethod
    def from_mapping(cls, lhs: str, raw: Mapping[str, object] | None) -> "HeadOptions":
        if not raw:
            return cls()
        unknown = set(raw) - HEAD_OPTION_KEYS
        if unknown:
            raise ValidationError(
                f"Head '{lhs}' has unknown options: {sorted(unknown)}", field="heads"
            )
        exit = raw.get("exit")
        if exit is not None and not isinstance(exit, bool):
            raise ValidationError(f"Head '{lhs}': exit must be a boolean", field="heads")
        for flag in ("private", "expr", "remap"):
            if not isinstance(raw.get(flag, False), bool):
                raise ValidationError(
                    f"Head '{lhs}': {flag} must be a boolean", field="heads"
                )
        desc = raw.get("desc")
        if desc is not None and desc is not False and not isinstance(desc, str):
            raise ValidationError(
                f"Head '{lhs}': desc must be a string or false", field="heads"
            )
        modes = raw.get("mode")
        return cls(
            exit=exit,
            private=bool(raw.get("private", False)),
            expr=bool(raw.get("expr", False)),
            remap=bool(raw.get("remap", False)),
            desc=desc,  # type: ignore[arg-type]
            modes=None if modes is None else normalize_modes(modes, field="heads"),
        )


@dataclass(frozen=True, slots=True)
class Head:
    """A head resolved against its instance's exit flag and color."""

    lhs: str
    action: HeadAction
    options: HeadOptions
    exit: bool
    color: Color

    @property
    def private(self) -> bool:
        return self.options.private

    @property
    def warn(self) -> bool:
        return self.color.warns

    @property
    def desc(self) -> Description:
        return self.options.desc


@dataclass(frozen=True, slots=True)
class HeadDisplay:
    """Ordering and color record consumed by hint renderers."""

    index: int
    color: str
    desc: Description


__all__ = [
    "Description",
    "Head",
    "HeadAction",
    "HeadDisplay",
    "HeadOptions",
    "HEAD_OPTION_KEYS",
    "normalize_modes",
]
