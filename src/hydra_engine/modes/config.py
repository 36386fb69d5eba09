"""Instance-level configuration record and flag/color reconciliation."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Union

from hydra_engine.errors import ConfigConflict
from hydra_engine.heads import Color, ForeignKeys, color_from_config, config_from_color
from hydra_engine.heads.validation import validate_config
from hydra_engine.runtime import telemetry

Timeout = Union[bool, int]
HintConfig = Union[bool, str, Mapping[str, Any]]

DEFAULT_HINT: Mapping[str, Any] = {"position": "bottom", "border": None}


@dataclass(frozen=True, slots=True)
class HydraConfig:
    """Resolved ``config`` table of one hydra."""

    debug: bool = False
    exit: bool = False
    foreign_keys: ForeignKeys = ForeignKeys.NONE
    color: Color = Color.RED
    on_enter: Optional[Callable[..., object]] = None
    on_exit: Optional[Callable[..., object]] = None
    timeout: Timeout = False
    invoke_on_body: bool = False
    buffer: Union[bool, int, None] = None
    hint: HintConfig = field(default_factory=lambda: dict(DEFAULT_HINT))

    @property
    def timeout_ms(self) -> Optional[int]:
        if isinstance(self.timeout, bool):
            return None
        return self.timeout

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "HydraConfig":
        raw = dict(raw or {})
        validate_config(raw)
        foreign_keys = ForeignKeys.parse(raw.get("foreign_keys"))
        exit = bool(raw.get("exit", False))
        hint = raw.get("hint", DEFAULT_HINT)
        if isinstance(hint, Mapping):
            hint = {**DEFAULT_HINT, **hint}

        explicit = raw.get("color")
        if explicit is None:
            color = color_from_config(foreign_keys, exit)
        else:
            color = Color(explicit)
            if color is not Color.PINK:
                derived = config_from_color(color)
                if ("foreign_keys" in raw and foreign_keys is not derived[0]) or (
                    "exit" in raw and exit != derived[1]
                ):
                    _warn_conflict(color, foreign_keys, exit)
                foreign_keys, exit = derived

        timeout = raw.get("timeout", False)
        return cls(
            debug=bool(raw.get("debug", False)),
            exit=exit,
            foreign_keys=foreign_keys,
            color=color,
            on_enter=raw.get("on_enter"),
            on_exit=raw.get("on_exit"),
            timeout=timeout if timeout is not None else False,
            invoke_on_body=bool(raw.get("invoke_on_body", False)),
            buffer=raw.get("buffer"),
            hint=hint,
        )

    def with_buffer(self, buffer: Optional[int]) -> "HydraConfig":
        return replace(self, buffer=buffer)

    def with_invoke_on_body(self) -> "HydraConfig":
        return replace(self, invoke_on_body=True)


def _warn_conflict(color: Color, foreign_keys: ForeignKeys, exit: bool) -> None:
    message = (
        f"color '{color.value}' overrides foreign_keys={foreign_keys.value!r}, "
        f"exit={exit!r}"
    )
    telemetry.record_event(
        "hydra.config_conflict",
        level="warning",
        data={"color": color.value, "foreign_keys": foreign_keys.value, "exit": exit},
    )
    warnings.warn(message, ConfigConflict, stacklevel=4)


__all__ = ["HydraConfig", "DEFAULT_HINT"]
