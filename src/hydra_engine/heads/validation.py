"""Structural checks on raw hydra input before anything is compiled."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from hydra_engine.errors import ValidationError

CONFIG_KEYS = frozenset(
    {
        "debug",
        "exit",
        "foreign_keys",
        "color",
        "on_enter",
        "on_exit",
        "timeout",
        "invoke_on_body",
        "buffer",
        "hint",
    }
)
INPUT_KEYS = frozenset({"name", "mode", "body", "heads", "hint", "config"})
VALID_COLORS = frozenset({"red", "blue", "amaranth", "teal", "pink"})


def _expect(value: object, types: tuple[type, ...], field: str, *, optional: bool) -> None:
    if value is None and optional:
        return
    if not isinstance(value, types):
        names = " or ".join(t.__name__ for t in types)
        raise ValidationError(f"{field} must be {names}", field=field)


def validate_input(raw: Mapping[str, object]) -> None:
    unknown = set(raw) - INPUT_KEYS
    if unknown:
        raise ValidationError(f"Unknown hydra fields: {sorted(unknown)}")
    _expect(raw.get("name"), (str,), "name", optional=True)
    _expect(raw.get("mode"), (str, list, tuple), "mode", optional=True)
    _expect(raw.get("body"), (str,), "body", optional=True)
    _expect(raw.get("hint"), (str,), "hint", optional=True)
    _expect(raw.get("heads"), (list, tuple), "heads", optional=False)
    config = raw.get("config")
    _expect(config, (Mapping,), "config", optional=True)
    if config:
        validate_config(config)  # type: ignore[arg-type]
    validate_heads(raw["heads"])  # type: ignore[arg-type]


def validate_config(config: Mapping[str, object]) -> None:
    unknown = set(config) - CONFIG_KEYS
    if unknown:
        raise ValidationError(f"Unknown config fields: {sorted(unknown)}", field="config")
    for name in ("on_enter", "on_exit"):
        callback = config.get(name)
        if callback is not None and not callable(callback):
            raise ValidationError(f"config.{name} must be callable", field=name)
    _expect(config.get("exit"), (bool,), "exit", optional=True)
    _expect(config.get("debug"), (bool,), "debug", optional=True)
    _expect(config.get("invoke_on_body"), (bool,), "invoke_on_body", optional=True)
    _expect(config.get("timeout"), (bool, int), "timeout", optional=True)
    _expect(config.get("buffer"), (bool, int), "buffer", optional=True)
    _expect(config.get("hint"), (bool, str, Mapping), "hint", optional=True)

    timeout = config.get("timeout")
    if not isinstance(timeout, bool) and isinstance(timeout, int) and timeout <= 0:
        raise ValidationError("timeout must be a positive number of milliseconds", field="timeout")

    foreign_keys = config.get("foreign_keys")
    if foreign_keys not in (None, "none", "warn", "run"):
        raise ValidationError(
            'config.foreign_keys value could be either "warn" or "run"',
            field="foreign_keys",
        )

    color = config.get("color")
    if color is not None and color not in VALID_COLORS:
        raise ValidationError(
            "color value could be one of: red, blue, amaranth, teal, pink",
            field="color",
        )


def validate_heads(heads: Iterable[object]) -> None:
    seen: set[str] = set()
    for position, head in enumerate(heads, start=1):
        if not _is_head(head):
            raise ValidationError(f"wrong head type at position {position}", field="heads")
        lhs = head[0]  # type: ignore[index]
        if lhs in seen:
            raise ValidationError(f"duplicate head '{lhs}'", field="heads")
        seen.add(lhs)


def _is_head(head: object) -> bool:
    if not isinstance(head, Sequence) or isinstance(head, str):
        return False
    if not 1 <= len(head) <= 3:
        return False
    lhs = head[0]
    action = head[1] if len(head) > 1 else None
    opts = head[2] if len(head) > 2 else None
    if not isinstance(lhs, str) or not lhs:
        return False
    if action is not None and not isinstance(action, str) and not callable(action):
        return False
    if opts is not None and (not isinstance(opts, Mapping) or opts.get("desc") is True):
        return False
    return True


__all__ = ["validate_input", "validate_config", "validate_heads", "VALID_COLORS"]
