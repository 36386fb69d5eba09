"""Adapter translating Textual key events into host key tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from hydra_engine.host import SimulatedHost
from hydra_engine.modes import HydraManager

SPECIAL_KEYS: Dict[str, str] = {
    "escape": "<Esc>",
    "enter": "<CR>",
    "tab": "<Tab>",
    "space": "<Space>",
    "backspace": "<BS>",
    "delete": "<Del>",
    "up": "<Up>",
    "down": "<Down>",
    "left": "<Left>",
    "right": "<Right>",
    "home": "<Home>",
    "end": "<End>",
    "pageup": "<PageUp>",
    "pagedown": "<PageDown>",
}

MODIFIERS: Dict[str, str] = {"ctrl": "C", "alt": "M", "meta": "M", "shift": "S"}


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def textual_key_to_token(key: str, character: Optional[str] = None) -> str:
    """``"ctrl+u"`` -> ``"<C-u>"``, ``"escape"`` -> ``"<Esc>"``, ``"j"`` -> ``"j"``."""

    *mods, base = key.split("+") if key != "+" else ("+",)
    if not mods:
        if base in SPECIAL_KEYS:
            return SPECIAL_KEYS[base]
        if character and len(character) == 1 and character.isprintable():
            return character
        return base if len(base) == 1 else f"<{base.capitalize()}>"

    prefix = "-".join(MODIFIERS.get(mod, mod.capitalize()) for mod in mods)
    name = SPECIAL_KEYS.get(base, base)
    if name.startswith("<") and name.endswith(">"):
        name = name[1:-1]
    return f"<{prefix}-{name}>"


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_status: Callable[[str], None] = _noop
    show_hint: Callable[[list[str]], None] = _noop
    show_output: Callable[[list[str]], None] = _noop
    log: Callable[[str], None] = _noop


class TextualHydraAdapter:
    """Feeds Textual keys to a ``SimulatedHost`` and mirrors hydra state."""

    def __init__(
        self, host: SimulatedHost, manager: HydraManager, hooks: TextualUIHooks
    ) -> None:
        self.host = host
        self.manager = manager
        self.hooks = hooks
        self._refresh()

    def handle_textual_key(self, key: str, *, character: Optional[str] = None) -> str:
        token = textual_key_to_token(key, character)
        self._log("key ->", key=key, token=token)
        self.host.feed(token)
        self._refresh()
        return token

    def process_timeouts(self) -> bool:
        fired = self.host.tick_timeout()
        if fired:
            self._log("timeout ->", pending=len(self.host.pending))
            self._refresh()
        return fired

    def _refresh(self) -> None:
        active = self.manager.active
        if self.host.status:
            status = self.host.status
        elif active is not None:
            status = f"-- {active.label.upper()} --"
        else:
            status = ""
        self.hooks.update_status(status)
        self.hooks.show_hint(list(self.host.hint.lines) if self.host.hint.visible else [])
        self.hooks.show_output(list(self.host.executed))

    def _log(self, prefix: str, **fields: object) -> None:
        active = self.manager.active
        parts = [prefix, f"hydra={active.label if active else None!r}"]
        parts.extend(f"{key}={value!r}" for key, value in fields.items())
        self.hooks.log(" ".join(parts))


__all__ = ["TextualHydraAdapter", "TextualUIHooks", "textual_key_to_token"]
