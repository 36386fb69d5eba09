"""Hint presenter that keeps the rendered hint as plain text lines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from .render import render_popup, render_statusline

if TYPE_CHECKING:  # pragma: no cover
    from hydra_engine.modes.hydra import Hydra


class TextHint:
    """Renders on ``show`` and forwards the lines to an optional sink.

    ``config.hint == "statusline"`` produces a single line; a mapping (or
    ``True``) produces the popup form, positioned per ``position``.
    """

    def __init__(self, sink: Optional[Callable[[list[str]], None]] = None) -> None:
        self._sink = sink
        self.lines: list[str] = []
        self.visible = False
        self.position: Optional[str] = None
        self.owner: Optional[str] = None

    def show(self, hydra: "Hydra") -> None:
        style = hydra.config.hint
        if style == "statusline" and not hydra.custom_hint:
            self.lines = [render_statusline(hydra)]
            self.position = "statusline"
        else:
            self.lines = render_popup(hydra)
            self.position = _position(style)
        self.visible = True
        self.owner = hydra.label
        if self._sink is not None:
            self._sink(list(self.lines))

    def close(self) -> None:
        if not self.visible:
            return
        self.visible = False
        self.lines = []
        self.owner = None
        if self._sink is not None:
            self._sink([])


def _position(style: Any) -> str:
    if isinstance(style, Mapping):
        return str(style.get("position") or "bottom")
    return "bottom"


__all__ = ["TextHint"]
