"""Text renderings of a hydra's heads for statusline and popup hints."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from hydra_engine.modes.hydra import Hydra


def visible_heads(hydra: "Hydra") -> list[tuple[str, str | None]]:
    """``(lhs, desc)`` pairs in display order, skipping heads hidden with ``desc=False``."""

    pairs = []
    for head, display in hydra.table.ordered_display():
        if display.desc is False:
            continue
        pairs.append((head.lhs, display.desc or None))
    return pairs


def render_statusline(hydra: "Hydra") -> str:
    line = ", ".join(
        f"{lhs}: {desc}" if desc else lhs for lhs, desc in visible_heads(hydra)
    )
    return f"{hydra.name}: {line}" if hydra.name else line


def render_popup(hydra: "Hydra") -> list[str]:
    if hydra.custom_hint:
        return hydra.custom_hint.strip("\n").splitlines()
    width = max((len(lhs) for lhs, _ in visible_heads(hydra)), default=0)
    lines = [f" {lhs.ljust(width)}  {desc or ''}".rstrip() for lhs, desc in visible_heads(hydra)]
    if hydra.name:
        lines.insert(0, hydra.name)
    return lines


__all__ = ["render_popup", "render_statusline", "visible_heads"]
