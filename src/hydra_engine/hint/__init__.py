"""Hint rendering for active hydras."""

from .presenter import TextHint
from .render import render_popup, render_statusline, visible_heads

__all__ = ["TextHint", "render_popup", "render_statusline", "visible_heads"]
