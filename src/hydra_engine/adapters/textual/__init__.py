"""Textual adapter; the demo app in ``app`` needs the ``textual`` extra."""

from .controller import TextualHydraAdapter, TextualUIHooks, textual_key_to_token

__all__ = ["TextualHydraAdapter", "TextualUIHooks", "textual_key_to_token"]
