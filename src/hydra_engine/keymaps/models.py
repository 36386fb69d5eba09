"""Key sequence tokenization and the binding record handed to hosts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Literal, Optional

# Special keys are written as bracketed notation (``<C-u>``); raw escape
# sequences never appear in the text.
_KEY_TOKEN = re.compile(r"<[^<>]+>|.", re.DOTALL)

BindingKind = Literal["wait", "body", "enter", "head", "prefix"]


def split_keys(keys: str) -> tuple[str, ...]:
    """Split ``keys`` into units: ``"<C-u>x"`` -> ``("<C-u>", "x")``."""

    return tuple(_KEY_TOKEN.findall(keys))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable tokenized key sequence."""

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("KeySequence requires at least one token")

    @classmethod
    def parse(cls, keys: str) -> "KeySequence":
        return cls(split_keys(keys))

    @property
    def text(self) -> str:
        return "".join(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __add__(self, other: "KeySequence") -> "KeySequence":
        return KeySequence(self.tokens + other.tokens)

    def proper_prefixes(self) -> tuple["KeySequence", ...]:
        """Non-empty prefixes shorter than the whole sequence, shortest first."""

        return tuple(
            KeySequence(self.tokens[:size]) for size in range(1, len(self.tokens))
        )


def plug_keys(hydra_id: int, name: str) -> str:
    """Internal key identity owned by one hydra instance."""

    return f"<Plug>(Hydra{hydra_id}_{name})"


@dataclass(frozen=True, slots=True)
class BindingOptions:
    """Host-facing options attached to a single binding."""

    desc: Optional[str] = None
    buffer: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Binding:
    """One key binding a ``KeyBinder`` registers on behalf of a hydra."""

    id: str
    owner: int
    kind: BindingKind
    mode: str
    sequence: KeySequence
    handler: Callable[[], object]
    options: BindingOptions = BindingOptions()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    @property
    def lhs(self) -> str:
        return self.sequence.text

    @property
    def buffer(self) -> Optional[int]:
        return self.options.buffer


def binding_id(owner: int, kind: BindingKind, mode: str, lhs: str) -> str:
    return f"hydra{owner}:{kind}:{mode}:{lhs}"


__all__ = [
    "Binding",
    "BindingKind",
    "BindingOptions",
    "KeySequence",
    "binding_id",
    "plug_keys",
    "split_keys",
]
