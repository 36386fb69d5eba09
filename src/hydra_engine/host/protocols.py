"""Contracts for the editor-side collaborators a hydra depends on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Protocol, runtime_checkable

from hydra_engine.keymaps import Binding

if TYPE_CHECKING:  # pragma: no cover
    from hydra_engine.modes.hydra import Hydra
    from hydra_engine.modes.layer import LayerInput

OptionKey = tuple[str, str]  # (scope, name), scope one of o/go/bo/wo


@dataclass(slots=True)
class OptionSnapshot:
    """Captured option values a store can write back later."""

    values: Dict[OptionKey, Any] = field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.values


class KeyBinder(Protocol):
    def bind(self, binding: Binding) -> None:
        """Register ``binding`` in its mode, buffer-local when it names a buffer."""
        ...

    def unbind(self, binding_id: str) -> None: ...

    def replay(self, keys: str, *, remap: bool, insert: bool) -> None:
        """Feed ``keys`` as if typed.

        ``insert`` puts them ahead of pending input; otherwise they queue
        behind already-fed keys but ahead of keys the user still has to type.
        """
        ...

    def current_buffer(self) -> int: ...


class InputPeek(Protocol):
    def has_buffered_input(self) -> bool:
        """Non-blocking: is there input the host has not dispatched yet?"""
        ...

    def consume_one(self) -> Optional[str]: ...


class OptionsStore(Protocol):
    def get(self, scope: str, name: str) -> Any: ...

    def set(self, scope: str, name: str, value: Any) -> None: ...

    def snapshot(self, names: Iterable[OptionKey]) -> OptionSnapshot: ...

    def restore(self, snapshot: OptionSnapshot) -> None: ...


class HintPresenter(Protocol):
    def show(self, hydra: "Hydra") -> None: ...

    def close(self) -> None: ...


class Notifier(Protocol):
    def warn(self, message: str) -> None: ...

    def clear_status(self) -> None: ...


class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: str) -> str: ...


@runtime_checkable
class Layer(Protocol):
    def enter(self) -> None: ...

    def exit(self) -> None: ...


class LayerFactory(Protocol):
    def __call__(self, layer_input: "LayerInput") -> Layer: ...


__all__ = [
    "ExpressionEvaluator",
    "HintPresenter",
    "InputPeek",
    "KeyBinder",
    "Layer",
    "LayerFactory",
    "Notifier",
    "OptionKey",
    "OptionSnapshot",
    "OptionsStore",
]
