"""Bundle of collaborators shared by every hydra a manager creates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .protocols import (
    ExpressionEvaluator,
    HintPresenter,
    InputPeek,
    KeyBinder,
    LayerFactory,
    Notifier,
    OptionsStore,
)


@dataclass(slots=True)
class HostServices:
    binder: KeyBinder
    input: InputPeek
    options: OptionsStore
    hint: HintPresenter
    notifier: Notifier
    evaluator: Optional[ExpressionEvaluator] = None
    # Pink hydras need a cascading layer implementation; others never touch it.
    layer_factory: Optional[LayerFactory] = None


__all__ = ["HostServices"]
