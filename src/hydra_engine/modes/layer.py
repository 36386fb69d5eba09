"""Input structure handed to the cascading keymap layer of pink hydras."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union

from hydra_engine.heads import HeadAction

if TYPE_CHECKING:  # pragma: no cover
    from .controller import HydraController
    from .hydra import Hydra

NOP = "<Nop>"

LayerAction = Union[str, Callable[[], object]]
LayerKeymaps = Dict[str, Dict[str, tuple[LayerAction, Dict[str, Any]]]]


@dataclass(slots=True)
class LayerConfig:
    debug: bool
    buffer: Optional[int]
    timeout: Union[bool, int]
    on_enter: list[Callable[[], object]] = field(default_factory=list)
    on_exit: list[Callable[[], object]] = field(default_factory=list)


@dataclass(slots=True)
class LayerInput:
    """Keymaps per mode and lhs, split by the role they play in the layer."""

    config: LayerConfig
    enter_keymaps: LayerKeymaps = field(default_factory=dict)
    layer_keymaps: LayerKeymaps = field(default_factory=dict)
    exit_keymaps: LayerKeymaps = field(default_factory=dict)

    def add(self, table: LayerKeymaps, mode: str, lhs: str, rhs: LayerAction, opts: Dict[str, Any]) -> None:
        table.setdefault(mode, {})[lhs] = (rhs, opts)


def _rhs(action: HeadAction) -> LayerAction:
    return NOP if action is None else action


def build_layer_input(hydra: "Hydra", controller: "HydraController") -> LayerInput:
    config = hydra.config
    layer = LayerInput(
        config=LayerConfig(
            debug=config.debug,
            buffer=config.buffer if isinstance(config.buffer, int) else None,
            timeout=config.timeout,
            on_enter=[controller.enter_from_layer],
            on_exit=[controller.exit],
        )
    )

    if config.invoke_on_body and hydra.body:
        for mode in hydra.modes:
            layer.add(layer.enter_keymaps, mode, hydra.body, NOP, {})

    for head in hydra.table:
        opts: Dict[str, Any] = {}
        if head.options.expr:
            opts["expr"] = True
        if head.options.remap:
            opts["remap"] = True
        if isinstance(head.desc, str):
            opts["desc"] = head.desc
        rhs = _rhs(head.action)

        for mode in head.options.modes or hydra.modes:
            if (
                hydra.body
                and not config.invoke_on_body
                and not head.exit
                and not head.private
            ):
                layer.add(layer.enter_keymaps, mode, hydra.body + head.lhs, rhs, dict(opts))
            target = layer.exit_keymaps if head.exit else layer.layer_keymaps
            layer.add(target, mode, head.lhs, rhs, dict(opts))

    return layer


__all__ = ["LayerConfig", "LayerInput", "build_layer_input", "NOP"]
