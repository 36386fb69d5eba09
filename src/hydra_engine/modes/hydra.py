"""A configured hydra: validated input, compiled heads and registered bindings."""

from __future__ import annotations

import itertools
from typing import Any, Mapping, Optional

from hydra_engine.errors import MissingCollaborator
from hydra_engine.heads import Color, HeadDisplay, HeadTable, validate_input
from hydra_engine.heads.models import Head, normalize_modes
from hydra_engine.host.protocols import Layer
from hydra_engine.host.services import HostServices
from hydra_engine.keymaps import KeymapPlan
from hydra_engine.runtime import telemetry

from .config import HydraConfig
from .controller import HydraController
from .layer import LayerInput, build_layer_input
from .state import ActiveModeSlot, ModeState

_ids = itertools.count(1)


class Hydra:
    """One modal keybinding layer.

    Construction validates ``definition``, resolves the color policy, compiles the
    head table and registers the keymap plan with the host (or, for pink
    hydras, hands a layer description to the host's layer factory).
    """

    def __init__(
        self,
        definition: Mapping[str, Any],
        *,
        services: HostServices,
        slot: ActiveModeSlot,
    ) -> None:
        raw = dict(definition)
        validate_input(raw)

        self.id = next(_ids)
        self.name: Optional[str] = raw.get("name")
        self.modes = normalize_modes(raw.get("mode") or "n", field="mode")
        self.body: Optional[str] = raw.get("body") or None
        self.custom_hint: Optional[str] = raw.get("hint")
        self.services = services

        config = HydraConfig.from_mapping(raw.get("config"))
        if isinstance(config.buffer, bool):
            config = config.with_buffer(
                services.binder.current_buffer() if config.buffer else None
            )
        if not self.body or config.exit:
            config = config.with_invoke_on_body()
        self.config = config

        self.table = HeadTable.compile(
            raw["heads"],
            foreign_keys=config.foreign_keys,
            exit=config.exit,
            color=config.color,
        )
        self.controller = HydraController(self, services, slot)
        self.plan: Optional[KeymapPlan] = None
        self.layer_input: Optional[LayerInput] = None
        self.setup_error: Optional[MissingCollaborator] = None

        if config.color is Color.PINK:
            self._setup_layer()
        elif self._needs_evaluator() and services.evaluator is None:
            self.setup_error = MissingCollaborator(
                "evaluator",
                f"hydra '{self.label}' has expression heads but no ExpressionEvaluator",
            )
        else:
            self._setup_keymaps()

    def __repr__(self) -> str:
        return f"Hydra(id={self.id}, name={self.name!r}, color={self.color.value})"

    @property
    def label(self) -> str:
        return self.name or f"hydra{self.id}"

    @property
    def color(self) -> Color:
        return self.config.color

    @property
    def heads(self) -> tuple[Head, ...]:
        return self.table.heads

    @property
    def display(self) -> Mapping[str, HeadDisplay]:
        return self.table.display

    @property
    def state(self) -> ModeState:
        return self.controller.state

    @property
    def active(self) -> bool:
        return self.controller.active

    def activate(self) -> None:
        """Enter the hydra without its body key having been typed."""

        self.controller.activate()

    def exit(self) -> None:
        self.controller.force_exit()

    def destroy(self) -> None:
        """Leave the hydra if active and remove every binding it owns."""

        if self.controller.state is not ModeState.INACTIVE:
            self.controller.force_exit()
        if self.plan is not None:
            for binding_id in self.plan.unbind_ids():
                self.services.binder.unbind(binding_id)
            self.plan = None

    def _needs_evaluator(self) -> bool:
        return any(
            head.options.expr and isinstance(head.action, str) for head in self.table
        )

    def _setup_keymaps(self) -> None:
        plan = KeymapPlan.build(
            owner=self.id,
            modes=self.modes,
            body=self.body,
            table=self.table,
            invoke_on_body=self.config.invoke_on_body,
            handlers=self.controller,
            buffer=self.config.buffer,  # type: ignore[arg-type]
        )
        bound: list[str] = []
        with telemetry.span(
            "hydra::bind",
            component="keymaps",
            metadata={"hydra": self.label, "bindings": len(plan)},
        ):
            try:
                for binding in plan:
                    self.services.binder.bind(binding)
                    bound.append(binding.id)
            except Exception:
                for binding_id in bound:
                    self.services.binder.unbind(binding_id)
                raise
        self.plan = plan

    def _setup_layer(self) -> None:
        factory = self.services.layer_factory
        if factory is None:
            self.setup_error = MissingCollaborator(
                "layer_factory",
                f"pink hydra '{self.label}' needs a cascading keymap layer implementation",
            )
            return
        self.layer_input = build_layer_input(self, self.controller)
        layer = factory(self.layer_input)
        if not isinstance(layer, Layer):
            raise TypeError(
                f"layer factory returned {type(layer).__name__!r}, expected enter()/exit()"
            )
        self.controller.layer = layer


__all__ = ["Hydra"]
