"""Factory owning host collaborators, the active slot and live hydras."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional

from hydra_engine.errors import MissingCollaborator
from hydra_engine.host.services import HostServices
from hydra_engine.runtime import telemetry

from .hydra import Hydra
from .state import ActiveModeSlot


class HydraManager:
    """Creates hydras against one host and tracks which one is active."""

    def __init__(
        self, services: HostServices, *, slot: Optional[ActiveModeSlot] = None
    ) -> None:
        self.services = services
        self.slot = slot or ActiveModeSlot()
        self._hydras: Dict[int, Hydra] = {}
        self._reported: set[str] = set()
        self.logger = telemetry.get_logger("hydra_engine.modes")

    def __iter__(self) -> Iterator[Hydra]:
        return iter(self._hydras.values())

    def __len__(self) -> int:
        return len(self._hydras)

    @property
    def active(self) -> Optional[Hydra]:
        for hydra in self._hydras.values():
            if hydra.controller is self.slot.current:
                return hydra
        return None

    def get(self, hydra_id: int) -> Hydra:
        try:
            return self._hydras[hydra_id]
        except KeyError as exc:
            raise KeyError(f"Hydra {hydra_id} is not registered") from exc

    def create(self, definition: Optional[Mapping[str, Any]] = None, /, **fields: Any) -> Hydra:
        payload = {**(definition or {}), **fields}
        hydra = Hydra(payload, services=self.services, slot=self.slot)
        if hydra.setup_error is not None:
            self._report_missing(hydra.setup_error)
        self._hydras[hydra.id] = hydra
        telemetry.record_event(
            "hydra.created",
            level="debug",
            data={"hydra": hydra.label, "color": hydra.color.value},
        )
        return hydra

    def destroy(self, hydra: Hydra) -> None:
        hydra.destroy()
        self._hydras.pop(hydra.id, None)

    def destroy_all(self) -> None:
        for hydra in list(self._hydras.values()):
            self.destroy(hydra)

    def _report_missing(self, error: MissingCollaborator) -> None:
        if error.collaborator in self._reported:
            return
        self._reported.add(error.collaborator)
        telemetry.record_event(
            "hydra.missing_collaborator",
            level="error",
            data={"collaborator": error.collaborator, "message": str(error)},
        )


__all__ = ["HydraManager"]
