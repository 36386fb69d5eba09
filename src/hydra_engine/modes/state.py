"""Mode states and the process-wide active-hydra slot."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol


class ModeState(str, Enum):
    INACTIVE = "inactive"
    ENTERING = "entering"
    WAITING = "waiting"
    EXITING = "exiting"


class SlotOccupant(Protocol):
    def force_exit(self) -> None: ...


class ActiveModeSlot:
    """Holds the single active hydra controller, empty on creation.

    Only controllers mutate the slot: they occupy it while entering and
    release it at the end of exit. Occupying a held slot without forcing the
    previous occupant out first is a defect and raises.
    """

    def __init__(self) -> None:
        self._current: Optional[SlotOccupant] = None

    @property
    def current(self) -> Optional[SlotOccupant]:
        return self._current

    def is_empty(self) -> bool:
        return self._current is None

    def occupy(self, occupant: SlotOccupant) -> None:
        if self._current is not None and self._current is not occupant:
            raise RuntimeError(f"slot already held by {self._current!r}")
        self._current = occupant

    def release(self, occupant: SlotOccupant) -> None:
        if self._current is occupant:
            self._current = None


__all__ = ["ActiveModeSlot", "ModeState", "SlotOccupant"]
