"""Runtime state machine of a single hydra."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from hydra_engine.errors import MissingCollaborator
from hydra_engine.heads import Color, Head
from hydra_engine.host.services import HostServices
from hydra_engine.options import OptionSession, ReadOnlyOptions, ScopedOptions
from hydra_engine.runtime import telemetry

from .state import ActiveModeSlot, ModeState

if TYPE_CHECKING:  # pragma: no cover
    from hydra_engine.host.protocols import Layer

    from .hydra import Hydra

SESSION_OPTIONS = (
    ("o", "showcmd"),
    ("o", "timeout"),
    ("o", "timeoutlen"),
    ("o", "ttimeout"),
)

REJECTION_MESSAGES = {
    Color.AMARANTH: "An Amaranth Hydra can only exit through a blue head",
    Color.TEAL: "A Teal Hydra can only exit through one of its heads",
}


class HydraController:
    """Drives enter / wait / leave / exit for one hydra.

    Key dispatch is owned by the host; the controller only reacts to the
    bindings of its plan and keeps the shared slot consistent.
    """

    def __init__(
        self, hydra: "Hydra", services: HostServices, slot: ActiveModeSlot
    ) -> None:
        self.hydra = hydra
        self.services = services
        self.slot = slot
        self.state = ModeState.INACTIVE
        self.session: Optional[OptionSession] = None
        self.layer: Optional["Layer"] = None
        self.logger = telemetry.get_logger("hydra_engine.modes")

    def __repr__(self) -> str:
        return f"HydraController({self.hydra.label!r}, state={self.state.value})"

    @property
    def active(self) -> bool:
        return self.slot.current is self

    # -- transitions -----------------------------------------------------

    def enter(self, *, host_settings: bool = True) -> bool:
        """Take the slot and run ``on_enter``.

        Returns False when ``on_enter`` activated another hydra, which has
        already forced this one back out.
        """

        with telemetry.span(
            "hydra::enter",
            component="modes",
            metadata={"hydra": self.hydra.label},
        ):
            current = self.slot.current
            if current is not None:
                current.force_exit()

            self.state = ModeState.ENTERING
            session = OptionSession(self.services.options)
            session.capture(SESSION_OPTIONS)
            self.session = session
            self.slot.occupy(self)
            try:
                if host_settings:
                    self._apply_session_options(session)
                on_enter = self.hydra.config.on_enter
                if on_enter is not None:
                    on_enter(ScopedOptions(session))
                if self.slot.current is not self:
                    self._debug("enter_preempted")
                    return False
                self._show_hint()
            except BaseException:
                self._unwind()
                raise
            self._debug("enter", previous=repr(current) if current else None)
            return True

    def wait(self) -> None:
        """Arm the wait trigger so the next key resolves against the heads."""

        plan = self.hydra.plan
        if plan is None or not self.active:
            return
        self.services.binder.replay(plan.wait.text, remap=True, insert=False)
        self.state = ModeState.WAITING

    def leave(self) -> None:
        if self.state is ModeState.INACTIVE:
            return
        color = self.hydra.config.color
        if color.warns and self.services.input.has_buffered_input():
            self.services.notifier.warn(REJECTION_MESSAGES[color])
            rejected = self.services.input.consume_one()
            telemetry.record_event(
                "hydra.foreign_key_rejected",
                level="debug",
                data={"hydra": self.hydra.label, "key": rejected},
            )
            self.wait()
            return
        self.exit()

    def exit(self) -> None:
        if self.state is ModeState.INACTIVE:
            return
        self.state = ModeState.EXITING
        try:
            if self.session is not None:
                self.session.restore()
            self.services.hint.close()
            on_exit = self.hydra.config.on_exit
            if on_exit is not None:
                on_exit(ReadOnlyOptions(self.services.options))
        finally:
            self.session = None
            self.slot.release(self)
            self.services.notifier.clear_status()
            self.state = ModeState.INACTIVE
            self._debug("exit")

    def force_exit(self) -> None:
        if self.layer is not None:
            self.layer.exit()
        else:
            self.exit()

    def activate(self) -> None:
        error = self.hydra.setup_error
        if error is not None:
            raise error
        if self.layer is not None:
            self.layer.enter()
            return
        if self.enter():
            self.wait()

    # -- plan handlers ---------------------------------------------------

    def enter_from_body(self) -> None:
        if self.enter():
            self.wait()

    def enter_with_head(self, head: Head) -> None:
        if self.enter():
            self._run_or_exit(head)
            self.wait()

    def fire_head(self, head: Head) -> None:
        if self.state is ModeState.INACTIVE:
            # Stale trigger of a hydra that was forced out meanwhile.
            self._debug("stale_head", head=head.lhs)
            return
        if head.exit:
            self.exit()
            self.run_head(head)
        else:
            self._run_or_exit(head)
            self.wait()

    # -- layer hooks -----------------------------------------------------

    def enter_from_layer(self) -> None:
        if self.enter(host_settings=False):
            self.state = ModeState.WAITING

    # -- helpers ---------------------------------------------------------

    def run_head(self, head: Head) -> None:
        action = head.action
        if action is None:
            return
        if head.options.expr:
            if callable(action):
                keys = action()
            else:
                keys = self._evaluate(action)
        elif callable(action):
            action()
            return
        else:
            keys = action
        if keys:
            self.services.binder.replay(str(keys), remap=head.options.remap, insert=True)

    def _run_or_exit(self, head: Head) -> None:
        try:
            self.run_head(head)
        except Exception:
            self.exit()
            raise

    def _evaluate(self, expression: str) -> str:
        evaluator = self.services.evaluator
        if evaluator is None:
            raise MissingCollaborator(
                "evaluator", f"expression head '{expression}' needs an ExpressionEvaluator"
            )
        return evaluator.evaluate(expression)

    def _apply_session_options(self, session: OptionSession) -> None:
        config = self.hydra.config
        session.set("o", "showcmd", False)
        if config.timeout:
            session.set("o", "timeout", True)
            if config.timeout_ms is not None:
                session.set("o", "timeoutlen", config.timeout_ms)
        else:
            session.set("o", "timeout", False)
        if not session.original("o", "timeout"):
            session.set("o", "ttimeout", True)
        else:
            session.set("o", "ttimeout", session.original("o", "ttimeout"))

    def _show_hint(self) -> None:
        if self.hydra.config.hint is False:
            return
        self.services.hint.show(self.hydra)

    def _unwind(self) -> None:
        if self.session is not None:
            self.session.restore()
            self.session = None
        self.slot.release(self)
        self.state = ModeState.INACTIVE

    def _debug(self, event: str, **data: Any) -> None:
        if not self.hydra.config.debug:
            return
        telemetry.record_event(
            f"hydra.{event}",
            level="debug",
            data={"hydra": self.hydra.label, "state": self.state.value, **data},
        )


__all__ = ["HydraController", "SESSION_OPTIONS", "REJECTION_MESSAGES"]
