"""Executable Textual demo hosting a couple of hydras."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use hydra_engine.adapters.textual.app"
    ) from exc

from hydra_engine.host import SimulatedHost
from hydra_engine.modes import HydraManager
from hydra_engine.runtime import telemetry

from .controller import TextualHydraAdapter, TextualUIHooks


def create_demo_manager(host: SimulatedHost, *, color: str = "red") -> HydraManager:
    """Build a manager with a scrolling hydra and a window-size hydra."""

    manager = HydraManager(host.services())
    manager.create(
        name="scroll",
        body="<Space>s",
        heads=[
            ("j", "<C-e>", {"desc": "down"}),
            ("k", "<C-y>", {"desc": "up"}),
            ("gg", "gg", {"desc": "top"}),
            ("q", None, {"exit": True, "desc": "quit"}),
        ],
        config={"color": color, "hint": "statusline"},
    )
    manager.create(
        name="window",
        body="<Space>w",
        heads=[
            ("+", "<C-w>+", {"desc": "taller"}),
            ("-", "<C-w>-", {"desc": "shorter"}),
            ("=", "<C-w>=", {"exit": True, "desc": "equalize"}),
        ],
        config={"timeout": 2000},
    )
    return manager


class HydraDemoApp(App[None]):
    """Shows the active hydra, its hint and the keys that reached the host."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #output {
        height: 1fr;
        border: round $accent;
        padding: 1 1;
    }

    #hint {
        height: auto;
        background: $surface-darken-1;
        padding: 0 1;
    }

    #status-line {
        height: 1;
        background: $surface-darken-2;
        padding: 0 1;
    }
    """

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, *, color: str = "red") -> None:
        super().__init__()
        self._color = color
        self.adapter: TextualHydraAdapter | None = None
        self._output: Static | None = None
        self._hint: Static | None = None
        self._status: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical():
            self._output = Static("", id="output")
            yield self._output
        self._hint = Static("", id="hint")
        self._status = Static("", id="status-line")
        yield self._hint
        yield self._status
        yield Footer()

    def on_mount(self) -> None:
        host = SimulatedHost()
        manager = create_demo_manager(host, color=self._color)
        hooks = TextualUIHooks(
            update_status=self._update_status,
            show_hint=self._show_hint,
            show_output=self._show_output,
        )
        self.adapter = TextualHydraAdapter(host, manager, hooks)
        self.set_interval(1.0, self._process_timeouts)

    def on_key(self, event: events.Key) -> None:
        if self.adapter is None or event.key == "ctrl+q":
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        event.stop()

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    def _update_status(self, status: str) -> None:
        if self._status:
            self._status.update(status)

    def _show_hint(self, lines: list[str]) -> None:
        if self._hint:
            self._hint.update("\n".join(lines))

    def _show_output(self, keys: list[str]) -> None:
        if self._output:
            self._output.update(" ".join(keys[-200:]))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the hydra Textual demo.")
    parser.add_argument(
        "--color",
        default="red",
        choices=("red", "blue", "amaranth", "teal"),
        help="Color of the scroll hydra (default: red)",
    )
    parser.add_argument(
        "--log-preset",
        choices=("development", "production"),
        help="Telemetry preset (default: HYDRA_ENGINE_* environment)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    HydraDemoApp(color=args.color).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
