from __future__ import annotations

from typing import List

import pytest

from hydra_engine import HydraManager
from hydra_engine.adapters.textual import (
    TextualHydraAdapter,
    TextualUIHooks,
    textual_key_to_token,
)
from hydra_engine.host import SimulatedHost


def make_adapter(hooks: TextualUIHooks, **config: object) -> TextualHydraAdapter:
    host = SimulatedHost()
    manager = HydraManager(host.services())
    manager.create(
        name="scroll",
        body="<Space>s",
        heads=[
            ("j", "<C-e>", {"desc": "down"}),
            ("q", None, {"exit": True, "desc": "quit"}),
        ],
        config={"hint": "statusline", **config},
    )
    return TextualHydraAdapter(host, manager, hooks)


@pytest.mark.parametrize(
    "key, character, token",
    [
        ("j", "j", "j"),
        ("J", "J", "J"),
        ("escape", None, "<Esc>"),
        ("space", " ", "<Space>"),
        ("ctrl+u", None, "<C-u>"),
        ("shift+tab", None, "<S-Tab>"),
        ("ctrl+alt+x", None, "<C-M-x>"),
        ("f5", None, "<F5>"),
        ("+", "+", "+"),
        ("question_mark", "?", "?"),
    ],
)
def test_textual_key_to_token(key: str, character: str | None, token: str) -> None:
    assert textual_key_to_token(key, character) == token


def test_adapter_mirrors_hydra_state() -> None:
    statuses: List[str] = []
    hints: List[List[str]] = []
    outputs: List[List[str]] = []
    hooks = TextualUIHooks(
        update_status=statuses.append,
        show_hint=hints.append,
        show_output=outputs.append,
    )
    adapter = make_adapter(hooks)

    adapter.handle_textual_key("space", character=" ")
    adapter.handle_textual_key("s", character="s")
    adapter.handle_textual_key("j", character="j")

    assert statuses[-1] == "-- SCROLL --"
    assert hints[-1] == ["scroll: j: down, q: quit"]
    assert outputs[-1] == ["<C-e>"]

    adapter.handle_textual_key("q", character="q")

    assert statuses[-1] == ""
    assert hints[-1] == []
    assert adapter.manager.active is None


def test_adapter_shows_rejection_status() -> None:
    statuses: List[str] = []
    adapter = make_adapter(TextualUIHooks(update_status=statuses.append), color="amaranth")
    next(iter(adapter.manager)).activate()

    adapter.handle_textual_key("x", character="x")

    assert statuses[-1] == "An Amaranth Hydra can only exit through a blue head"


def test_adapter_processes_timeouts() -> None:
    adapter = make_adapter(TextualUIHooks(), timeout=200)
    hydra = next(iter(adapter.manager))
    hydra.activate()

    assert adapter.process_timeouts() is True
    assert adapter.manager.active is None
    assert adapter.process_timeouts() is False


def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    adapter = make_adapter(TextualUIHooks(log=logs.append))

    adapter.handle_textual_key("j", character="j")

    assert any(line.startswith("key ->") for line in logs)
    assert "token='j'" in logs[-1]
