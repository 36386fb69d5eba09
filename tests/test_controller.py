from __future__ import annotations

import dataclasses
from typing import Any, List

import pytest

from hydra_engine import HydraManager, ModeState
from hydra_engine.errors import AccessorMisuse, MissingCollaborator
from hydra_engine.heads import Color
from hydra_engine.host import SimulatedHost
from hydra_engine.keymaps import Binding, BindingOptions, KeySequence
from hydra_engine.modes.controller import REJECTION_MESSAGES

SCROLL_HEADS = [("j", "j"), ("k", "k"), ("q", None, {"exit": True})]


def make_manager(**host_kwargs: Any) -> tuple[SimulatedHost, HydraManager]:
    host = SimulatedHost(**host_kwargs)
    return host, HydraManager(host.services())


def test_body_then_heads_then_exit_head() -> None:
    host, manager = make_manager()
    hydra = manager.create(body="<leader>a", heads=SCROLL_HEADS)

    host.feed("<leader>a")
    host.feed("j")
    assert hydra.state is ModeState.WAITING
    host.feed("j")
    host.feed("q")

    assert host.executed == ["j", "j"]
    assert hydra.state is ModeState.INACTIVE
    assert manager.active is None


def test_body_alone_enters_after_timeout() -> None:
    host, manager = make_manager()
    hydra = manager.create(body="<leader>a", heads=SCROLL_HEADS)

    host.feed("<leader>a")
    assert hydra.state is ModeState.INACTIVE
    assert host.tick_timeout() is True

    assert hydra.state is ModeState.WAITING
    assert manager.active is hydra
    assert host.executed == []


def test_enter_applies_session_options_and_exit_restores_them() -> None:
    host, manager = make_manager()
    hydra = manager.create(body="<leader>a", heads=SCROLL_HEADS)
    before = host.options.as_dict()

    hydra.activate()

    assert host.options.get("o", "showcmd") is False
    assert host.options.get("o", "timeout") is False
    assert host.options.get("o", "ttimeout") is True

    host.feed("q")

    assert host.options.as_dict() == before


def test_red_foreign_key_exits_and_runs_the_key() -> None:
    host, manager = make_manager()
    hydra = manager.create(body="<leader>a", heads=SCROLL_HEADS)
    hydra.activate()

    host.feed("x")

    assert hydra.state is ModeState.INACTIVE
    assert host.executed == ["x"]
    assert host.hint.visible is False


def test_blue_head_exits_after_one_use() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        body="<leader>b", heads=[("j", "j"), ("k", "k")], config={"exit": True}
    )
    assert hydra.color is Color.BLUE

    host.feed("<leader>b")
    assert hydra.state is ModeState.WAITING
    host.feed("j")

    assert hydra.state is ModeState.INACTIVE
    assert host.executed == ["j"]


def test_amaranth_rejects_foreign_key() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        body="<leader>a", heads=SCROLL_HEADS, config={"color": "amaranth"}
    )
    hydra.activate()

    host.feed("x")

    assert hydra.state is ModeState.WAITING
    assert host.executed == []
    assert host.messages == [REJECTION_MESSAGES[Color.AMARANTH]]
    assert host.status == REJECTION_MESSAGES[Color.AMARANTH]

    host.feed("j")
    host.feed("q")

    assert host.executed == ["j"]
    assert hydra.state is ModeState.INACTIVE
    assert host.status is None


def test_amaranth_without_exit_head_leaves_through_escape() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        body="<leader>a", heads=[("j", "j")], config={"foreign_keys": "warn"}
    )
    assert hydra.color is Color.AMARANTH
    hydra.activate()

    host.feed("<Esc>")

    assert hydra.state is ModeState.INACTIVE
    assert host.executed == []


def test_teal_rejects_foreign_key_and_heads_exit() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        body="<leader>t",
        heads=[("j", "j"), ("k", "k", {"exit": False})],
        config={"color": "teal"},
    )

    host.feed("<leader>t")
    host.feed("x")
    assert hydra.state is ModeState.WAITING
    assert host.messages == [REJECTION_MESSAGES[Color.TEAL]]

    host.feed("k")
    assert hydra.state is ModeState.WAITING
    host.feed("j")

    assert host.executed == ["k", "j"]
    assert hydra.state is ModeState.INACTIVE


def test_entering_forces_previous_hydra_out_first() -> None:
    events: List[str] = []
    host, manager = make_manager()
    first = manager.create(
        name="first",
        heads=SCROLL_HEADS,
        config={"on_exit": lambda _opts: events.append("first:exit")},
    )
    second = manager.create(
        name="second",
        heads=SCROLL_HEADS,
        config={"on_enter": lambda _opts: events.append("second:enter")},
    )

    first.activate()
    second.activate()

    assert events == ["first:exit", "second:enter"]
    assert first.state is ModeState.INACTIVE
    assert manager.active is second

    # The stale wait trigger of ``first`` is still queued ahead of ``second``'s.
    host.feed("j")

    assert second.state is ModeState.WAITING
    assert host.executed == ["j"]


def test_exit_restores_options_even_when_on_exit_raises() -> None:
    def broken_exit(_opts: Any) -> None:
        raise RuntimeError("boom")

    host, manager = make_manager()
    hydra = manager.create(heads=SCROLL_HEADS, config={"on_exit": broken_exit})
    before = host.options.as_dict()
    hydra.activate()

    with pytest.raises(RuntimeError, match="boom"):
        hydra.exit()

    assert host.options.as_dict() == before
    assert hydra.state is ModeState.INACTIVE
    assert manager.slot.is_empty()


def test_on_enter_changes_are_undone_on_exit() -> None:
    def on_enter(opts: Any) -> None:
        opts.o.timeoutlen = 123
        opts.wo["wrap"] = False

    host, manager = make_manager()
    hydra = manager.create(heads=SCROLL_HEADS, config={"on_enter": on_enter})

    hydra.activate()
    assert host.options.get("o", "timeoutlen") == 123
    assert host.options.get("wo", "wrap") is False

    hydra.exit()

    assert host.options.get("o", "timeoutlen") == 1000
    with pytest.raises(KeyError):
        host.options.get("wo", "wrap")


def test_on_enter_handle_accessor_is_rejected_and_unwinds() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        heads=SCROLL_HEADS, config={"on_enter": lambda opts: opts.bo[0]}
    )
    before = host.options.as_dict()

    with pytest.raises(AccessorMisuse):
        hydra.activate()

    assert hydra.state is ModeState.INACTIVE
    assert manager.slot.is_empty()
    assert host.options.as_dict() == before


def test_on_exit_cannot_write_options() -> None:
    seen: List[Any] = []

    def on_exit(opts: Any) -> None:
        seen.append(opts.o.showcmd)
        opts.o.showcmd = False

    host, manager = make_manager()
    hydra = manager.create(heads=SCROLL_HEADS, config={"on_exit": on_exit})
    hydra.activate()

    with pytest.raises(AccessorMisuse):
        hydra.exit()

    assert seen == [True]
    assert host.options.get("o", "showcmd") is True


def test_timeout_exits_waiting_hydra() -> None:
    host, manager = make_manager()
    hydra = manager.create(heads=SCROLL_HEADS, config={"timeout": 500})
    hydra.activate()

    assert host.options.get("o", "timeout") is True
    assert host.options.get("o", "timeoutlen") == 500

    assert host.tick_timeout() is True

    assert hydra.state is ModeState.INACTIVE
    assert host.options.get("o", "timeoutlen") == 1000


def test_without_timeout_waiting_hydra_ignores_ticks() -> None:
    host, manager = make_manager()
    hydra = manager.create(heads=SCROLL_HEADS)
    hydra.activate()

    assert host.tick_timeout() is False
    assert hydra.state is ModeState.WAITING


def test_expression_heads_replay_evaluated_keys() -> None:
    host, manager = make_manager(expressions={"next_hunk": "]c"})
    hydra = manager.create(
        heads=[
            ("n", "next_hunk", {"expr": True}),
            ("p", lambda: "[c", {"expr": True}),
            ("q", None, {"exit": True}),
        ]
    )
    hydra.activate()

    host.feed("np")

    assert host.executed == ["]", "c", "[", "c"]
    assert hydra.state is ModeState.WAITING


def test_expression_head_without_evaluator() -> None:
    host = SimulatedHost()
    services = dataclasses.replace(host.services(), evaluator=None)
    manager = HydraManager(services)
    hydra = manager.create(heads=[("n", "next_hunk", {"expr": True})])

    assert isinstance(hydra.setup_error, MissingCollaborator)
    assert hydra.setup_error.collaborator == "evaluator"
    assert host.registry.stats().binding_count == 0
    with pytest.raises(MissingCollaborator):
        hydra.activate()
    assert manager.slot.is_empty()
    assert host.options.get("o", "showcmd") is True


def test_callable_expression_head_needs_no_evaluator() -> None:
    host = SimulatedHost()
    services = dataclasses.replace(host.services(), evaluator=None)
    hydra = HydraManager(services).create(heads=[("n", lambda: "]c", {"expr": True})])

    assert hydra.setup_error is None
    hydra.activate()
    host.feed("n")

    assert host.executed == ["]", "c"]


def test_remap_head_goes_through_other_bindings() -> None:
    calls: List[str] = []
    host, manager = make_manager()
    host.bind(
        Binding(
            id="user:gg",
            owner=0,
            kind="head",
            mode="n",
            sequence=KeySequence.parse("gg"),
            handler=lambda: calls.append("gg"),
            options=BindingOptions(),
        )
    )
    hydra = manager.create(
        heads=[("t", "gg", {"remap": True}), ("T", "gg"), ("q", None, {"exit": True})]
    )
    hydra.activate()

    host.feed("t")
    host.feed("T")

    assert calls == ["gg"]
    assert host.executed == ["g", "g"]


def test_callable_head_runs_in_place() -> None:
    calls: List[str] = []
    host, manager = make_manager()
    hydra = manager.create(
        heads=[("c", lambda: calls.append("c")), ("q", None, {"exit": True})]
    )
    hydra.activate()

    host.feed("cc")

    assert calls == ["c", "c"]
    assert host.executed == []
    assert hydra.state is ModeState.WAITING


def test_buffer_true_binds_to_current_buffer() -> None:
    host, manager = make_manager(buffer=3)
    hydra = manager.create(body="<leader>a", heads=SCROLL_HEADS, config={"buffer": True})

    owned = list(host.registry.iter_bindings(owner=hydra.id))
    assert owned
    assert {binding.buffer for binding in owned} == {3}

    host.buffer = 4
    host.feed("<leader>aj")

    assert hydra.state is ModeState.INACTIVE
    assert host.executed == ["<leader>", "a", "j"]


def test_destroy_removes_only_own_bindings() -> None:
    host, manager = make_manager()
    first = manager.create(body="<leader>a", heads=SCROLL_HEADS)
    second = manager.create(body="<leader>b", heads=SCROLL_HEADS)
    first.activate()

    manager.destroy(first)

    assert first.state is ModeState.INACTIVE
    assert list(host.registry.iter_bindings(owner=first.id)) == []
    assert list(host.registry.iter_bindings(owner=second.id))
    assert len(manager) == 1
    assert list(manager) == [second]


def test_private_head_has_no_body_shortcut() -> None:
    host, manager = make_manager()
    hydra = manager.create(
        body="<leader>a", heads=[("j", "j"), ("x", "x", {"private": True})]
    )
    assert hydra.plan is not None
    assert "<leader>ax" not in hydra.plan.lhs_set("n")

    # The body matches first, then "x" resolves against the waiting heads.
    host.feed("<leader>ax")

    assert hydra.state is ModeState.WAITING
    assert host.executed == ["x"]


def test_destroy_all_clears_every_binding() -> None:
    host, manager = make_manager()
    manager.create(body="<leader>a", heads=SCROLL_HEADS)
    active = manager.create(body="<leader>b", heads=SCROLL_HEADS)
    active.activate()

    manager.destroy_all()

    assert len(manager) == 0
    assert manager.slot.is_empty()
    assert host.registry.stats().binding_count == 0


def test_failing_head_action_exits_hydra() -> None:
    def broken() -> None:
        raise RuntimeError("head failed")

    host, manager = make_manager()
    hydra = manager.create(heads=[("b", broken), ("q", None, {"exit": True})])
    before = host.options.as_dict()
    hydra.activate()

    with pytest.raises(RuntimeError, match="head failed"):
        host.feed("b")

    assert hydra.state is ModeState.INACTIVE
    assert manager.slot.is_empty()
    assert host.options.as_dict() == before
    assert host.pending == ()

    host.feed("x")
    assert host.executed == ["x"]


def test_failing_head_action_on_body_entry_exits_hydra() -> None:
    def broken() -> None:
        raise RuntimeError("head failed")

    host, manager = make_manager()
    hydra = manager.create(body="<leader>a", heads=[("b", broken), ("j", "j")])

    with pytest.raises(RuntimeError):
        host.feed("<leader>ab")

    assert hydra.state is ModeState.INACTIVE
    assert manager.slot.is_empty()
    assert host.options.get("o", "showcmd") is True


def test_on_enter_activating_another_hydra() -> None:
    host, manager = make_manager()
    second = manager.create(name="second", heads=SCROLL_HEADS)
    first = manager.create(
        name="first",
        heads=SCROLL_HEADS,
        config={"on_enter": lambda _opts: second.activate()},
    )
    before = host.options.as_dict()

    first.activate()

    assert first.state is ModeState.INACTIVE
    assert second.state is ModeState.WAITING
    assert manager.active is second
    assert host.hint.owner == "second"

    host.feed("j")
    assert host.executed == ["j"]
    assert second.state is ModeState.WAITING

    host.feed("q")

    assert second.state is ModeState.INACTIVE
    assert host.options.as_dict() == before


def test_head_mode_reached_at_runtime() -> None:
    host, manager = make_manager(mode="x")
    hydra = manager.create(
        body="<leader>a",
        heads=[("j", "j", {"mode": "x"}), ("q", None, {"exit": True, "mode": "x"})],
    )

    host.feed("<leader>aj")
    assert hydra.state is ModeState.WAITING
    host.feed("j")
    host.feed("z")

    assert hydra.state is ModeState.INACTIVE
    assert host.executed == ["j", "j", "z"]
    assert host.options.get("o", "showcmd") is True
