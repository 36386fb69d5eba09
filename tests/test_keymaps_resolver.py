from __future__ import annotations

from hydra_engine.keymaps import (
    Binding,
    BindingOptions,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    binding_id,
)


def make_binding(lhs: str, *, buffer: int | None = None, owner: int = 1) -> Binding:
    return Binding(
        id=binding_id(owner, "head", "n", lhs),
        owner=owner,
        kind="head",
        mode="n",
        sequence=KeySequence.parse(lhs),
        handler=lambda: None,
        options=BindingOptions(buffer=buffer),
    )


def build_resolver(*bindings: Binding) -> KeymapResolver:
    registry = KeymapRegistry()
    for binding in bindings:
        registry.register(binding)
    return KeymapResolver(registry)


def test_resolver_matches_exact_sequence() -> None:
    resolver = build_resolver(make_binding("gg"))

    result = resolver.resolve("n", ("g", "g"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.lhs == "gg"
    assert result.consumed == 2


def test_resolver_reports_pending_for_prefix() -> None:
    resolver = build_resolver(make_binding("gg"))

    result = resolver.resolve("n", ("g",))

    assert result.status == "pending"
    assert result.match is None


def test_resolver_pending_keeps_shorter_match() -> None:
    resolver = build_resolver(make_binding("g"), make_binding("gg"))

    result = resolver.resolve("n", ("g",))

    assert result.pending is True
    assert result.match is not None and result.match.lhs == "g"


def test_resolver_falls_back_to_longest_complete_match() -> None:
    resolver = build_resolver(make_binding("g"), make_binding("ggx"))

    result = resolver.resolve("n", ("g", "g", "y"))

    assert result.status == "match"
    assert result.match is not None and result.match.lhs == "g"
    assert result.consumed == 1


def test_resolver_miss() -> None:
    resolver = build_resolver(make_binding("gg"))

    assert resolver.resolve("n", ("x",)).status == "miss"


def test_buffer_local_binding_shadows_global() -> None:
    global_binding = make_binding("gg", owner=1)
    local_binding = make_binding("gg", owner=2, buffer=5)
    resolver = build_resolver(global_binding, local_binding)

    in_buffer = resolver.resolve("n", ("g", "g"), buffer=5)
    elsewhere = resolver.resolve("n", ("g", "g"), buffer=6)

    assert in_buffer.match is local_binding
    assert elsewhere.match is global_binding


def test_resolver_sees_registry_updates() -> None:
    registry = KeymapRegistry()
    resolver = KeymapResolver(registry)
    assert resolver.resolve("n", ("j",)).status == "miss"

    registry.register(make_binding("j"))

    assert resolver.resolve("n", ("j",)).status == "match"
