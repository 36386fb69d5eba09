"""Derives every key binding a hydra needs for prefix continuation.

For body ``B``, head ``H`` and the instance's wait trigger ``W`` the plan
holds five kinds of bindings:

``wait``    ``W``          -> leave the wait state
``body``    ``B``          -> enter, then re-arm ``W``
``enter``   ``B ++ H``     -> enter, run ``H``, re-arm ``W``
``head``    ``W ++ H``     -> run ``H`` and re-arm ``W`` (or exit for exit heads)
``prefix``  ``W ++ p``     -> leave, for every proper prefix ``p`` of ``H``

Prefix bindings keep multi-key heads reachable: the host holds a pending
``W ++ p`` until the next key arrives instead of falling back to ``W``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Protocol, Sequence

from hydra_engine.heads import Head, HeadTable

from .models import (
    Binding,
    BindingKind,
    BindingOptions,
    KeySequence,
    binding_id,
    plug_keys,
)


class PlanHandlers(Protocol):
    """Callbacks the generated bindings dispatch into."""

    def leave(self) -> None: ...

    def enter_from_body(self) -> None: ...

    def enter_with_head(self, head: Head) -> None: ...

    def fire_head(self, head: Head) -> None: ...


@dataclass(frozen=True, slots=True)
class KeymapPlan:
    """Immutable set of bindings owned by one hydra instance."""

    owner: int
    wait: KeySequence
    bindings: tuple[Binding, ...]

    def __iter__(self) -> Iterator[Binding]:
        return iter(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def of_kind(self, kind: BindingKind) -> tuple[Binding, ...]:
        return tuple(binding for binding in self.bindings if binding.kind == kind)

    def lhs_set(self, mode: Optional[str] = None) -> frozenset[str]:
        return frozenset(
            binding.lhs
            for binding in self.bindings
            if mode is None or binding.mode == mode
        )

    def unbind_ids(self) -> tuple[str, ...]:
        return tuple(binding.id for binding in self.bindings)

    @classmethod
    def build(
        cls,
        *,
        owner: int,
        modes: Sequence[str],
        body: Optional[str],
        table: HeadTable,
        invoke_on_body: bool,
        handlers: PlanHandlers,
        buffer: Optional[int] = None,
    ) -> "KeymapPlan":
        wait = KeySequence.parse(plug_keys(owner, "wait"))
        builder = _PlanBuilder(owner=owner, buffer=buffer)

        # Heads bound in their own modes need the wait trigger there too.
        wait_modes = dict.fromkeys(modes)
        for head in table:
            wait_modes.update(dict.fromkeys(head.options.modes or ()))
        for mode in wait_modes:
            builder.add("wait", mode, wait, handlers.leave)

        if body:
            body_keys = KeySequence.parse(body)
            for mode in modes:
                builder.add("body", mode, body_keys, handlers.enter_from_body)
        else:
            body_keys = None

        head_lhs = frozenset(head.lhs for head in table)
        for head in table:
            head_keys = KeySequence.parse(head.lhs)
            head_modes = head.options.modes or tuple(modes)
            desc = head.desc if isinstance(head.desc, str) else None

            for mode in head_modes:
                if (
                    body_keys is not None
                    and not invoke_on_body
                    and not head.exit
                    and not head.private
                ):
                    builder.add(
                        "enter",
                        mode,
                        body_keys + head_keys,
                        _bind(handlers.enter_with_head, head),
                        desc=desc,
                    )

                builder.add(
                    "head",
                    mode,
                    wait + head_keys,
                    _bind(handlers.fire_head, head),
                    desc=desc,
                )

                for prefix in head_keys.proper_prefixes():
                    if prefix.text in head_lhs:
                        continue
                    builder.add("prefix", mode, wait + prefix, handlers.leave)

        return cls(owner=owner, wait=wait, bindings=tuple(builder.bindings.values()))


def _bind(handler: Callable[[Head], None], head: Head) -> Callable[[], None]:
    def invoke() -> None:
        handler(head)

    return invoke


class _PlanBuilder:
    def __init__(self, *, owner: int, buffer: Optional[int]) -> None:
        self.owner = owner
        self.buffer = buffer
        self.bindings: dict[str, Binding] = {}

    def add(
        self,
        kind: BindingKind,
        mode: str,
        sequence: KeySequence,
        handler: Callable[[], object],
        *,
        desc: Optional[str] = None,
    ) -> None:
        key = binding_id(self.owner, kind, mode, sequence.text)
        # Prefixes shared by several heads collapse into one binding.
        if key in self.bindings:
            return
        self.bindings[key] = Binding(
            id=key,
            owner=self.owner,
            kind=kind,
            mode=mode,
            sequence=sequence,
            handler=handler,
            options=BindingOptions(desc=desc, buffer=self.buffer),
        )


__all__ = ["KeymapPlan", "PlanHandlers"]
