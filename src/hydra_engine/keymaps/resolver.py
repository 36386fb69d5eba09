"""Trie-based longest-match resolution over registered bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from hydra_engine.runtime.telemetry import span

from .models import Binding
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    """Single trie node tracking bindings and child transitions."""

    bindings: list[Binding] = field(default_factory=list)
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def preferred(self) -> Optional[Binding]:
        # Buffer-local bindings shadow global ones on the same lhs.
        if not self.bindings:
            return None
        local = [b for b in self.bindings if b.buffer is not None]
        return (local or self.bindings)[-1]


@dataclass(slots=True)
class KeymapTrie:
    """Trie of the bindings visible in one mode from one buffer."""

    mode: str
    buffer: Optional[int]
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        node.bindings.append(binding)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of matching the head of an input queue.

    ``match`` is the longest complete binding seen (``consumed`` tokens long).
    ``pending`` is set when every queued token matched and a longer binding
    could still complete with more input.
    """

    status: Literal["match", "pending", "miss"]
    match: Optional[Binding] = None
    consumed: int = 0
    pending: bool = False


class KeymapResolver:
    """Caches per-scope tries and resolves queued tokens against them."""

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._cache: Dict[tuple[str, Optional[int]], tuple[int, KeymapTrie]] = {}

    def resolve(
        self,
        mode: str,
        tokens: Sequence[str],
        *,
        buffer: Optional[int] = None,
    ) -> ResolutionResult:
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode, "length": len(tokens)},
        ) as handle:
            node = self._ensure_trie(mode, buffer).root
            best: Optional[Binding] = None
            best_len = 0
            walked = 0
            for token in tokens:
                child = node.children.get(token)
                if child is None:
                    break
                node = child
                walked += 1
                candidate = node.preferred()
                if candidate is not None:
                    best, best_len = candidate, walked

            pending = walked == len(tokens) and walked > 0 and bool(node.children)
            if pending:
                status: Literal["match", "pending", "miss"] = "pending"
            elif best is not None:
                status = "match"
            else:
                status = "miss"
            handle.add_metadata("status", status)
            return ResolutionResult(
                status=status, match=best, consumed=best_len, pending=pending
            )

    def _ensure_trie(self, mode: str, buffer: Optional[int]) -> KeymapTrie:
        revision = self._registry.revision()
        cached = self._cache.get((mode, buffer))
        if cached and cached[0] == revision:
            return cached[1]

        trie = KeymapTrie(mode=mode, buffer=buffer)
        for binding in self._registry.iter_bindings(mode):
            if binding.buffer is None or binding.buffer == buffer:
                trie.add_binding(binding)
        self._cache[(mode, buffer)] = (revision, trie)
        return trie


__all__ = [
    "KeymapResolver",
    "KeymapTrie",
    "ResolutionResult",
]
