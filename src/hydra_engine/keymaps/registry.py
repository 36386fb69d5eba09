"""In-memory binding store indexed by mode, buffer scope and key signature."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from hydra_engine.runtime.telemetry import span

from .models import Binding

# (mode, buffer) -> lhs -> binding ids
_ScopeIndex = Dict[tuple[str, Optional[int]], Dict[str, set[str]]]


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    binding_count: int
    owners: tuple[int, ...]
    modes: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """Raised when a new binding shadows an existing one in the same scope."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        message = (
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        super().__init__(message)
        self.binding = binding
        self.conflicts = conflicts_tuple


class KeymapRegistry:
    """Owns registered bindings; removal is keyed by binding or owner id."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._bindings: Dict[str, Binding] = {}
        self._scope_index: _ScopeIndex = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def __contains__(self, binding_id: object) -> bool:
        return binding_id in self._bindings

    def register(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            conflicts = self.detect_conflicts(binding)
            if conflicts and not replace:
                handle.add_metadata(
                    "conflicts", ",".join(conflict.id for conflict in conflicts)
                )
                raise KeymapConflictError(binding, conflicts)

            for conflict in conflicts:
                self._drop(conflict)
            existing = self._bindings.get(binding.id)
            if existing and not replace:
                raise ValueError(f"Binding id '{binding.id}' already registered")
            if existing:
                self._drop(existing)

            self._bindings[binding.id] = binding
            self._index(binding)
            self._revision += 1
            return binding

    def unregister(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            binding = self._bindings.get(binding_id)
            if binding is None:
                return None
            self._drop(binding)
            self._revision += 1
            return binding

    def unregister_owner(self, owner: int) -> list[Binding]:
        removed = [b for b in self._bindings.values() if b.owner == owner]
        for binding in removed:
            self._drop(binding)
        if removed:
            self._revision += 1
        return removed

    def iter_bindings(
        self, mode: Optional[str] = None, *, owner: Optional[int] = None
    ) -> Iterator[Binding]:
        for binding in self._bindings.values():
            if mode is not None and binding.mode != mode:
                continue
            if owner is not None and binding.owner != owner:
                continue
            yield binding

    def stats(self) -> RegistryStats:
        return RegistryStats(
            binding_count=len(self._bindings),
            owners=tuple(sorted({b.owner for b in self._bindings.values()})),
            modes=tuple(sorted({mode for mode, _ in self._scope_index})),
        )

    def detect_conflicts(self, binding: Binding) -> list[Binding]:
        scope = self._scope_index.get((binding.mode, binding.buffer), {})
        return [
            self._bindings[match_id]
            for match_id in scope.get(binding.lhs, set())
            if match_id != binding.id
        ]

    def _index(self, binding: Binding) -> None:
        scope = self._scope_index.setdefault((binding.mode, binding.buffer), {})
        scope.setdefault(binding.lhs, set()).add(binding.id)

    def _drop(self, binding: Binding) -> None:
        self._bindings.pop(binding.id, None)
        key = (binding.mode, binding.buffer)
        scope = self._scope_index.get(key)
        if not scope:
            return
        ids = scope.get(binding.lhs)
        if not ids:
            return
        ids.discard(binding.id)
        if not ids:
            scope.pop(binding.lhs, None)
        if not scope:
            self._scope_index.pop(key, None)


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
]
