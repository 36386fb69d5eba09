"""Restorable option sessions and the accessors handed to user callbacks.

``on_enter`` receives a :class:`ScopedOptions`; every write goes through the
session, which snapshots the original value first so ``exit`` can put it
back. ``on_exit`` receives a :class:`ReadOnlyOptions`; by the time it runs
the session is already restored, so any write would leak past the hydra and
is rejected.
"""

from __future__ import annotations

from typing import Any, Iterable

from hydra_engine.errors import AccessorMisuse
from hydra_engine.host.protocols import OptionKey, OptionSnapshot, OptionsStore

SCOPES = ("o", "go", "bo", "wo")


class OptionSession:
    """Tracks every option a hydra touches between enter and exit."""

    def __init__(self, store: OptionsStore) -> None:
        self._store = store
        self._snapshot = OptionSnapshot()
        self._restored = False

    @property
    def restored(self) -> bool:
        return self._restored

    @property
    def touched(self) -> tuple[OptionKey, ...]:
        return tuple(self._snapshot.values)

    def capture(self, keys: Iterable[OptionKey]) -> None:
        missing = [key for key in keys if key not in self._snapshot]
        if missing:
            self._snapshot.values.update(self._store.snapshot(missing).values)

    def original(self, scope: str, name: str) -> Any:
        key = (scope, name)
        if key in self._snapshot:
            return self._snapshot.values[key]
        return self._store.get(scope, name)

    def get(self, scope: str, name: str) -> Any:
        return self._store.get(scope, name)

    def set(self, scope: str, name: str, value: Any) -> None:
        if self._restored:
            raise AccessorMisuse(f"option session already restored; cannot set {scope}.{name}")
        self.capture([(scope, name)])
        self._store.set(scope, name, value)

    def restore(self) -> None:
        if self._restored:
            return
        self._restored = True
        self._store.restore(self._snapshot)


class _Namespace:
    __slots__ = ("_scope", "_reader", "_writer", "_owner")

    def __init__(self, scope: str, reader, writer, owner: str) -> None:
        object.__setattr__(self, "_scope", scope)
        object.__setattr__(self, "_reader", reader)
        object.__setattr__(self, "_writer", writer)
        object.__setattr__(self, "_owner", owner)

    def _check_name(self, name: object) -> str:
        if isinstance(name, int):
            raise AccessorMisuse(
                f"options.{self._scope}[{name}] handle accessor in {self._owner}() "
                f"is forbidden, use options.{self._scope} instead"
            )
        if not isinstance(name, str):
            raise TypeError(f"option name must be a string, got {type(name).__name__}")
        return name

    def __getitem__(self, name: object) -> Any:
        return self._reader(self._scope, self._check_name(name))

    def __setitem__(self, name: object, value: Any) -> None:
        self._writer(self._scope, self._check_name(name), value)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value


class ScopedOptions:
    """Mutable accessor whose writes are undone when the hydra exits."""

    def __init__(self, session: OptionSession) -> None:
        for scope in SCOPES:
            setattr(self, scope, _Namespace(scope, session.get, session.set, "on_enter"))


class ReadOnlyOptions:
    """Accessor passed to ``on_exit``: reads only."""

    def __init__(self, store: OptionsStore) -> None:
        for scope in SCOPES:
            setattr(self, scope, _Namespace(scope, store.get, self._reject, "on_exit"))

    @staticmethod
    def _reject(scope: str, name: str, value: Any) -> None:
        raise AccessorMisuse(
            f"options.{scope}.{name} cannot be changed from on_exit(); "
            "the hydra's option session is already restored"
        )


__all__ = ["OptionSession", "ScopedOptions", "ReadOnlyOptions", "SCOPES"]
