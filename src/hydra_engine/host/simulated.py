"""In-memory editor host: binding store, typeahead dispatch and options.

``SimulatedHost`` stands in for a real editor. Typed keys go to a queue and
are dispatched with longest-match semantics: while the queued keys are a
strict prefix of some binding the host waits for more input, unless the
``timeout`` option is on and :meth:`SimulatedHost.tick_timeout` is called,
in which case the longest complete binding (or the first key, unmapped)
runs. Keys that match nothing are recorded in :attr:`executed`.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterable, Mapping, Optional, Union

from hydra_engine.hint import TextHint
from hydra_engine.keymaps import Binding, KeymapRegistry, KeymapResolver, split_keys
from hydra_engine.runtime import telemetry

from .protocols import LayerFactory, OptionKey, OptionSnapshot
from .services import HostServices

DEFAULT_OPTIONS: Mapping[OptionKey, Any] = {
    ("o", "showcmd"): True,
    ("o", "timeout"): True,
    ("o", "timeoutlen"): 1000,
    ("o", "ttimeout"): True,
    ("o", "ttimeoutlen"): 50,
}

_UNSET = object()


class MemoryOptions:
    """Option store backed by a dict keyed by ``(scope, name)``."""

    def __init__(self, initial: Optional[Mapping[OptionKey, Any]] = None) -> None:
        self._values: Dict[OptionKey, Any] = dict(DEFAULT_OPTIONS)
        self._values.update(initial or {})

    def get(self, scope: str, name: str) -> Any:
        try:
            return self._values[(scope, name)]
        except KeyError as exc:
            raise KeyError(f"Unknown option '{scope}.{name}'") from exc

    def set(self, scope: str, name: str, value: Any) -> None:
        self._values[(scope, name)] = value

    def snapshot(self, names: Iterable[OptionKey]) -> OptionSnapshot:
        return OptionSnapshot({key: self._values.get(key, _UNSET) for key in names})

    def restore(self, snapshot: OptionSnapshot) -> None:
        for key, value in snapshot.values.items():
            if value is _UNSET:
                self._values.pop(key, None)
            else:
                self._values[key] = value

    def as_dict(self) -> Dict[OptionKey, Any]:
        return dict(self._values)


@dataclass(frozen=True, slots=True)
class _Key:
    token: str
    remap: bool = True


Expression = Union[str, Callable[[], str]]


class SimulatedHost:
    """Reference implementation of every host collaborator protocol."""

    def __init__(
        self,
        *,
        mode: str = "n",
        buffer: int = 1,
        options: Optional[MemoryOptions] = None,
        hint: Optional[TextHint] = None,
        expressions: Optional[Mapping[str, Expression]] = None,
        layer_factory: Optional[LayerFactory] = None,
        logger_name: str = "hydra_engine.host",
    ) -> None:
        self.mode = mode
        self.buffer = buffer
        self.registry = KeymapRegistry(logger_name=logger_name)
        self.resolver = KeymapResolver(self.registry, logger_name=logger_name)
        self.options = options or MemoryOptions()
        self.hint = hint or TextHint()
        self.expressions: Dict[str, Expression] = dict(expressions or {})
        self.layer_factory = layer_factory
        self.executed: list[str] = []
        self.messages: list[str] = []
        self.status: Optional[str] = None
        self._typeahead: Deque[_Key] = deque()
        self._typed: Deque[_Key] = deque()
        self._dispatching = False
        self.logger = telemetry.get_logger(logger_name)

    def services(self) -> HostServices:
        return HostServices(
            binder=self,
            input=self,
            options=self.options,
            hint=self.hint,
            notifier=self,
            evaluator=self,
            layer_factory=self.layer_factory,
        )

    # -- KeyBinder -------------------------------------------------------

    def bind(self, binding: Binding) -> None:
        # Later bindings replace earlier ones on the same lhs and scope.
        self.registry.register(binding, replace=True)

    def unbind(self, binding_id: str) -> None:
        self.registry.unregister(binding_id)

    def replay(self, keys: str, *, remap: bool, insert: bool) -> None:
        items = [_Key(token, remap) for token in split_keys(keys)]
        if insert:
            self._typeahead.extendleft(reversed(items))
        else:
            self._typeahead.extend(items)

    def current_buffer(self) -> int:
        return self.buffer

    # -- InputPeek -------------------------------------------------------

    def has_buffered_input(self) -> bool:
        return bool(self._typeahead or self._typed)

    def consume_one(self) -> Optional[str]:
        if self._typeahead:
            return self._typeahead.popleft().token
        if self._typed:
            return self._typed.popleft().token
        return None

    # -- Notifier --------------------------------------------------------

    def warn(self, message: str) -> None:
        self.messages.append(message)
        self.status = message

    def clear_status(self) -> None:
        self.status = None

    # -- ExpressionEvaluator ---------------------------------------------

    def evaluate(self, expression: str) -> str:
        try:
            value = self.expressions[expression]
        except KeyError as exc:
            raise KeyError(f"Unknown expression '{expression}'") from exc
        return value() if callable(value) else value

    # -- input -----------------------------------------------------------

    def feed(self, keys: str) -> None:
        """Type ``keys`` and dispatch as far as the bindings allow."""

        self._typed.extend(_Key(token) for token in split_keys(keys))
        self.dispatch()

    def tick_timeout(self) -> bool:
        """Expire a pending ambiguous sequence; no-op while ``timeout`` is off."""

        if not self.options.get("o", "timeout"):
            return False
        if not self.has_buffered_input():
            return False
        self.dispatch(expire=True)
        return True

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(item.token for item in (*self._typeahead, *self._typed))

    def dispatch(self, *, expire: bool = False) -> None:
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self.has_buffered_input():
                if not self._step(expire):
                    break
                expire = False
        finally:
            self._dispatching = False

    def _step(self, expire: bool) -> bool:
        queue = [*self._typeahead, *self._typed]
        first = queue[0]
        if not first.remap:
            self._pop(1)
            self.executed.append(first.token)
            return True

        tokens: list[str] = []
        for item in queue:
            if not item.remap:
                break
            tokens.append(item.token)

        result = self.resolver.resolve(self.mode, tokens, buffer=self.buffer)
        if result.pending and len(tokens) == len(queue) and not expire:
            return False
        if result.match is not None:
            self._pop(result.consumed)
            result.match.handler()
            return True
        self._pop(1)
        self.executed.append(first.token)
        return True

    def _pop(self, count: int) -> None:
        for _ in range(count):
            self.consume_one()


__all__ = ["SimulatedHost", "MemoryOptions", "DEFAULT_OPTIONS"]
