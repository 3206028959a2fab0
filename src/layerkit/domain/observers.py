"""Observer registration and dispatch.

Observers are hooks that run before the listener hears about an outcome.
An observer spec is either the name of a method on the Layer instance or a
callable taking no arguments.

INVARIANT: no exception escapes ``ObserverDispatcher.notify``.

The whole dispatch loop sits inside one failure boundary: the first observer
that raises stops the remaining observers for that notification. The error
is handed to the type's exception handler (if any) and always logged.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Protocol

from layerkit.domain.errors import HandlerNotFound

logger = logging.getLogger(__name__)


class LayerEvent(StrEnum):
    """Events observers can subscribe to."""

    SUCCESS = "success"
    FAILURE = "failure"


class LogSink(Protocol):
    """Where observer failures are reported."""

    def warning(self, msg: str, /, *args: Any, **kwargs: Any) -> Any: ...

    def debug(self, msg: str, /, *args: Any, **kwargs: Any) -> Any: ...


@dataclass(frozen=True)
class ObserverSpec:
    """A registered observer: a method name or a zero-argument callable."""

    method_name: str | None = None
    handle: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if (self.method_name is None) == (self.handle is None):
            msg = "ObserverSpec takes exactly one of method_name or handle"
            raise TypeError(msg)

    @classmethod
    def of(cls, observer: str | Callable[[], Any] | ObserverSpec) -> ObserverSpec:
        if isinstance(observer, ObserverSpec):
            return observer
        if isinstance(observer, str):
            return cls(method_name=observer)
        if callable(observer):
            return cls(handle=observer)
        msg = f"Observer must be a method name or a callable, got {observer!r}"
        raise TypeError(msg)

    @property
    def label(self) -> str:
        if self.method_name is not None:
            return self.method_name
        return getattr(self.handle, "__qualname__", repr(self.handle))

    def resolve(self, instance: object) -> Callable[[], Any]:
        """Return the zero-argument callable this spec stands for on *instance*."""
        if self.handle is not None:
            return self.handle
        assert self.method_name is not None
        method = getattr(instance, self.method_name, None)
        if not callable(method):
            raise HandlerNotFound(instance, self.method_name)
        return method


@dataclass(frozen=True)
class ObserverRegistry:
    """Read-only mapping of event name to observer specs, in registration order."""

    observers: Mapping[str, tuple[ObserverSpec, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    exception_handler: str | None = None

    def for_event(self, event: str) -> tuple[ObserverSpec, ...]:
        return self.observers.get(str(event), ())

    def builder(self) -> ObserverRegistryBuilder:
        """Start a builder seeded with this registry (used for subclassing)."""
        builder = ObserverRegistryBuilder(exception_handler=self.exception_handler)
        for event, specs in self.observers.items():
            builder.observer(*specs, of_event=event)
        return builder


class ObserverRegistryBuilder:
    """Accumulates observer declarations with set semantics."""

    def __init__(self, *, exception_handler: str | None = None) -> None:
        self._observers: dict[str, dict[ObserverSpec, None]] = {}
        self._exception_handler = exception_handler

    def observer(
        self,
        *observers: str | Callable[[], Any] | ObserverSpec,
        of_event: str = LayerEvent.SUCCESS,
    ) -> ObserverRegistryBuilder:
        specs = self._observers.setdefault(str(of_event), {})
        for observer in observers:
            specs[ObserverSpec.of(observer)] = None
        return self

    def observer_exception_handler(self, method_name: str | None) -> ObserverRegistryBuilder:
        self._exception_handler = method_name
        return self

    def build(self) -> ObserverRegistry:
        return ObserverRegistry(
            observers=MappingProxyType(
                {event: tuple(specs) for event, specs in self._observers.items()}
            ),
            exception_handler=self._exception_handler,
        )


class ObserverDispatcher:
    """Notifies the observers registered for an event on one Layer instance."""

    def __init__(
        self,
        registry: ObserverRegistry,
        instance: object,
        *,
        log_sink: LogSink | None = None,
    ) -> None:
        self._registry = registry
        self._instance = instance
        self._log_sink: LogSink = log_sink if log_sink is not None else logger

    def notify(self, of_event: str = LayerEvent.SUCCESS) -> None:
        try:
            for spec in self._registry.for_event(of_event):
                spec.resolve(self._instance)()
        except Exception as exc:
            self.handle_exception(exc)

    def handle_exception(self, exc: Exception) -> None:
        """Forward *exc* to the configured handler, then log it."""
        type_name = type(self._instance).__qualname__
        name = self._registry.exception_handler
        if name:
            try:
                self._call_exception_handler(name, exc)
            except Exception as handler_exc:
                self._log_sink.warning(
                    f"{type_name} observer exception handler {name} failed with {handler_exc}"
                )

        self._log_sink.warning(f"{type_name} observers failed with {exc}")
        trace = self._format_trace(exc)
        if trace:
            self._log_sink.debug(trace)

    def _call_exception_handler(self, name: str, exc: Exception) -> None:
        handler = getattr(self._instance, name, None)
        if not callable(handler):
            raise HandlerNotFound(self._instance, name)
        handler(exc)

    @staticmethod
    def _format_trace(exc: BaseException) -> str:
        if exc.__traceback__ is None:
            return ""
        return "".join(traceback.format_tb(exc.__traceback__)).rstrip("\n")


def merge_observer_declarations(
    builder: ObserverRegistryBuilder,
    declared: Mapping[str, Iterable[str | Callable[[], Any]]],
) -> ObserverRegistryBuilder:
    """Apply an ``observers = {event: (...)}`` class declaration to *builder*."""
    for event, observers in declared.items():
        if isinstance(observers, str) or callable(observers):
            observers = (observers,)
        builder.observer(*observers, of_event=event)
    return builder
