"""Tests for observer registration and ObserverDispatcher."""

import logging
from unittest.mock import Mock

import pytest

from layerkit import HandlerNotFound
from layerkit.domain.observers import (
    LayerEvent,
    ObserverDispatcher,
    ObserverRegistry,
    ObserverRegistryBuilder,
    ObserverSpec,
    merge_observer_declarations,
)


def _handle() -> None:
    pass


class Subject:
    """Owns the method observers used by dispatcher tests."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.handled: list[Exception] = []

    def s1(self) -> None:
        self.calls.append("s1")

    def s2(self) -> None:
        self.calls.append("s2")
        raise ValueError("boom")

    def s3(self) -> None:
        self.calls.append("s3")

    def f1(self) -> None:
        self.calls.append("f1")

    def on_observer_error(self, exc: Exception) -> None:
        self.handled.append(exc)

    def broken_handler(self, exc: Exception) -> None:
        raise RuntimeError("handler broke")


class TestObserverSpec:
    def test_of_method_name(self) -> None:
        spec = ObserverSpec.of("s1")
        assert spec.method_name == "s1"
        assert spec.label == "s1"

    def test_of_callable(self) -> None:
        spec = ObserverSpec.of(_handle)
        assert spec.handle is _handle
        assert spec.label == "_handle"

    def test_of_rejects_other_values(self) -> None:
        with pytest.raises(TypeError):
            ObserverSpec.of(42)  # type: ignore[arg-type]

    def test_needs_exactly_one_form(self) -> None:
        with pytest.raises(TypeError):
            ObserverSpec()
        with pytest.raises(TypeError):
            ObserverSpec(method_name="s1", handle=_handle)

    def test_resolve_missing_method(self) -> None:
        with pytest.raises(HandlerNotFound):
            ObserverSpec.of("nope").resolve(Subject())


class TestObserverRegistryBuilder:
    def test_default_event_is_success(self) -> None:
        registry = ObserverRegistryBuilder().observer("s1").build()
        assert registry.for_event("success") == (ObserverSpec.of("s1"),)
        assert registry.for_event("failure") == ()

    def test_registration_order_and_set_semantics(self) -> None:
        registry = (
            ObserverRegistryBuilder()
            .observer("s1", "s3", of_event=LayerEvent.SUCCESS)
            .observer("s1", _handle)
            .build()
        )
        labels = [spec.label for spec in registry.for_event("success")]
        assert labels == ["s1", "s3", "_handle"]

    def test_arbitrary_event_names(self) -> None:
        registry = ObserverRegistryBuilder().observer("s1", of_event="archived").build()
        assert registry.for_event("archived") == (ObserverSpec.of("s1"),)

    def test_exception_handler(self) -> None:
        registry = ObserverRegistryBuilder().observer_exception_handler("on_observer_error").build()
        assert registry.exception_handler == "on_observer_error"

    def test_registry_builder_round_trip(self) -> None:
        registry = (
            ObserverRegistryBuilder(exception_handler="h")
            .observer("s1")
            .observer("f1", of_event="failure")
            .build()
        )
        extended = registry.builder().observer("s3").build()
        assert [s.label for s in extended.for_event("success")] == ["s1", "s3"]
        assert [s.label for s in extended.for_event("failure")] == ["f1"]
        assert extended.exception_handler == "h"
        assert [s.label for s in registry.for_event("success")] == ["s1"]

    def test_merge_accepts_single_name(self) -> None:
        builder = merge_observer_declarations(
            ObserverRegistryBuilder(), {"success": "s1", "failure": ("f1", _handle)}
        )
        registry = builder.build()
        assert [s.label for s in registry.for_event("success")] == ["s1"]
        assert [s.label for s in registry.for_event("failure")] == ["f1", "_handle"]


class TestObserverDispatcher:
    def _dispatcher(
        self, registry: ObserverRegistry, subject: Subject, sink: Mock | None = None
    ) -> ObserverDispatcher:
        return ObserverDispatcher(registry, subject, log_sink=sink)

    def test_runs_observers_in_order(self) -> None:
        subject = Subject()
        registry = ObserverRegistryBuilder().observer("s1", "s3").build()
        self._dispatcher(registry, subject).notify("success")
        assert subject.calls == ["s1", "s3"]

    def test_only_the_requested_event(self) -> None:
        subject = Subject()
        registry = (
            ObserverRegistryBuilder().observer("s1").observer("f1", of_event="failure").build()
        )
        self._dispatcher(registry, subject).notify("failure")
        assert subject.calls == ["f1"]

    def test_no_observers_is_a_noop(self) -> None:
        sink = Mock()
        self._dispatcher(ObserverRegistry(), Subject(), sink).notify("success")
        sink.warning.assert_not_called()

    def test_callable_observer_takes_no_arguments(self) -> None:
        handle = Mock()
        registry = ObserverRegistryBuilder().observer(handle).build()
        self._dispatcher(registry, Subject()).notify()
        handle.assert_called_once_with()

    def test_first_failure_stops_remaining_observers(self) -> None:
        subject = Subject()
        sink = Mock()
        registry = ObserverRegistryBuilder().observer("s1", "s2", "s3").build()
        self._dispatcher(registry, subject, sink).notify("success")
        assert subject.calls == ["s1", "s2"]
        sink.warning.assert_called_once_with("Subject observers failed with boom")

    def test_traceback_logged_at_debug(self) -> None:
        sink = Mock()
        registry = ObserverRegistryBuilder().observer("s2").build()
        self._dispatcher(registry, Subject(), sink).notify()
        sink.debug.assert_called_once()
        assert "raise ValueError" in sink.debug.call_args.args[0]

    def test_exception_handler_receives_the_exception(self) -> None:
        subject = Subject()
        sink = Mock()
        registry = (
            ObserverRegistryBuilder()
            .observer("s2")
            .observer_exception_handler("on_observer_error")
            .build()
        )
        self._dispatcher(registry, subject, sink).notify()
        assert len(subject.handled) == 1
        assert isinstance(subject.handled[0], ValueError)
        assert str(subject.handled[0]) == "boom"
        sink.warning.assert_called_once_with("Subject observers failed with boom")

    def test_missing_observer_method_is_isolated(self) -> None:
        subject = Subject()
        sink = Mock()
        registry = ObserverRegistryBuilder().observer("gone", "s1").build()
        self._dispatcher(registry, subject, sink).notify()
        assert subject.calls == []
        sink.warning.assert_called_once_with(
            "Subject observers failed with Subject has no callable 'gone'"
        )

    def test_failing_exception_handler_is_logged(self) -> None:
        sink = Mock()
        registry = (
            ObserverRegistryBuilder()
            .observer("s2")
            .observer_exception_handler("broken_handler")
            .build()
        )
        self._dispatcher(registry, Subject(), sink).notify()
        messages = [c.args[0] for c in sink.warning.call_args_list]
        assert messages == [
            "Subject observer exception handler broken_handler failed with handler broke",
            "Subject observers failed with boom",
        ]

    def test_handle_exception_without_traceback_skips_debug(self) -> None:
        sink = Mock()
        dispatcher = self._dispatcher(ObserverRegistry(), Subject(), sink)
        dispatcher.handle_exception(ValueError("never raised"))
        sink.warning.assert_called_once_with("Subject observers failed with never raised")
        sink.debug.assert_not_called()

    def test_defaults_to_module_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = ObserverRegistryBuilder().observer("s2").build()
        with caplog.at_level(logging.DEBUG, logger="layerkit.domain.observers"):
            ObserverDispatcher(registry, Subject()).notify()
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert [r.getMessage() for r in warnings] == ["Subject observers failed with boom"]
        assert any(r.levelno == logging.DEBUG for r in caplog.records)
