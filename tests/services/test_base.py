"""Tests for the Layer composition root."""

from typing import Any
from unittest.mock import Mock

import pytest

from layerkit import (
    HandlerNotFound,
    Layer,
    MissingRequiredInputs,
    NullListener,
    UnexpectedInputs,
    UnimplementedInvoke,
)

EVENTS: list[str] = []


class ABC(Layer):
    required = ("a", "b")
    optional = ("c",)

    def invoke(self) -> Any:
        return self._success(self.a + self.b)


class WithDefault(Layer):
    optional_with_default = {"c": 5}


class Watched(Layer):
    """Records observer and listener activity in EVENTS."""

    optional = ("fail",)
    observers = {"success": ("obs1", "obs2"), "failure": ("on_fail",)}

    def invoke(self) -> Any:
        if self.fail:
            return self._failure("went wrong", reason=self.fail)
        return self._success("done", count=1)

    def obs1(self) -> None:
        EVENTS.append("obs1")
        raise RuntimeError("obs1 exploded")

    def obs2(self) -> None:
        EVENTS.append("obs2")

    def on_fail(self) -> None:
        EVENTS.append("on_fail")


class Handled(Watched):
    observer_exception_handler = "observer_failed"

    def observer_failed(self, exc: Exception) -> None:
        EVENTS.append(f"handled:{exc}")


class Custom(Layer):
    default_callbacks = {"on_failure": "rejected", "on_success": "accepted"}


@pytest.fixture(autouse=True)
def _clear_events():
    EVENTS.clear()
    yield
    EVENTS.clear()


@pytest.fixture
def sink(monkeypatch: pytest.MonkeyPatch) -> Mock:
    sink = Mock(name="log_sink")
    monkeypatch.setattr(Layer, "log_sink", sink)
    return sink


def _recording_listener() -> Mock:
    listener = Mock(name="listener")
    listener.on_success.side_effect = lambda *a, **kw: EVENTS.append("listener:success")
    listener.on_failure.side_effect = lambda *a, **kw: EVENTS.append("listener:failure")
    return listener


class TestConstruction:
    def test_required_and_optional(self) -> None:
        layer = ABC(a=1, b=2)
        assert layer.inputs == {"a": 1, "b": 2}
        assert layer.attributes == {"a": 1, "b": 2, "c": None}
        assert layer.required_attributes == {"a": 1, "b": 2}
        assert layer.optional_attributes == {"c": None}

    def test_missing_required(self) -> None:
        with pytest.raises(MissingRequiredInputs) as excinfo:
            ABC(a=1)
        assert excinfo.value.missing == ("b",)

    def test_unexpected_input(self) -> None:
        with pytest.raises(UnexpectedInputs) as excinfo:
            ABC(a=1, b=2, z=9)
        assert excinfo.value.extra == ("z",)

    def test_default_applied(self) -> None:
        assert WithDefault().attributes["c"] == 5

    def test_explicit_none_kept(self) -> None:
        assert WithDefault(c=None).attributes["c"] is None

    def test_listener_defaults_to_null_listener(self) -> None:
        assert isinstance(ABC(a=1, b=2).listener, NullListener)

    def test_listener_is_shared_not_copied(self, listener: Mock) -> None:
        assert ABC(a=1, b=2, listener=listener).listener is listener

    def test_reserved_keywords_are_not_inputs(self, listener: Mock) -> None:
        layer = ABC(a=1, b=2, listener=listener, on_success="x", on_failure="y")
        assert layer.inputs == {"a": 1, "b": 2}

    def test_callback_override_does_not_affect_input_errors(self) -> None:
        with pytest.raises(MissingRequiredInputs):
            ABC(a=1, on_success="not_a_method_anywhere")

    def test_repr(self) -> None:
        assert repr(ABC(a=1, b=2)) == "ABC(a=1, b=2)"


class TestCallbackResolution:
    def test_library_constants(self) -> None:
        layer = ABC(a=1, b=2)
        assert (layer.on_failure, layer.on_success) == ("on_failure", "on_success")
        assert (layer.on_failure_default, layer.on_success_default) == (
            "on_failure",
            "on_success",
        )

    def test_type_defaults(self) -> None:
        layer = Custom()
        assert (layer.on_failure, layer.on_success) == ("rejected", "accepted")
        assert layer.on_success_default == "accepted"

    def test_explicit_arguments_win(self) -> None:
        layer = Custom(on_success="mine")
        assert layer.on_success == "mine"
        assert layer.on_failure == "rejected"
        assert layer.on_success_default == "accepted"

    def test_resolved_once_at_construction(self) -> None:
        layer = Custom()
        with pytest.raises(AttributeError):
            layer.on_success = "changed"  # type: ignore[misc]
        assert layer.on_success == "accepted"


class TestInvoke:
    def test_base_invoke_is_unimplemented(self) -> None:
        class Pending(Layer):
            pass

        with pytest.raises(UnimplementedInvoke):
            Pending().invoke()
        with pytest.raises(NotImplementedError):
            Pending.invoke()

    def test_class_invoke_constructs_then_invokes(self, listener: Mock) -> None:
        assert ABC.invoke(a=1, b=2, listener=listener) is listener.on_success.return_value
        listener.on_success.assert_called_once_with(3)

    def test_class_invoke_matches_instance_invoke(self) -> None:
        first, second = Mock(), Mock()
        ABC.invoke(a=2, b=3, listener=first, on_success="added")
        ABC(a=2, b=3, listener=second, on_success="added").invoke()
        assert first.mock_calls == second.mock_calls

    def test_class_invoke_propagates_input_errors(self) -> None:
        with pytest.raises(MissingRequiredInputs):
            ABC.invoke(a=1)

    def test_invoke_keeps_its_name(self) -> None:
        assert ABC.invoke.__name__ == "invoke"

    def test_subclass_inherits_class_invoke(self, listener: Mock) -> None:
        class Sum(ABC):
            pass

        Sum.invoke(a=1, b=1, listener=listener)
        listener.on_success.assert_called_once_with(2)

    def test_override_extends_parent_with_super(self, listener: Mock) -> None:
        class LoggedSum(ABC):
            def invoke(self) -> Any:
                EVENTS.append("before")
                return super().invoke()

        LoggedSum.invoke(a=2, b=2, listener=listener)
        assert EVENTS == ["before"]
        listener.on_success.assert_called_once_with(4)

    def test_parent_invoke_on_the_class_builds_a_new_instance(self) -> None:
        layer = ABC(a=1, b=2)
        with pytest.raises(TypeError):
            ABC.invoke(layer)


class TestReporting:
    def test_success_forwards_arguments(self, sink: Mock) -> None:
        listener = Mock()
        Watched(listener=listener).invoke()
        listener.on_success.assert_called_once_with("done", count=1)
        listener.on_failure.assert_not_called()

    def test_failure_forwards_arguments(self, sink: Mock) -> None:
        listener = Mock()
        Watched(listener=listener, fail="bad").invoke()
        listener.on_failure.assert_called_once_with("went wrong", reason="bad")

    def test_returns_listener_result(self) -> None:
        listener = Mock()
        listener.on_success.return_value = "ack"
        assert ABC(a=1, b=1, listener=listener).invoke() == "ack"

    def test_null_listener_returns_none(self) -> None:
        assert ABC.invoke(a=1, b=1) is None

    def test_observers_run_before_listener(self, sink: Mock) -> None:
        Watched(listener=_recording_listener(), fail="x").invoke()
        assert EVENTS == ["on_fail", "listener:failure"]

    def test_failing_observer_does_not_block_listener(self, sink: Mock) -> None:
        Watched(listener=_recording_listener()).invoke()
        assert EVENTS == ["obs1", "listener:success"]
        sink.warning.assert_called_once_with("Watched observers failed with obs1 exploded")
        sink.debug.assert_called_once()

    def test_exception_handler_receives_error(self, sink: Mock) -> None:
        Handled(listener=_recording_listener()).invoke()
        assert EVENTS == ["obs1", "handled:obs1 exploded", "listener:success"]
        sink.warning.assert_called_once_with("Handled observers failed with obs1 exploded")

    def test_custom_callback_names(self) -> None:
        listener = Mock()
        ABC(a=1, b=1, listener=listener, on_success="added").invoke()
        listener.added.assert_called_once_with(2)
        listener.on_success.assert_not_called()

    def test_missing_listener_method(self) -> None:
        class Bare:
            pass

        with pytest.raises(HandlerNotFound):
            ABC(a=1, b=1, listener=Bare()).invoke()

    def test_listener_errors_propagate(self) -> None:
        listener = Mock()
        listener.on_success.side_effect = ValueError("listener failed")
        with pytest.raises(ValueError, match="listener failed"):
            ABC(a=1, b=1, listener=listener).invoke()


class TestObserverAccess:
    def test_registry(self) -> None:
        registry = Watched().observer_registry
        assert [s.label for s in registry.for_event("success")] == ["obs1", "obs2"]

    def test_notify_observers_never_raises(self, sink: Mock) -> None:
        Watched().notify_observers()
        assert EVENTS == ["obs1"]

    def test_notify_unknown_event_is_a_noop(self, sink: Mock) -> None:
        Watched().notify_observers("archived")
        assert EVENTS == []
        sink.warning.assert_not_called()

    def test_default_log_sink_is_module_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="layerkit.domain.observers"):
            Watched().notify_observers()
        assert "Watched observers failed with obs1 exploded" in caplog.text


class TestAttributeAccessors:
    def test_setter_updates_slot(self) -> None:
        layer = ABC(a=1, b=2)
        layer.c = 7
        assert layer.c == 7

    def test_attributes_snapshot_taken_on_first_read(self) -> None:
        layer = ABC(a=1, b=2)
        assert layer.attributes["c"] is None
        layer.c = 7
        assert layer.attributes["c"] is None

    def test_validation_does_not_touch_accessors(self) -> None:
        layer = ABC(a=1, b=2)
        assert layer.validate().valid
        assert layer.a == 1
