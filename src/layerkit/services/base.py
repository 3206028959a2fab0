"""Layer — the composition root every command object extends.

A Layer declares its inputs and observers in the class body, is constructed
with input values (plus an optional listener and callback-name overrides),
and reports its outcome from ``invoke()`` through ``_success`` /
``_failure``. Each report notifies the registered observers first, then
calls the resolved method on the listener.

Construction order is fixed: listener, callback names, then input binding.
Input errors abort construction.
"""

from __future__ import annotations

import functools
import inspect
import types
from collections.abc import Callable
from functools import cached_property
from typing import Any

from layerkit.domain.callbacks import CallbackRouter, ResolvedCallbacks
from layerkit.domain.definition import LayerDefinition, build_definition, get_definition
from layerkit.domain.errors import UnimplementedInvoke
from layerkit.domain.inputs import InputBinder
from layerkit.domain.listeners import NullListener
from layerkit.domain.observers import LayerEvent, LogSink, ObserverDispatcher, ObserverRegistry
from layerkit.domain.validations import Validatable

# Keyword arguments Layer.__init__ takes for itself; never inputs.
CONSTRUCTOR_KEYWORDS: tuple[str, ...] = ("listener", "on_failure", "on_success")

# Set on every instance by Layer.__init__.
INSTANCE_ATTRIBUTES: tuple[str, ...] = ("listener", "inputs", "_definition", "_callbacks")


class invocable:  # noqa: N801
    """Descriptor for ``invoke``.

    On an instance it is the ordinary bound method. On the class it
    constructs an instance from the given arguments and invokes it, so
    ``Type.invoke(**kw)`` is ``Type(**kw).invoke()``.
    """

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        functools.update_wrapper(self, func)

    def __get__(self, instance: object | None, owner: type | None = None) -> Callable[..., Any]:
        if instance is None:
            assert owner is not None
            cls = owner

            @functools.wraps(self.func)
            def construct_and_invoke(*args: Any, **kwargs: Any) -> Any:
                return cls(*args, **kwargs).invoke()

            return construct_and_invoke
        return types.MethodType(self.func, instance)


class Layer(Validatable):
    """Base class for single-purpose units of business logic.

    Usage::

        class PublishPost(Layer):
            required = ("post",)
            optional_with_default = {"notify": True}
            observers = {"success": ("clear_cache",)}

            def invoke(self):
                if not self.post.ready:
                    return self._failure("post is not ready")
                self.post.publish()
                return self._success(self.post)

        PublishPost.invoke(post=post, listener=controller)

    On the class, ``invoke`` constructs an instance and invokes it, so an
    override that extends a parent's ``invoke`` must call
    ``super().invoke()``; ``Parent.invoke(self)`` would build a new Parent.

    Input names may not reuse a Layer attribute (``listener``, ``inputs``,
    ``on_success``, ``validate`` and so on); declaring one raises
    ``TypeError`` when the class is created.
    """

    # Receives observer failures; None means the observers module logger.
    # Set on a subclass or on a single instance.
    log_sink: LogSink | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        build_definition(cls, reserved=INSTANCE_ATTRIBUTES)
        invoke = cls.__dict__.get("invoke")
        if inspect.isfunction(invoke):
            cls.invoke = invocable(invoke)  # type: ignore[method-assign]

    def __init__(
        self,
        *,
        listener: Any = None,
        on_failure: str | None = None,
        on_success: str | None = None,
        **inputs: Any,
    ) -> None:
        self._definition: LayerDefinition = get_definition(type(self))
        self.listener = listener if listener is not None else NullListener()
        self._callbacks: ResolvedCallbacks = CallbackRouter(self._definition.callbacks).resolve(
            on_failure=on_failure,
            on_success=on_success,
        )
        self.inputs: dict[str, Any] = InputBinder(self._definition.inputs).bind(self, inputs)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.inputs.items())
        return f"{type(self).__qualname__}({args})"

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @invocable
    def invoke(self) -> Any:
        """Run the business logic. Every concrete Layer must override this."""
        raise UnimplementedInvoke(type(self))

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    @property
    def on_failure(self) -> str:
        """Listener method called by ``_failure``."""
        return self._callbacks.on_failure

    @property
    def on_success(self) -> str:
        """Listener method called by ``_success``."""
        return self._callbacks.on_success

    @property
    def on_failure_default(self) -> str:
        return self._definition.callbacks.on_failure

    @property
    def on_success_default(self) -> str:
        return self._definition.callbacks.on_success

    def _failure(self, *args: Any, **kwargs: Any) -> Any:
        self.notify_observers(of_event=LayerEvent.FAILURE)
        return CallbackRouter.invoke(self.listener, self.on_failure, *args, **kwargs)

    def _success(self, *args: Any, **kwargs: Any) -> Any:
        self.notify_observers(of_event=LayerEvent.SUCCESS)
        return CallbackRouter.invoke(self.listener, self.on_success, *args, **kwargs)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @property
    def observer_registry(self) -> ObserverRegistry:
        return self._definition.observers

    def notify_observers(self, of_event: str = LayerEvent.SUCCESS) -> None:
        """Run the observers registered for *of_event*; never raises."""
        ObserverDispatcher(self.observer_registry, self, log_sink=self.log_sink).notify(of_event)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @cached_property
    def attributes(self) -> dict[str, Any]:
        """Required then optional inputs with their values when first read."""
        return {**self.required_attributes, **self.optional_attributes}

    @cached_property
    def required_attributes(self) -> dict[str, Any]:
        return InputBinder.attributes_of(self, self._definition.inputs.required)

    @cached_property
    def optional_attributes(self) -> dict[str, Any]:
        return InputBinder.attributes_of(self, self._definition.inputs.optional)
