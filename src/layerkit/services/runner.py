"""LayerService — describe and run Layer types addressed as ``module:Class``.

INVARIANT: every public method returns a LayerResult; input and lookup
problems become ``ok=False`` results instead of exceptions.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

import structlog

from layerkit.domain.definition import get_definition
from layerkit.domain.errors import InputError, LayerError, UnexpectedInputs
from layerkit.domain.observers import logger as observer_logger
from layerkit.services.base import CONSTRUCTOR_KEYWORDS, Layer
from layerkit.services.contracts import DescribeResultData, RunResultMeta, dump_validated
from layerkit.services.recorder import ResultListener, WarningCollector
from layerkit.services.result import LayerResult, ResultError

if TYPE_CHECKING:
    from layerkit.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class LayerLookupError(LookupError):
    """A ``module:Class`` target could not be resolved to a Layer subclass."""


def load_layer(target: str) -> type[Layer]:
    """Import ``package.module:ClassName`` and return the Layer subclass."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Expected MODULE:CLASS, got {target!r}"
        raise LayerLookupError(msg)
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import {module_name!r}: {exc}"
        raise LayerLookupError(msg) from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            msg = f"{module_name!r} has no attribute {attr_path!r}"
            raise LayerLookupError(msg) from exc
    if not (isinstance(obj, type) and issubclass(obj, Layer)):
        msg = f"{target!r} is not a Layer subclass"
        raise LayerLookupError(msg)
    return obj


_JSON_SCALARS = (str, int, float, bool, type(None))


def _plain(value: Any) -> Any:
    """Keep JSON-friendly defaults as they are; show anything else by repr."""
    if isinstance(value, _JSON_SCALARS):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(v, _JSON_SCALARS) for v in value):
        return list(value)
    if isinstance(value, dict) and all(
        isinstance(k, str) and isinstance(v, _JSON_SCALARS) for k, v in value.items()
    ):
        return dict(value)
    return repr(value)


def _error(op: str, code: str, message: str, **detail: Any) -> LayerResult:
    return LayerResult(
        ok=False,
        op=op,
        error=ResultError(code=code, message=message, detail=detail),
    )


class LayerService:
    """Introspection and one-shot execution of Layer types."""

    def __init__(self, plugins: PluginManager | None = None) -> None:
        self._plugins = plugins

    def describe(self, target: str) -> LayerResult:
        """Report the declarations of the Layer type at *target*."""
        try:
            layer_cls = load_layer(target)
        except LayerLookupError as exc:
            return _error("describe", "TARGET_NOT_FOUND", str(exc), target=target)

        definition = get_definition(layer_cls)
        registry = definition.observers
        data = dump_validated(
            DescribeResultData,
            {
                "layer": layer_cls.__qualname__,
                "inputs": [
                    {
                        "name": spec.name,
                        "required": spec.required,
                        "has_default": spec.has_default,
                        "default": _plain(spec.default_value),
                    }
                    for spec in definition.inputs.specs()
                ],
                "callbacks": definition.callbacks.model_dump(),
                "observers": {
                    event: [spec.label for spec in specs]
                    for event, specs in registry.observers.items()
                },
                "observer_exception_handler": registry.exception_handler,
            },
        )
        return LayerResult(ok=True, op="describe", data=data)

    def run(
        self,
        target: str,
        inputs: dict[str, Any],
        *,
        validate: bool = False,
    ) -> LayerResult:
        """Construct the Layer at *target* with *inputs*, invoke it, and return its report."""
        try:
            layer_cls = load_layer(target)
        except LayerLookupError as exc:
            return _error("run", "TARGET_NOT_FOUND", str(exc), target=target)

        op = layer_cls.__qualname__
        with structlog.contextvars.bound_contextvars(layer=op):
            result = self._run(layer_cls, op, inputs, validate=validate)
        logger.debug("Ran %s: ok=%s", op, result.ok)
        return result

    def _run(
        self,
        layer_cls: type[Layer],
        op: str,
        inputs: dict[str, Any],
        *,
        validate: bool,
    ) -> LayerResult:
        listener = ResultListener(op)
        clashing = [name for name in inputs if name in CONSTRUCTOR_KEYWORDS]
        try:
            if clashing:
                raise UnexpectedInputs(clashing)
            layer = layer_cls(
                listener=listener,
                on_success=ResultListener.success_callback,
                on_failure=ResultListener.failure_callback,
                **inputs,
            )
        except InputError as exc:
            return _error(op, exc.code, str(exc), names=list(exc.names))

        collector = WarningCollector(layer.log_sink or observer_logger)
        layer.log_sink = collector
        meta = RunResultMeta(
            layer=op,
            on_success=layer.on_success,
            on_failure=layer.on_failure,
            validated=validate,
        ).model_dump()

        def finish(result: LayerResult) -> LayerResult:
            return result.model_copy(update={"meta": meta, "warnings": list(collector.messages)})

        if validate:
            validation = layer.validate(self._plugins)
            if not validation.valid:
                return finish(
                    _error(
                        op,
                        "VALIDATION_FAILED",
                        "; ".join(validation.errors),
                        errors=validation.errors,
                    )
                )

        try:
            layer.invoke()
        except LayerError as exc:
            logger.debug("Layer %s raised %s", op, exc, exc_info=True)
            return finish(_error(op, exc.code, str(exc)))

        if listener.result is None:
            return finish(
                _error(op, "NO_OUTCOME", f"{op} returned without reporting an outcome")
            )
        return finish(listener.result)
