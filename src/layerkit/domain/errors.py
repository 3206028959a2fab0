"""Error taxonomy surfaced to callers of a Layer.

Input errors are raised during construction and always propagate.
``UnimplementedInvoke`` is a programming error. ``HandlerNotFound`` is
raised when a symbolic name does not resolve to a callable; on the observer
path it is isolated like any other observer failure.
"""

from __future__ import annotations

from collections.abc import Iterable


class LayerError(Exception):
    """Base class for all layerkit errors."""

    code: str = "LAYER_ERROR"


class InputError(LayerError, TypeError):
    """Construction received inputs that do not match the declared schema."""

    code = "INPUT_ERROR"
    prefix = "Invalid inputs"

    def __init__(self, names: Iterable[str]) -> None:
        self.names: tuple[str, ...] = tuple(names)
        super().__init__(f"{self.prefix}: {', '.join(self.names)}")


class MissingRequiredInputs(InputError):
    """One or more required inputs were not supplied."""

    code = "MISSING_INPUTS"
    prefix = "Missing required inputs"

    @property
    def missing(self) -> tuple[str, ...]:
        return self.names


class UnexpectedInputs(InputError):
    """Inputs were supplied that the type never declared."""

    code = "UNEXPECTED_INPUTS"
    prefix = "Undeclared inputs"

    @property
    def extra(self) -> tuple[str, ...]:
        return self.names


class UnimplementedInvoke(LayerError, NotImplementedError):
    """A concrete Layer did not override ``invoke()``."""

    code = "UNIMPLEMENTED"

    def __init__(self, layer_type: type) -> None:
        self.layer_type = layer_type
        super().__init__(f"{layer_type.__qualname__} must implement invoke()")


class HandlerNotFound(LayerError, AttributeError):
    """A symbolic handler name did not resolve to a callable on its target."""

    code = "HANDLER_NOT_FOUND"

    def __init__(self, target: object, name: str) -> None:
        self.target = target
        self.name = name
        super().__init__(f"{type(target).__qualname__} has no callable {name!r}")
