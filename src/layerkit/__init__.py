"""layerkit — command objects with declared inputs, observers, and listeners."""

from layerkit.domain.errors import (
    HandlerNotFound,
    InputError,
    LayerError,
    MissingRequiredInputs,
    UnexpectedInputs,
    UnimplementedInvoke,
)
from layerkit.domain.listeners import NullListener
from layerkit.domain.validations import validator
from layerkit.services.base import Layer

__version__ = "0.3.0"

__all__ = [
    "HandlerNotFound",
    "InputError",
    "Layer",
    "LayerError",
    "MissingRequiredInputs",
    "NullListener",
    "UnexpectedInputs",
    "UnimplementedInvoke",
    "__version__",
    "validator",
]
