"""Per-type Layer definitions, built once when the class statement completes.

A Layer subclass declares its contract with plain class attributes::

    class RegisterUser(Layer):
        required = ("email",)
        optional = ("nickname",)
        optional_with_default = {"role": "member"}
        default_callbacks = {"on_failure": "registration_failed"}
        observers = {"success": ("send_welcome",), "failure": (audit.record,)}
        observer_exception_handler = "observer_failed"

:func:`build_definition` reads the attributes declared directly on the class,
merges them into the parent's definition, and freezes the result into a
:class:`LayerDefinition` stored in :data:`DEFINITION_REGISTRY`.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from layerkit.domain.callbacks import CallbackConfig
from layerkit.domain.inputs import InputSchema, install_input_fields
from layerkit.domain.observers import ObserverRegistry, merge_observer_declarations

# Class attributes read by build_definition().
DECLARATION_ATTRIBUTES: tuple[str, ...] = (
    "required",
    "optional",
    "optional_with_default",
    "default_callbacks",
    "observers",
    "observer_exception_handler",
)


@dataclass(frozen=True)
class LayerDefinition:
    """Everything a Layer type declared, frozen."""

    inputs: InputSchema = field(default_factory=InputSchema)
    observers: ObserverRegistry = field(default_factory=ObserverRegistry)
    callbacks: CallbackConfig = field(default_factory=CallbackConfig)


EMPTY_DEFINITION = LayerDefinition()

DEFINITION_REGISTRY: weakref.WeakKeyDictionary[type, LayerDefinition] = (
    weakref.WeakKeyDictionary()
)


def get_definition(cls: type) -> LayerDefinition:
    """Return the definition registered for *cls* or its nearest registered base."""
    for klass in cls.__mro__:
        definition = DEFINITION_REGISTRY.get(klass)
        if definition is not None:
            return definition
    return EMPTY_DEFINITION


def _names(value: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def build_definition(cls: type, reserved: Iterable[str] = ()) -> LayerDefinition:
    """Freeze the declarations on *cls* and register them.

    *reserved* names instance attributes the base class sets itself; no input
    may use them, nor any name already bound on the class.

    Only attributes present in ``cls.__dict__`` count as declarations; the
    parent's definition is the starting point, so inherited declarations are
    never applied twice.
    """
    parent = get_definition(cls.__mro__[1]) if len(cls.__mro__) > 1 else EMPTY_DEFINITION
    own: dict[str, Any] = {
        name: cls.__dict__[name] for name in DECLARATION_ATTRIBUTES if name in cls.__dict__
    }

    inputs = parent.inputs.builder()
    inputs.declare_required(*_names(own.get("required", ())))
    inputs.declare_optional(*_names(own.get("optional", ())))
    inputs.declare_optional_with_default(**dict(own.get("optional_with_default", {})))

    observers = merge_observer_declarations(
        parent.observers.builder(), own.get("observers", {})
    )
    if "observer_exception_handler" in own:
        observers.observer_exception_handler(own["observer_exception_handler"])

    callbacks = parent.callbacks
    if "default_callbacks" in own:
        callbacks = CallbackConfig.from_declaration(own["default_callbacks"] or {})

    definition = LayerDefinition(
        inputs=inputs.build(),
        observers=observers.build(),
        callbacks=callbacks,
    )
    install_input_fields(cls, definition.inputs, reserved)
    DEFINITION_REGISTRY[cls] = definition
    return definition
