"""Input declarations and the construction-time binder.

A Layer type declares which named inputs it accepts:

- ``required``: must be present in the constructor keywords.
- ``optional``: may be present.
- ``optional_with_default``: optional, with a value injected when absent.

Declarations are accumulated by :class:`InputSchemaBuilder` while the class
statement runs and frozen into an :class:`InputSchema` once the class exists.
:class:`InputBinder` reconciles a supplied mapping against the schema when an
instance is constructed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from layerkit.domain.errors import MissingRequiredInputs, UnexpectedInputs


@dataclass(frozen=True)
class InputSpec:
    """One declared input."""

    name: str
    required: bool
    has_default: bool = False
    default_value: Any = None


@dataclass(frozen=True)
class InputSchema:
    """Read-only registry of the inputs a Layer type accepts.

    Name order follows declaration order; ``defaults`` only ever holds
    optional names.
    """

    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def all_inputs(self) -> tuple[str, ...]:
        """Required names followed by optional names, deduplicated."""
        return tuple(dict.fromkeys((*self.required, *self.optional)))

    def specs(self) -> tuple[InputSpec, ...]:
        """Every declared input as an :class:`InputSpec`."""
        result = [InputSpec(name=name, required=True) for name in self.required]
        for name in self.optional:
            has_default = name in self.defaults
            result.append(
                InputSpec(
                    name=name,
                    required=False,
                    has_default=has_default,
                    default_value=self.defaults.get(name),
                )
            )
        return tuple(result)

    def builder(self) -> InputSchemaBuilder:
        """Start a builder seeded with this schema (used for subclassing)."""
        return InputSchemaBuilder(
            required=self.required,
            optional=self.optional,
            defaults=self.defaults,
        )


class InputSchemaBuilder:
    """Accumulates input declarations with set semantics.

    Re-declaring a name is a no-op merge, never an error.
    """

    def __init__(
        self,
        *,
        required: Iterable[str] = (),
        optional: Iterable[str] = (),
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        # dicts as insertion-ordered sets
        self._required: dict[str, None] = dict.fromkeys(required)
        self._optional: dict[str, None] = dict.fromkeys(optional)
        self._defaults: dict[str, Any] = dict(defaults or {})

    def declare_required(self, *names: str) -> InputSchemaBuilder:
        for name in names:
            self._required[name] = None
        return self

    def declare_optional(self, *names: str) -> InputSchemaBuilder:
        for name in names:
            self._optional[name] = None
        return self

    def declare_optional_with_default(self, **pairs: Any) -> InputSchemaBuilder:
        for name, value in pairs.items():
            self.declare_optional(name)
            self._defaults[name] = value
        return self

    def build(self) -> InputSchema:
        return InputSchema(
            required=tuple(self._required),
            optional=tuple(self._optional),
            defaults=MappingProxyType(dict(self._defaults)),
        )


class InputField:
    """Per-instance slot for one declared input.

    Reads return ``None`` until the slot is set.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name)

    def __set__(self, instance: object, value: Any) -> None:
        instance.__dict__[self.name] = value

    def __repr__(self) -> str:
        return f"InputField({self.name!r})"


_UNSET = object()


def install_input_fields(cls: type, schema: InputSchema, reserved: Iterable[str] = ()) -> None:
    """Give *cls* an :class:`InputField` for every declared input name.

    Raises:
        TypeError: an input name is in *reserved* or is already taken by a
            class attribute that is not an input slot.
    """
    taken = frozenset(reserved)
    for name in schema.all_inputs():
        existing = next(
            (k.__dict__[name] for k in cls.__mro__ if name in k.__dict__), _UNSET
        )
        if isinstance(existing, InputField):
            continue
        if name in taken or existing is not _UNSET:
            raise TypeError(
                f"{cls.__qualname__} cannot declare input {name!r}: the name is taken by the class"
            )
        setattr(cls, name, InputField(name))


class InputBinder:
    """Validates a supplied mapping against a schema and binds it to an instance.

    Checks run in a fixed order on the post-default mapping: required
    presence first, then undeclared keys.
    """

    def __init__(self, schema: InputSchema) -> None:
        self._schema = schema

    def bind(self, instance: object, supplied: Mapping[str, Any]) -> dict[str, Any]:
        """Return the reconciled input mapping after setting each slot on *instance*.

        Raises:
            MissingRequiredInputs: a required name is absent.
            UnexpectedInputs: a supplied name was never declared.
        """
        inputs = dict(supplied)
        self._inject_defaults(inputs)

        missing = self.missing_inputs(inputs)
        if missing:
            raise MissingRequiredInputs(missing)

        extra = self.extra_inputs(inputs)
        if extra:
            raise UnexpectedInputs(extra)

        for name, value in inputs.items():
            setattr(instance, name, value)
        return inputs

    def missing_inputs(self, inputs: Mapping[str, Any]) -> list[str]:
        return [name for name in self._schema.required if name not in inputs]

    def extra_inputs(self, inputs: Mapping[str, Any]) -> list[str]:
        declared = set(self._schema.all_inputs())
        return [name for name in inputs if name not in declared]

    def _inject_defaults(self, inputs: dict[str, Any]) -> None:
        # The declared object itself is bound. A key that is present wins,
        # even when its value is None.
        for name, value in self._schema.defaults.items():
            if name not in inputs:
                inputs[name] = value

    @staticmethod
    def attributes_of(instance: object, names: Iterable[str]) -> dict[str, Any]:
        """Current slot values for *names* on *instance*."""
        return {name: getattr(instance, name) for name in names}
