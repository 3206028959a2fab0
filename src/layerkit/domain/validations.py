"""Field-level validation slot.

Rules are instance methods marked with :func:`validator`; each returns an
error message, or ``None`` when the instance passes. Plugin-provided rules
arrive through a pluggy hook relay passed to :meth:`Validatable.validate`.

Validation is opt-in: it never runs during construction and never touches
the input accessors.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

_VALIDATOR_MARKER = "__layerkit_validator__"


@dataclass(frozen=True)
class ValidationResult:
    """Result of running every validation rule against one instance."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def validator[F: Callable[..., Any]](func: F) -> F:
    """Mark an instance method as a validation rule."""
    setattr(func, _VALIDATOR_MARKER, True)
    return func


def _rule_names(cls: type) -> list[str]:
    """Names of marked rules, base classes first, overrides collapsed."""
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if getattr(value, _VALIDATOR_MARKER, False):
                names[name] = None
            elif name in names:
                # overridden without the marker
                del names[name]
    return list(names)


class Validatable:
    """Mixin exposing ``validate()`` and ``is_valid()``."""

    def validate(self, plugins: Any | None = None) -> ValidationResult:
        """Run class rules, then plugin rules from *plugins* (a pluggy hook holder)."""
        errors: list[str] = []
        for name in _rule_names(type(self)):
            message = getattr(self, name)()
            if message:
                errors.append(message)

        if plugins is not None:
            for messages in plugins.hook.validate_layer(layer=self):
                errors.extend(m for m in messages or () if m)

        return ValidationResult(valid=not errors, errors=errors)

    def is_valid(self, plugins: Any | None = None) -> bool:
        return self.validate(plugins).valid
