"""Callback-name resolution for listener reports.

Resolution order, applied once per instance at construction:

1. The explicit ``on_failure`` / ``on_success`` constructor argument.
2. The type's ``default_callbacks`` declaration.
3. The library constants :data:`ON_FAILURE_DEFAULT_CALLBACK` and
   :data:`ON_SUCCESS_DEFAULT_CALLBACK`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from layerkit.domain.errors import HandlerNotFound

ON_FAILURE_DEFAULT_CALLBACK = "on_failure"
ON_SUCCESS_DEFAULT_CALLBACK = "on_success"


class CallbackConfig(BaseModel):
    """Per-type default callback names."""

    model_config = {"frozen": True}

    on_failure: str = ON_FAILURE_DEFAULT_CALLBACK
    on_success: str = ON_SUCCESS_DEFAULT_CALLBACK

    @classmethod
    def from_declaration(cls, declared: Mapping[str, str | None]) -> CallbackConfig:
        """Build from a ``default_callbacks`` mapping; missing or None fields use the constants."""
        unknown = set(declared) - {"on_failure", "on_success"}
        if unknown:
            msg = f"default_callbacks accepts on_failure and on_success, got {sorted(unknown)}"
            raise TypeError(msg)
        return cls(**{key: value for key, value in declared.items() if value})


class ResolvedCallbacks(BaseModel):
    """The two listener method names an instance reports to."""

    model_config = {"frozen": True}

    on_failure: str
    on_success: str


class CallbackRouter:
    """Resolves effective callback names and invokes them on a listener."""

    def __init__(self, config: CallbackConfig) -> None:
        self._config = config

    @property
    def config(self) -> CallbackConfig:
        return self._config

    def resolve(
        self,
        *,
        on_failure: str | None = None,
        on_success: str | None = None,
    ) -> ResolvedCallbacks:
        return ResolvedCallbacks(
            on_failure=on_failure or self._config.on_failure,
            on_success=on_success or self._config.on_success,
        )

    @staticmethod
    def invoke(listener: Any, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call ``listener.<name>(*args, **kwargs)``; errors it raises propagate.

        Raises:
            HandlerNotFound: the listener has no callable by that name.
        """
        method = getattr(listener, name, None)
        if not callable(method):
            raise HandlerNotFound(listener, name)
        return method(*args, **kwargs)
