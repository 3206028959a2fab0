"""The no-op default listener.

A listener is any object that receives outcome reports by method name; the
names are chosen per Layer type (``on_success`` and ``on_failure`` unless
overridden), so there is no fixed interface to inherit from.
"""

from __future__ import annotations

from typing import Any


def _null_method(*_args: Any, **_kwargs: Any) -> None:
    return None


class NullListener:
    """Listener that accepts any method call and returns ``None``.

    Used when a Layer is constructed without a listener. Dunder lookups are
    not intercepted, so copying, pickling and ``repr`` behave normally.
    """

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        return _null_method

    def __call__(self, *_args: Any, **_kwargs: Any) -> None:
        return None

    def __repr__(self) -> str:
        return "NullListener()"
