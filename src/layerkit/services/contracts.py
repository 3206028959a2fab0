"""Typed payload contracts for results leaving the service layer.

These models validate payload shapes before they are rendered so key
regressions fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class InputDescription(BaseModel):
    """One declared input of a Layer type."""

    name: str
    required: bool
    has_default: bool = False
    default: Any = None


class DescribeResultData(BaseModel):
    """Payload contract for the ``describe`` operation."""

    model_config = ConfigDict(extra="forbid")

    layer: str
    inputs: list[InputDescription]
    callbacks: dict[str, str]
    observers: dict[str, list[str]] = Field(default_factory=dict)
    observer_exception_handler: str | None = None


class RunResultMeta(BaseModel):
    """Meta block attached to ``run`` results."""

    layer: str
    on_success: str
    on_failure: str
    validated: bool = False
