"""LayerResult and ResultError — the envelope a recorded outcome lands in.

The CLI records every ``run`` through a :class:`ResultListener
<layerkit.services.recorder.ResultListener>` and renders the resulting
LayerResult in human or JSON form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_serializer
from pydantic_core import to_jsonable_python


def _jsonable(value: Any) -> Any:
    # Layers report arbitrary objects; JSON shows what it cannot encode by repr.
    return to_jsonable_python(value, fallback=repr)


class ResultError(BaseModel):
    """Structured error payload within a LayerResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("detail", when_used="json")
    def serialize_detail(self, detail: dict[str, Any]) -> Any:
        return _jsonable(detail)


class LayerResult(BaseModel):
    """Outcome of one Layer invocation (or one CLI operation).

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (usually the Layer type name).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (callback names, validation, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ResultError | None = None
    meta: dict[str, Any] | None = None

    @field_serializer("data", "meta", when_used="json")
    def serialize_payload(self, value: dict[str, Any] | None) -> Any:
        return _jsonable(value)
