"""ResultListener and WarningCollector — record a Layer run as a LayerResult."""

from __future__ import annotations

import logging
from typing import Any

from layerkit.domain.callbacks import ON_FAILURE_DEFAULT_CALLBACK, ON_SUCCESS_DEFAULT_CALLBACK
from layerkit.domain.observers import LogSink
from layerkit.services.result import LayerResult, ResultError

logger = logging.getLogger(__name__)

FAILURE_CODE = "LAYER_FAILURE"


class ResultListener:
    """Listener with ``on_success`` / ``on_failure`` that keeps the last report.

    Positional arguments land under ``data["args"]``; keyword arguments are
    merged into ``data``. For failures, a leading exception or string becomes
    the error message and the rest is kept in the error detail.
    """

    success_callback = ON_SUCCESS_DEFAULT_CALLBACK
    failure_callback = ON_FAILURE_DEFAULT_CALLBACK

    def __init__(self, op: str) -> None:
        self.op = op
        self.result: LayerResult | None = None

    @property
    def reported(self) -> bool:
        return self.result is not None

    def on_success(self, *args: Any, **kwargs: Any) -> LayerResult:
        data = dict(kwargs)
        if args:
            data["args"] = list(args)
        self.result = LayerResult(ok=True, op=self.op, data=data)
        logger.debug("Recorded success for %s", self.op)
        return self.result

    def on_failure(self, *args: Any, **kwargs: Any) -> LayerResult:
        message = "Layer reported failure"
        rest = list(args)
        if rest and isinstance(rest[0], (BaseException, str)):
            message = str(rest.pop(0))
        detail = dict(kwargs)
        if rest:
            detail["args"] = rest
        self.result = LayerResult(
            ok=False,
            op=self.op,
            error=ResultError(code=FAILURE_CODE, message=message, detail=detail),
        )
        logger.debug("Recorded failure for %s: %s", self.op, message)
        return self.result


class WarningCollector:
    """Log sink that keeps warning messages while forwarding every call.

    Installed as a Layer instance's ``log_sink`` so observer failures can be
    reported as result warnings as well as logged.
    """

    def __init__(self, forward: LogSink) -> None:
        self._forward = forward
        self.messages: list[str] = []

    def warning(self, msg: str, /, *args: Any, **kwargs: Any) -> None:
        self.messages.append(msg % args if args else msg)
        self._forward.warning(msg, *args, **kwargs)

    def debug(self, msg: str, /, *args: Any, **kwargs: Any) -> None:
        self._forward.debug(msg, *args, **kwargs)
