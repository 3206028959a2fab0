"""structlog setup for the layerkit CLI.

Everything goes to stderr so stdout stays clean for results:

- human (default): structlog's console renderer, colored on a TTY
- ``--log-json``: one JSON object per line

Library modules keep using ``logging.getLogger(__name__)``. The
ProcessorFormatter installed on the root handler runs those stdlib records
through the same processors as structlog's own loggers, so values bound with
``structlog.contextvars`` (such as the ``layer`` being run) show up on both.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers kept at WARNING even in verbose mode.
QUIET_LOGGERS: tuple[str, ...] = ("pluggy",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging to a single stderr handler.

    Safe to call repeatedly; each call replaces the root handler.

    Args:
        verbose: DEBUG for ``layerkit.*`` loggers; WARNING otherwise.
        log_json: Render JSON lines instead of console output.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("layerkit").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
