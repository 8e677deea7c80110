"""Logging configuration using structlog.

Logs go to stderr so stdout carries only query output (piping).
Console rendering by default; JSON lines when collected by a log shipper.
"""

import logging
import sys
from typing import Any

import structlog

class _LazyStderrFactory:
    """Resolve sys.stderr at logger creation time, not at configure() time.

    CliRunner swaps sys.stderr between invocations, so a handle captured
    once by PrintLoggerFactory goes stale.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Route structlog events to stderr.

    ``verbose`` lowers the threshold from INFO to DEBUG; ``json_logs``
    swaps the console renderer for one JSON object per line.
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def bind_command_context(**values: Any) -> None:
    """Attach values (command name, profile) to every later log event."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``name`` when given.

    Fetch loggers at call time; module-level loggers would miss the
    configuration applied by setup_logging().
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
