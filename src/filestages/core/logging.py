# src/filestages/core/logging.py
"""Logging setup for stages.

Stages log through structlog. Their events, and stdlib records from
third-party code, all end up on one handler formatted by structlog's
ProcessorFormatter, as JSON lines or as console text.

Each stage coroutine runs inside stage_context(), so every event it emits
names the channels the stage is wired to. Records are str or bytes; a bytes
value in an event field is logged as its size, never as its content.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter
from structlog.typing import EventDict, Processor, WrappedLogger

# Libraries that are chatty at DEBUG; held at WARNING or the root level, whichever is stricter
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "dynaconf", "psutil")


def describe_binary_fields(_logger: WrappedLogger, _method_name: str, event_dict: EventDict) -> EventDict:
    """Replace bytes values with a size description like ``<512 bytes>``."""
    for key, value in event_dict.items():
        if isinstance(value, bytes | bytearray):
            event_dict[key] = f"<{len(value)} bytes>"
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        describe_binary_fields,
    ]


def _render_chain(json_output: bool) -> list[Processor]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [ProcessorFormatter.remove_processors_meta, structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Send structlog and stdlib logging to a single stream handler.

    Replaces any handlers already on the root logger.

    Args:
        json_output: One JSON object per line instead of console text
        level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Destination, stdout when omitted
    """
    root_level = logging.getLevelName(level.upper())
    if not isinstance(root_level, int):
        raise ValueError(f"Unknown log level: {level}")

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def stage_context(stage: str, *, reader: str | None = None, writer: str | None = None) -> Iterator[None]:
    """Bind a stage and its channel names to every event logged in this task.

    Context variables are per asyncio task, so concurrently running stages
    each see only their own bindings.
    """
    bindings: dict[str, Any] = {"stage": stage}
    if reader is not None:
        bindings["reader"] = reader
    if writer is not None:
        bindings["writer"] = writer
    with structlog.contextvars.bound_contextvars(**bindings):
        yield
