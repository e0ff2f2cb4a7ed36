"""Structured logging for the orchestration core.

Events go through structlog and are rendered as JSON lines or as colored
console output. While an orchestration runs, its process id lives in a
context variable, so every event emitted underneath it (including the
``agent_call_*`` events of concurrent agent calls) is stamped with it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from .config import LogFormat, LoggingConfig

APP_NAME = "callosum"

_process_id: ContextVar[str | None] = ContextVar("callosum_process_id", default=None)


def current_process_id() -> str | None:
    """Return the id of the process running in this context, if any."""
    return _process_id.get()


@contextmanager
def process_scope(process_id: str) -> Iterator[str]:
    """Attach a process id to all events logged inside the block.

    Tasks spawned inside the block (asyncio.gather fan-outs) inherit it.
    """
    token = _process_id.set(process_id)
    try:
        yield process_id
    finally:
        _process_id.reset(token)


def add_process_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    process_id = _process_id.get()
    if process_id is not None:
        event_dict.setdefault("process_id", process_id)
    return event_dict


def add_app_name(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib handlers it writes through.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines when True, colored console output otherwise
        log_file: Optional file receiving the same events
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_process_id,
        add_app_name,
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.rich_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(log_level)

    logging.basicConfig(format="%(message)s", level=log_level, handlers=handlers, force=True)


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Apply the ``logging`` section of a CallosumConfig."""
    setup_logging(level=config.level, json_format=config.format == LogFormat.JSON)


def get_logger(name: str | None = None, **context: Any) -> Any:
    """Return a structlog logger, optionally with context already bound."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


def get_agent_logger(agent_name: str) -> Any:
    return get_logger("callosum.agent", agent=agent_name)


def get_conversation_logger(conversation_id: str) -> Any:
    return get_logger("callosum.conversation", conversation_id=conversation_id)
