"""Structured logging for StockDash using structlog.

Every inventory operation binds its name into the structlog context, so
store and notification log lines can be traced back to the operation that
produced them. Store credentials never reach the log output.
"""

import functools
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from stockdash.config import settings

T = TypeVar("T")

# Event keys that may carry the anon key or a user's session token
SENSITIVE_KEYS = frozenset({"apikey", "anon_key", "authorization", "access_token", "password"})

QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


def redact_credentials(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values, including inside a logged `headers` mapping."""
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS and event_dict[key]:
            event_dict[key] = "***"
    headers = event_dict.get("headers")
    if isinstance(headers, dict):
        event_dict["headers"] = {
            k: "***" if k.lower() in SENSITIVE_KEYS else v for k, v in headers.items()
        }
    return event_dict


def _renderer_chain(use_json: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json:
        chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=True))
    return chain


def setup_logging() -> None:
    """Configure structlog and the standard library root logger.

    JSON lines outside dev, colored console output in dev.
    """
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=_renderer_chain(settings.log_json and settings.environment != "dev"),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a structlog logger, optionally bound to some initial context."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def logged_operation(
    name: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Bind `operation=<name>` to the log context while a coroutine runs.

    Example:
        @logged_operation("fetch_products")
        async def fetch_products(self) -> bool:
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            with structlog.contextvars.bound_contextvars(operation=name):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
