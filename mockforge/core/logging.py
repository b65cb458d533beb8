"""
Structured logging configuration for Mockforge.

Events are emitted through structlog as keyword pairs. Output is human-readable
on an interactive terminal and JSON elsewhere (CI, containers, piped output).
The provider SDKs log through the standard library; their records are rendered
by rich and held at WARNING unless running at DEBUG.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Config

SDK_LOGGERS: tuple[str, ...] = ("openai", "anthropic", "httpx", "httpcore")


def _use_json(config: Config | None) -> bool:
    if config is not None and config.json_logs is not None:
        return config.json_logs
    return not sys.stderr.isatty()


def _configure_stdlib(level: int) -> None:
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=level == logging.DEBUG,
    )
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)

    sdk_level = logging.DEBUG if level == logging.DEBUG else max(level, logging.WARNING)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


def _renderers(json_output: bool) -> list[structlog.types.Processor]:
    if json_output:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def setup_logging(config: Config | None = None) -> None:
    """Configure structured logging for the application.

    Args:
        config: Optional configuration. If None, uses INFO level and picks the
            renderer from the terminal type.
    """
    level = getattr(logging, config.log_level if config else "INFO", logging.INFO)
    _configure_stdlib(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            *_renderers(_use_json(config)),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger; services call this with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach run-scoped keys (run id, app name) to every following event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
