"""Core infrastructure components for Mockforge."""

from .config import AgentConfig, Config, GenerationConfig, StorageConfig, get_config
from .exceptions import (
    CompletionError,
    CompletionErrorKind,
    GenerationError,
    MockforgeError,
    ServiceError,
)
from .logging import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    "AgentConfig",
    "Config",
    "GenerationConfig",
    "StorageConfig",
    "get_config",
    "CompletionError",
    "CompletionErrorKind",
    "GenerationError",
    "MockforgeError",
    "ServiceError",
    "bind_context",
    "clear_context",
    "get_logger",
    "setup_logging",
]
