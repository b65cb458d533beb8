"""
Custom exception hierarchy for Mockforge.

All exceptions inherit from MockforgeError to enable consistent error handling
across the pipeline. The detection, extraction and repair engines never raise;
these types surface only at the generative-service and orchestration seams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CompletionErrorKind(str, Enum):
    """Classification of generative service failures."""

    RATE_LIMITED = "rate_limited"
    MALFORMED_REQUEST = "malformed_request"
    UNAUTHENTICATED = "unauthenticated"
    OTHER = "other"

    @classmethod
    def from_status(cls, status_code: int | None) -> CompletionErrorKind:
        """Map an HTTP status code onto an error kind."""
        if status_code == 429:
            return cls.RATE_LIMITED
        if status_code in (400, 422):
            return cls.MALFORMED_REQUEST
        if status_code in (401, 403):
            return cls.UNAUTHENTICATED
        return cls.OTHER


@dataclass
class MockforgeError(Exception):
    """Base exception for all Mockforge errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ServiceError(MockforgeError):
    """Raised when a service operation fails."""

    service_name: str = ""
    operation: str = ""
    retryable: bool = False

    def __str__(self) -> str:
        base = super().__str__()
        retry_hint = " (retryable)" if self.retryable else " (non-retryable)"
        return f"[{self.service_name}.{self.operation}]{retry_hint}: {base}"


@dataclass
class CompletionError(ServiceError):
    """Raised when a generative service completion fails."""

    kind: CompletionErrorKind = CompletionErrorKind.OTHER
    status_code: int | None = None

    def __post_init__(self) -> None:
        self.service_name = "completion"
        self.retryable = self.kind is CompletionErrorKind.RATE_LIMITED

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.kind.value}] {base}"


@dataclass
class GenerationError(MockforgeError):
    """Raised when the pipeline cannot produce any project."""

    stage: str = ""
    error_kind: CompletionErrorKind | None = None

    def __str__(self) -> str:
        base = super().__str__()
        kind = f" ({self.error_kind.value})" if self.error_kind else ""
        return f"Generation failed at stage '{self.stage}'{kind}: {base}"
