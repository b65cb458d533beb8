"""
Generation pipeline data models.

Requests, capabilities, extraction reports and results passed between the
pipeline stages. All of them are created per call and discarded once consumed.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from .screens import ScreenDetectionResult


def to_package_name(name: str, default: str = "flutter_app") -> str:
    """Normalize a free-form app name into a valid Dart package name.

    Args:
        name: Human app name such as "My Cool App".
        default: Returned when nothing usable remains.

    Returns:
        A lowercase snake_case identifier, e.g. "my_cool_app".
    """
    words = re.findall(r"[A-Za-z0-9]+", re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name or ""))
    package = "_".join(w.lower() for w in words)
    if not package:
        return default
    if package[0].isdigit():
        package = f"app_{package}"
    return package


class GenerationSource(str, Enum):
    """Where the final file map came from."""

    REMOTE = "remote"
    FALLBACK = "fallback"


class GenerationCapabilities(BaseModel):
    """Explicit capabilities handed to the pipeline entry point."""

    model_config = {"frozen": True}

    remote_generation: bool = Field(description="Whether the generative service may be called")
    fallback_enabled: bool = Field(default=True, description="Whether local templates may be used")


class ExtractedFile(BaseModel):
    """A file recovered from a generative reply."""

    path: str = Field(description="Project-relative path")
    content: str = Field(default="")


class ExtractionReport(BaseModel):
    """Outcome of one extraction pass."""

    strategy: str | None = Field(default=None, description="Name of the strategy that recovered files")
    files: dict[str, str] = Field(default_factory=dict)
    duplicates: list[str] = Field(default_factory=list, description="Paths recovered more than once")

    @property
    def empty(self) -> bool:
        return not self.files


class GenerationRequest(BaseModel):
    """Input to a generation run."""

    markup: str | None = Field(default=None, description="Diagram markup of the mockup")
    prompt: str | None = Field(default=None, description="Natural-language description")
    app_name: str = Field(default="flutter_app")
    instructions: str = Field(default="", description="Extra user instructions")

    @field_validator("app_name")
    @classmethod
    def _normalize_app_name(cls, value: str) -> str:
        return to_package_name(value)

    @model_validator(mode="after")
    def _require_input(self) -> GenerationRequest:
        if not (self.markup and self.markup.strip()) and not (self.prompt and self.prompt.strip()):
            raise ValueError("either markup or prompt must be provided")
        return self


class GenerationResult(BaseModel):
    """Output of a generation run."""

    files: dict[str, str] = Field(default_factory=dict)
    source: GenerationSource
    detection: ScreenDetectionResult | None = None
    strategy: str | None = Field(default=None, description="Extraction strategy used for remote output")
    warnings: list[str] = Field(default_factory=list)
    error_kind: str | None = Field(default=None, description="Classified service error, if any")

    @property
    def file_count(self) -> int:
        return len(self.files)
