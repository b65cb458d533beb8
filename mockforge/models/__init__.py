"""Data models for Mockforge."""

from .generation import (
    ExtractedFile,
    ExtractionReport,
    GenerationCapabilities,
    GenerationRequest,
    GenerationResult,
    GenerationSource,
    to_package_name,
)
from .screens import RadioGroup, RadioOption, ScreenDetectionResult, ScreenSection, ThemePalette

__all__ = [
    "ExtractedFile",
    "ExtractionReport",
    "GenerationCapabilities",
    "GenerationRequest",
    "GenerationResult",
    "GenerationSource",
    "to_package_name",
    "RadioGroup",
    "RadioOption",
    "ScreenDetectionResult",
    "ScreenSection",
    "ThemePalette",
]
