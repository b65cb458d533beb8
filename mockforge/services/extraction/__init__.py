"""Generated code extraction."""

from .service import PROJECT_MARKERS, CodeExtractor, looks_like_project
from .strategies import (
    ContentSignature,
    ExtractionStrategy,
    LooseBlockStrategy,
    MarkerDelimitedStrategy,
    MarkerVariant,
    SignatureStrategy,
    default_strategies,
    normalize_path,
)

__all__ = [
    "PROJECT_MARKERS",
    "CodeExtractor",
    "looks_like_project",
    "ContentSignature",
    "ExtractionStrategy",
    "LooseBlockStrategy",
    "MarkerDelimitedStrategy",
    "MarkerVariant",
    "SignatureStrategy",
    "default_strategies",
    "normalize_path",
]
