"""Mockup screen detection."""

from .service import ScreenDetector, normalize_title
from .vocabulary import SCREEN_FAMILIES, ContentFamily, RadioVocabulary, ScreenFamily

__all__ = [
    "ScreenDetector",
    "normalize_title",
    "SCREEN_FAMILIES",
    "ContentFamily",
    "RadioVocabulary",
    "ScreenFamily",
]
