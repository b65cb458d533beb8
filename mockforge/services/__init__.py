"""Services package for Mockforge."""

from .detection import ScreenDetector
from .extraction import CodeExtractor
from .prompting import PromptComposer
from .repair import CodeRepairEngine
from .scaffold import FlutterTemplateGenerator

__all__ = [
    "ScreenDetector",
    "CodeExtractor",
    "PromptComposer",
    "CodeRepairEngine",
    "FlutterTemplateGenerator",
]
