"""Pipeline orchestration for Mockforge."""

from .pipeline import PROTECTED_PATHS, GenerationPipeline, drop_protected, generate_project

__all__ = ["PROTECTED_PATHS", "GenerationPipeline", "drop_protected", "generate_project"]
