"""Local Flutter project templates."""

from .service import FlutterTemplateGenerator, screen_path

__all__ = ["FlutterTemplateGenerator", "screen_path"]
