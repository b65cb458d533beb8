"""
Mockforge: mockup and prompt driven Flutter project generation.

Turns freeform diagram markup or a natural-language description into a
generation request, then recovers a clean, repaired multi-file Flutter
project from the generative service's free-form reply.
"""

__version__ = "0.3.0"
__author__ = "Mockforge Team"
