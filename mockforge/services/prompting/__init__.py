"""Prompt composition and enrichment."""

from .enrichment import PROMPT_SCREENS, detect_domain, enrich_prompt, screens_from_prompt
from .service import REQUIRED_FILES, ComposedPrompt, PromptComposer, describe_section, drawer_routes

__all__ = [
    "PROMPT_SCREENS",
    "detect_domain",
    "enrich_prompt",
    "screens_from_prompt",
    "REQUIRED_FILES",
    "ComposedPrompt",
    "PromptComposer",
    "describe_section",
    "drawer_routes",
]
