"""Generative service agents for Mockforge."""

from .base import CompletionAgent, CompletionResponse, PromptTemplate, classify_error

__all__ = [
    "CompletionAgent",
    "CompletionResponse",
    "PromptTemplate",
    "classify_error",
]
