"""LLM provider implementations for snapshell."""

from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .openrouter_provider import OpenRouterProvider

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
]
