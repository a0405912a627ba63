"""LLM handler with provider abstraction and model-client error types."""

import json
import logging
from typing import Any, Dict, List, Optional

from .config import LLMProvider, ReasoningLevel, SnapshellConfig

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for failures talking to the model."""

    pass


class TransportError(LLMError):
    """Network failure, timeout, authentication failure or non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseParseError(LLMError):
    """The response body did not have the expected completion shape."""

    pass


class LLMResponse:
    """Represents a response from an LLM provider."""

    def __init__(
        self,
        content: str,
        model: Optional[str] = None,
        usage: Optional[Dict[str, Any]] = None,
        reasoning: Optional[str] = None,
    ):
        self.content = content
        self.model = model
        self.usage = usage
        self.reasoning = reasoning

    def __repr__(self):
        return f"LLMResponse(model={self.model!r}, content={self.content!r})"


def normalize_reasoning(value: Any) -> Optional[str]:
    """Reduce a provider-side reasoning field to plain text.

    Strings pass through; objects carrying a ``reasoning`` key yield that
    value; anything else is serialized as compact JSON.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict) and "reasoning" in value:
        return normalize_reasoning(value["reasoning"])
    return json.dumps(value, ensure_ascii=False, default=str)


class LLMHandler:
    """Model client facade that sends a transcript to the configured provider."""

    def __init__(self, config: SnapshellConfig, provider=None):
        self.config = config
        self.provider = provider or self._get_provider()

    async def complete(
        self,
        messages: List[Dict[str, str]],
        reasoning: ReasoningLevel = ReasoningLevel.LOW,
    ) -> LLMResponse:
        """Send the full message history and return the completion.

        Raises:
            TransportError: The request did not reach a successful response.
            ResponseParseError: The response body had no usable completion.
        """
        logger.debug(
            "model=%s messages=%d reasoning=%s",
            self.provider.get_model_name(),
            len(messages),
            reasoning.value,
        )
        response = await self.provider.generate_response(messages, reasoning=reasoning)
        logger.debug("raw response: %s", response.content)
        logger.debug("served by %s, usage=%s", response.model, response.usage)
        return response

    def _get_provider(self):
        """Get the appropriate LLM provider based on configuration."""
        from .providers import OpenAIProvider, OpenRouterProvider

        if self.config.llm_provider == LLMProvider.OPENROUTER:
            return OpenRouterProvider(self.config)
        elif self.config.llm_provider == LLMProvider.OPENAI:
            return OpenAIProvider(self.config)
        else:
            raise ValueError(f"Unknown provider: {self.config.llm_provider}")
