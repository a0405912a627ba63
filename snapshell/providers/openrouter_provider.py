"""OpenRouter provider implementation for snapshell."""

from typing import Any, Dict

from openai import AsyncOpenAI

from ..config import ReasoningLevel, SnapshellConfig
from .openai_provider import OpenAIProvider


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter speaks the OpenAI protocol behind a different base URL."""

    def __init__(self, config: SnapshellConfig):
        super().__init__(config)
        self.model = config.openrouter_model

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.config.openrouter_api_key,
            base_url=self.config.openrouter_base_url,
            timeout=self.config.request_timeout,
            max_retries=0,
        )

    def _reasoning_params(self, reasoning: ReasoningLevel) -> Dict[str, Any]:
        # OpenRouter takes a top-level reasoning object, e.g. {"effort": "high"}
        return {"extra_body": {"reasoning": {"effort": reasoning.value}}}
