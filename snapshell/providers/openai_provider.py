"""OpenAI provider implementation for snapshell."""

from typing import Any, Dict, List

import openai
from openai import AsyncOpenAI

from ..config import ReasoningLevel, SnapshellConfig
from ..llm_handler import (
    LLMResponse,
    ResponseParseError,
    TransportError,
    normalize_reasoning,
)
from .base import LLMProvider


class OpenAIProvider(LLMProvider):
    """Provider for the OpenAI Chat Completions API."""

    def __init__(self, config: SnapshellConfig):
        super().__init__(config)
        self.client = self._create_client()
        self.model = config.openai_model

    def _create_client(self) -> AsyncOpenAI:
        # Retries stay off: a failed request is reported, never replayed.
        return AsyncOpenAI(
            api_key=self.config.openai_api_key,
            timeout=self.config.request_timeout,
            max_retries=0,
        )

    def _reasoning_params(self, reasoning: ReasoningLevel) -> Dict[str, Any]:
        return {"reasoning_effort": reasoning.value}

    async def generate_response(
        self,
        messages: List[Dict[str, str]],
        reasoning: ReasoningLevel = ReasoningLevel.LOW,
    ) -> LLMResponse:
        """Generate response using a Chat Completions endpoint."""
        request_params = {
            "model": self.model,
            "messages": self._format_messages_for_provider(messages),
            "max_completion_tokens": self.config.max_completion_tokens,
        }
        request_params.update(self._reasoning_params(reasoning))

        try:
            response = await self.client.chat.completions.create(**request_params)
        except openai.APIResponseValidationError as e:
            raise ResponseParseError(f"Malformed response from {self.model}: {e}") from e
        except openai.AuthenticationError as e:
            raise TransportError(
                "Authentication failed. Please check your API key.",
                status_code=e.status_code,
            ) from e
        except openai.RateLimitError as e:
            raise TransportError(
                "Rate limit exceeded. Please try again in a moment.",
                status_code=e.status_code,
            ) from e
        except openai.APITimeoutError as e:
            raise TransportError(
                f"Request timed out after {self.config.request_timeout:g} seconds."
            ) from e
        except openai.APIConnectionError as e:
            raise TransportError(f"Connection error: {e}") from e
        except openai.APIStatusError as e:
            raise TransportError(
                f"API error {e.status_code}: {e.message}", status_code=e.status_code
            ) from e
        except openai.APIError as e:
            raise TransportError(f"API error: {e}") from e

        return self._to_llm_response(response)

    def _to_llm_response(self, response: Any) -> LLMResponse:
        """Pull the completion text out of a Chat Completions response."""
        choices = getattr(response, "choices", None)
        if not choices:
            raise ResponseParseError("Response contained no choices.")

        message = choices[0].message
        if message is None or message.content is None:
            raise ResponseParseError("Response contained no message content.")

        usage = (
            {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
            if getattr(response, "usage", None)
            else None
        )

        return LLMResponse(
            content=message.content,
            model=getattr(response, "model", None) or self.model,
            usage=usage,
            reasoning=normalize_reasoning(getattr(message, "reasoning", None)),
        )

    def get_model_name(self) -> str:
        """Get the current model name."""
        return self.model
