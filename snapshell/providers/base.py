"""Base LLM provider interface and common functionality."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..config import ReasoningLevel, SnapshellConfig
from ..llm_handler import LLMResponse


class LLMProvider(ABC):
    """Abstract base class for all LLM providers."""

    def __init__(self, config: SnapshellConfig):
        self.config = config

    @abstractmethod
    async def generate_response(
        self,
        messages: List[Dict[str, str]],
        reasoning: ReasoningLevel = ReasoningLevel.LOW,
    ) -> LLMResponse:
        """Generate a response from the LLM provider.

        Args:
            messages: List of conversation messages in OpenAI format
            reasoning: Reasoning effort hint for the request

        Returns:
            LLMResponse object containing the completion text

        Raises:
            TransportError: On network, authentication, rate-limit or status errors
            ResponseParseError: When the body holds no usable completion
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Get the current model name being used."""
        pass

    def _format_messages_for_provider(self, messages: List[Dict[str, str]]) -> Any:
        """Format messages for the specific provider. Override as needed."""
        return messages

    def _reasoning_params(self, reasoning: ReasoningLevel) -> Dict[str, Any]:
        """Request parameters carrying the reasoning hint. Override as needed."""
        return {}
