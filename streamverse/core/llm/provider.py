"""LLM Provider abstract base class."""

from abc import ABC, abstractmethod

from .types import GenerationConfig, Message, ToolCall


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        config: GenerationConfig,
    ) -> tuple[str, list[ToolCall]]:
        """Generate a response from the LLM."""
        pass
