# LLM module for the StreamVerse backend

from .provider import LLMProvider
from .types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GenerationConfig,
    Message,
    MessageRole,
    Tool,
    ToolCall,
)

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "GenerationConfig",
    "LLMProvider",
    "Message",
    "MessageRole",
    "Tool",
    "ToolCall",
]
