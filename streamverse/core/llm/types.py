"""Data types for LLM interactions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Named constants for magic numbers
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


class MessageRole(str, Enum):
    """Message roles in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Tool:
    """Definition of a tool the LLM can call.

    Flows force a single tool call and read its arguments as structured output.
    """

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class ToolCall:
    """A tool call request from the LLM."""

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass
class Message:
    """A message in the conversation."""

    role: MessageRole
    content: str


@dataclass
class GenerationConfig:
    """Configuration for a single generation request."""

    system_prompt: str = ""
    tools: list[Tool] = field(default_factory=lambda: list[Tool]())
    tool_choice: str | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
