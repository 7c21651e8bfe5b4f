"""Anthropic LLM provider implementation."""

from typing import Any

import anthropic

from ..provider import LLMProvider
from ..types import GenerationConfig, Message, MessageRole, Tool, ToolCall


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider implementation."""

    def __init__(self, api_key: str, model: str = "claude-3-5-sonnet-20241022"):
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert our Message format to Anthropic's format.

        Anthropic handles system messages separately (via the `system` param),
        so they are skipped here.
        """
        converted: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                continue
            elif msg.role == MessageRole.USER:
                converted.append({"role": "user", "content": [{"type": "text", "text": msg.content}]})
            elif msg.role == MessageRole.ASSISTANT:
                content: list[dict[str, Any]] = []
                if msg.content:
                    content.append({"type": "text", "text": msg.content})
                converted.append({"role": "assistant", "content": content})

        return converted

    def _convert_tools(self, tools: list[Tool]) -> list[dict[str, Any]]:
        """Convert our Tool format to Anthropic's format."""
        return [
            {"name": tool.name, "description": tool.description, "input_schema": tool.input_schema} for tool in tools
        ]

    def _extract_system_prompt(self, messages: list[Message], config: GenerationConfig) -> str:
        """Extract the system prompt from messages, falling back to the config."""
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                return msg.content
        return config.system_prompt

    def _parse_response(self, response: Any) -> tuple[str, list[ToolCall]]:
        """Parse Anthropic response into our format."""
        content = ""
        tool_calls: list[ToolCall] = []

        for block in response.content:
            if block.type == "text":
                content += block.text
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input)))

        return content, tool_calls

    async def generate(
        self,
        messages: list[Message],
        config: GenerationConfig,
    ) -> tuple[str, list[ToolCall]]:
        """Generate a response from Anthropic."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": config.max_tokens,
            "system": self._extract_system_prompt(messages, config),
            "messages": self._convert_messages(messages),
            "temperature": config.temperature,
        }
        if config.tools:
            kwargs["tools"] = self._convert_tools(config.tools)
            if config.tool_choice:
                kwargs["tool_choice"] = {"type": "tool", "name": config.tool_choice}

        response = await self.client.messages.create(**kwargs)

        return self._parse_response(response)
