"""OpenAI LLM provider implementation."""

import json
from typing import Any, cast

import openai

from ..provider import LLMProvider
from ..types import GenerationConfig, Message, MessageRole, Tool, ToolCall


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider implementation."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini"):
        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model

    def _convert_messages(self, messages: list[Message], config: GenerationConfig) -> list[dict[str, Any]]:
        """Convert our Message format to OpenAI's format."""
        converted: list[dict[str, Any]] = []

        has_system = any(msg.role == MessageRole.SYSTEM for msg in messages)
        if config.system_prompt and not has_system:
            converted.append({"role": "system", "content": config.system_prompt})

        for msg in messages:
            converted.append({"role": msg.role.value, "content": msg.content})

        return converted

    def _convert_tools(self, tools: list[Tool]) -> list[dict[str, Any]]:
        """Convert our Tool format to OpenAI's function calling format."""
        return [
            {
                "type": "function",
                "function": {"name": tool.name, "description": tool.description, "parameters": tool.input_schema},
            }
            for tool in tools
        ]

    def _parse_response(self, response: Any) -> tuple[str, list[ToolCall]]:
        """Parse OpenAI response into our format."""
        message = response.choices[0].message
        content = message.content or ""
        tool_calls: list[ToolCall] = []

        for tool_call in message.tool_calls or []:
            raw_args = tool_call.function.arguments
            try:
                arguments = json.loads(raw_args) if isinstance(raw_args, str) else dict(raw_args)
            except json.JSONDecodeError:
                arguments = {"_raw": raw_args}
            tool_calls.append(ToolCall(id=tool_call.id, name=tool_call.function.name, arguments=arguments))

        return content, tool_calls

    async def generate(
        self,
        messages: list[Message],
        config: GenerationConfig,
    ) -> tuple[str, list[ToolCall]]:
        """Generate a response from OpenAI."""
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": cast(Any, self._convert_messages(messages, config)),
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        if config.tools:
            kwargs["tools"] = cast(Any, self._convert_tools(config.tools))
            if config.tool_choice:
                kwargs["tool_choice"] = {"type": "function", "function": {"name": config.tool_choice}}
            else:
                kwargs["tool_choice"] = "auto"

        response = await self.client.chat.completions.create(**kwargs)

        return self._parse_response(response)
