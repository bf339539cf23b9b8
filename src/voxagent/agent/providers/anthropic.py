"""
Anthropic Claude LLM Provider.

Implements the ILLMProvider interface for Anthropic's Claude models.
Structured output is obtained by forcing a single tool call whose
input schema is the requested pydantic model.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import anthropic
from anthropic import AsyncAnthropic

from ..domain.entities import (
    ChatEvent,
    ErrorType,
    Message,
    MessageRole,
    ToolDefinition,
)
from ..domain.ports import SchemaT
from .base import BaseLLMProvider, LLMProviderConfig, LLMProviderError

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude provider implementation.

    Supports:
    - Claude 3.5+ models
    - Streaming responses
    - Tool/function calling
    - Structured output via forced tool use

    Usage:
        config = LLMProviderConfig(
            api_key="sk-ant-...",
            model="claude-sonnet-4-5-20250929",
        )
        provider = AnthropicProvider(config)

        async for event in provider.chat(messages, tools):
            print(event)
    """

    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

    def __init__(self, config: LLMProviderConfig):
        """Initialize the Anthropic provider.

        Args:
            config: Provider configuration
        """
        super().__init__(config)

        self.client = AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def _format_messages_for_api(
        self, messages: list[Message], system_prompt: Optional[str] = None
    ) -> tuple[Optional[str], list[dict[str, Any]]]:
        """Convert messages to Anthropic format.

        Anthropic uses a separate system parameter, not in messages.
        Consecutive tool results are merged into one user turn.

        Returns:
            Tuple of (system_prompt, messages_list)
        """
        api_messages: list[dict[str, Any]] = []
        system = system_prompt

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                if system:
                    system = f"{msg.content}\n\n{system}"
                else:
                    system = msg.content
            elif msg.role == MessageRole.TOOL:
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id or "unknown",
                    "content": msg.content,
                }
                previous = api_messages[-1] if api_messages else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and previous["content"]
                    and previous["content"][0].get("type") == "tool_result"
                ):
                    previous["content"].append(block)
                else:
                    api_messages.append({"role": "user", "content": [block]})
            elif msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                content_blocks: list[dict[str, Any]] = []
                if msg.content:
                    content_blocks.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls:
                    content_blocks.append({
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.arguments,
                    })
                api_messages.append({
                    "role": "assistant",
                    "content": content_blocks,
                })
            else:
                api_messages.append({
                    "role": msg.role.value,
                    "content": msg.content,
                })

        return system, api_messages

    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tools to Anthropic format."""
        return [tool.to_anthropic_format() for tool in tools]

    async def chat(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Generate a streaming response using Claude.

        Args:
            messages: Conversation history
            tools: Available tools
            system_prompt: System prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Yields:
            ChatEvent objects
        """

        system, api_messages = self._format_messages_for_api(messages, system_prompt)

        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": api_messages,
            "temperature": self._temperature(temperature),
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        if system:
            kwargs["system"] = system

        if tools:
            kwargs["tools"] = self._format_tools_for_api(tools)

        try:
            async with self.client.messages.stream(**kwargs) as stream_response:
                current_tool_call_id: Optional[str] = None
                accumulated_tool_input = ""

                async for event in stream_response:
                    if not hasattr(event, "type"):
                        continue

                    if event.type == "content_block_start":
                        block = event.content_block
                        if getattr(block, "type", None) == "tool_use":
                            current_tool_call_id = block.id
                            accumulated_tool_input = ""
                            yield self._create_tool_call_start(block.id, block.name)

                    elif event.type == "content_block_delta":
                        delta = event.delta
                        delta_type = getattr(delta, "type", None)
                        if delta_type == "text_delta":
                            yield self._create_text_delta(delta.text)
                        elif delta_type == "input_json_delta":
                            accumulated_tool_input += delta.partial_json

                    elif event.type == "content_block_stop":
                        if current_tool_call_id:
                            try:
                                arguments = json.loads(accumulated_tool_input) if accumulated_tool_input else {}
                            except json.JSONDecodeError:
                                arguments = {"raw": accumulated_tool_input}

                            yield self._create_tool_call_end(current_tool_call_id, arguments)
                            current_tool_call_id = None

                yield self._create_done()

        except anthropic.RateLimitError as e:
            logger.warning(f"Rate limited by Anthropic: {e}")
            yield self._create_error(f"Rate limited: {e}", ErrorType.RATE_LIMIT)
        except anthropic.APITimeoutError as e:
            logger.error(f"Anthropic API timeout: {e}")
            yield self._create_error(f"Request timed out: {e}", ErrorType.TIMEOUT)
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            yield self._create_error(f"API error: {e}", ErrorType.API_ERROR)
        except Exception as e:
            logger.exception(f"Unexpected error in Anthropic chat: {e}")
            yield self._create_error(str(e), ErrorType.FATAL)

    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate a schema-constrained completion via forced tool use.

        Args:
            messages: Conversation history
            schema: Pydantic model describing the output

        Returns:
            Validated schema instance

        Raises:
            LLMProviderError: On API errors or if no tool_use block is returned
        """
        system, api_messages = self._format_messages_for_api(messages)
        tool_name = schema.__name__

        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": api_messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "tools": [{
                "name": tool_name,
                "description": (schema.__doc__ or f"Record the {tool_name} result").strip(),
                "input_schema": schema.model_json_schema(),
            }],
            "tool_choice": {"type": "tool", "name": tool_name},
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            logger.warning(f"Rate limited during structured completion: {e}")
            raise LLMProviderError(
                f"Rate limited: {e}",
                error_type=ErrorType.RATE_LIMIT,
            ) from e
        except anthropic.APITimeoutError as e:
            logger.error(f"Anthropic structured completion timeout: {e}")
            raise LLMProviderError(
                f"Request timed out: {e}",
                error_type=ErrorType.TIMEOUT,
            ) from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic structured completion error: {e}")
            raise LLMProviderError(
                f"Structured completion failed: {e}",
                error_type=ErrorType.API_ERROR,
            ) from e

        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                return self._parse_structured(schema, block.input)

        raise LLMProviderError(
            f"No {tool_name} tool_use block in structured response",
            error_type=ErrorType.FATAL,
        )

    async def close(self) -> None:
        """Close the client."""
        await self.client.close()
