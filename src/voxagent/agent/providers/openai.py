"""
OpenAI GPT LLM Provider.

Implements the ILLMProvider interface for OpenAI's GPT models.
Supports streaming, tool calling, and JSON-schema constrained output.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import openai
from openai import AsyncOpenAI

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


class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT provider implementation.

    Supports:
    - GPT-4o, GPT-4o-mini and other chat-completions models
    - Streaming responses
    - Tool/function calling
    - Structured outputs (response_format json_schema, strict)

    Usage:
        config = LLMProviderConfig(
            api_key="sk-...",
            model="gpt-4o-mini",
        )
        provider = OpenAIProvider(config)

        async for event in provider.chat(messages, tools):
            print(event)
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(self, config: LLMProviderConfig):
        """Initialize the OpenAI provider.

        Args:
            config: Provider configuration
        """
        super().__init__(config)

        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def _format_messages_for_api(
        self, messages: list[Message], system_prompt: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """Convert messages to OpenAI format.

        OpenAI includes system messages in the messages array.
        """
        api_messages = []

        if system_prompt:
            api_messages.append({
                "role": "system",
                "content": system_prompt,
            })

        for msg in messages:
            if msg.role == MessageRole.TOOL:
                api_messages.append({
                    "role": "tool",
                    "tool_call_id": msg.tool_call_id or "unknown",
                    "content": msg.content,
                })
            elif msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                api_messages.append({
                    "role": "assistant",
                    "content": msg.content or None,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": json.dumps(tc.arguments),
                            },
                        }
                        for tc in msg.tool_calls
                    ],
                })
            else:
                api_messages.append({
                    "role": msg.role.value,
                    "content": msg.content,
                })

        return api_messages

    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tools to OpenAI format."""
        return [tool.to_openai_format() for tool in tools]

    async def chat(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Generate a streaming response using GPT.

        Args:
            messages: Conversation history
            tools: Available tools
            system_prompt: System prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Yields:
            ChatEvent objects
        """

        api_messages = self._format_messages_for_api(messages, system_prompt)

        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": api_messages,
            "temperature": self._temperature(temperature),
            "stream": True,
        }

        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        if tools:
            kwargs["tools"] = self._format_tools_for_api(tools)
            kwargs["tool_choice"] = "auto"

        try:
            stream_response = await self.client.chat.completions.create(**kwargs)

            # Tool calls are streamed in fragments keyed by index
            tool_calls_in_progress: dict[int, dict[str, Any]] = {}

            async for chunk in stream_response:
                choice = chunk.choices[0] if chunk.choices else None
                if not choice:
                    continue

                delta = choice.delta

                if delta.content:
                    yield self._create_text_delta(delta.content)

                if delta.tool_calls:
                    for tc in delta.tool_calls:
                        idx = tc.index

                        if idx not in tool_calls_in_progress:
                            tool_calls_in_progress[idx] = {
                                "id": tc.id,
                                "name": tc.function.name if tc.function else "",
                                "arguments": "",
                            }
                            if tc.function and tc.function.name:
                                yield self._create_tool_call_start(tc.id, tc.function.name)

                        if tc.function and tc.function.arguments:
                            tool_calls_in_progress[idx]["arguments"] += tc.function.arguments

                if choice.finish_reason:
                    for tc_data in tool_calls_in_progress.values():
                        try:
                            arguments = json.loads(tc_data["arguments"]) if tc_data["arguments"] else {}
                        except json.JSONDecodeError:
                            arguments = {"raw": tc_data["arguments"]}

                        yield self._create_tool_call_end(tc_data["id"], arguments)

                    break

            yield self._create_done()

        except openai.RateLimitError as e:
            logger.warning(f"Rate limited by OpenAI: {e}")
            yield self._create_error(f"Rate limited: {e}", ErrorType.RATE_LIMIT)
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI API timeout: {e}")
            yield self._create_error(f"Request timed out: {e}", ErrorType.TIMEOUT)
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            yield self._create_error(f"API error: {e}", ErrorType.API_ERROR)
        except Exception as e:
            logger.exception(f"Unexpected error in OpenAI chat: {e}")
            yield self._create_error(str(e), ErrorType.FATAL)

    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate a completion constrained to a JSON schema.

        Args:
            messages: Conversation history
            schema: Pydantic model describing the output

        Returns:
            Validated schema instance

        Raises:
            LLMProviderError: On API errors, refusals or malformed output
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=self._format_messages_for_api(messages),
                temperature=self.config.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema.__name__,
                        "schema": schema.model_json_schema(),
                        "strict": True,
                    },
                },
            )
        except openai.RateLimitError as e:
            logger.warning(f"Rate limited during structured completion: {e}")
            raise LLMProviderError(
                f"Rate limited: {e}",
                error_type=ErrorType.RATE_LIMIT,
            ) from e
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI structured completion timeout: {e}")
            raise LLMProviderError(
                f"Request timed out: {e}",
                error_type=ErrorType.TIMEOUT,
            ) from e
        except openai.APIError as e:
            logger.error(f"OpenAI structured completion error: {e}")
            raise LLMProviderError(
                f"Structured completion failed: {e}",
                error_type=ErrorType.API_ERROR,
            ) from e

        message = response.choices[0].message if response.choices else None
        if message is None:
            raise LLMProviderError("No choices in structured response", error_type=ErrorType.FATAL)
        if getattr(message, "refusal", None):
            raise LLMProviderError(f"Model refused: {message.refusal}", error_type=ErrorType.FATAL)

        return self._parse_structured(schema, message.content)

    async def close(self) -> None:
        """Close the client."""
        await self.client.close()
