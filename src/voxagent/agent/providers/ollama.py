"""
Ollama LLM Provider.

Implements the ILLMProvider interface for Ollama's local LLM API.
Supports streaming chat, tool calling and JSON-schema structured
outputs with locally-hosted models.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

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


class OllamaProvider(BaseLLMProvider):
    """Ollama local LLM provider implementation.

    Usage:
        config = LLMProviderConfig(
            api_key="not-needed",  # Ollama doesn't require auth
            model="qwen3:4b",
            base_url="http://localhost:11434",
        )
        provider = OllamaProvider(config)

        async for event in provider.chat(messages, tools):
            print(event)
    """

    DEFAULT_MODEL = "qwen3:4b"
    DEFAULT_BASE_URL = "http://localhost:11434"

    def __init__(self, config: LLMProviderConfig):
        """Initialize the Ollama provider.

        Args:
            config: Provider configuration
        """
        super().__init__(config)

        self.base_url = config.base_url or self.DEFAULT_BASE_URL

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.timeout,
        )

    def _format_messages_for_api(
        self, messages: list[Message], system_prompt: Optional[str] = None
    ) -> list[dict[str, Any]]:
        """Convert messages to Ollama format.

        Ollama uses an OpenAI-like message format, but tool call
        arguments are sent as objects rather than JSON strings.
        """
        api_messages = []

        if system_prompt:
            api_messages.append({
                "role": "system",
                "content": system_prompt,
            })

        for msg in messages:
            if msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                api_messages.append({
                    "role": "assistant",
                    "content": msg.content or "",
                    "tool_calls": [
                        {"function": {"name": tc.name, "arguments": tc.arguments}}
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
        """Convert tools to Ollama format (OpenAI-compatible)."""
        return [tool.to_openai_format() for tool in tools]

    async def chat(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Generate a streaming response using Ollama.

        Args:
            messages: Conversation history
            tools: Available tools (optional, model-dependent)
            system_prompt: System prompt
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Yields:
            ChatEvent objects
        """

        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": self._format_messages_for_api(messages, system_prompt),
            "stream": True,
            "options": {
                "temperature": self._temperature(temperature),
            },
        }

        if max_tokens:
            payload["options"]["num_predict"] = max_tokens

        if tools:
            payload["tools"] = self._format_tools_for_api(tools)

        try:
            async with self.client.stream(
                "POST",
                "/api/chat",
                json=payload,
            ) as response:
                response.raise_for_status()

                # Newline-delimited JSON stream
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue

                    try:
                        chunk = json.loads(line)
                    except json.JSONDecodeError as e:
                        logger.warning(f"Failed to parse Ollama response: {e}")
                        continue

                    message = chunk.get("message", {})
                    content = message.get("content", "")

                    if content:
                        yield self._create_text_delta(content)

                    for tool_call in message.get("tool_calls", []):
                        function = tool_call.get("function", {})
                        tool_name = function.get("name")
                        tool_args = function.get("arguments", {})
                        # Ollama usually omits ids; the orchestrator assigns them
                        tool_id = tool_call.get("id")

                        if not tool_name:
                            continue
                        if isinstance(tool_args, str):
                            try:
                                tool_args = json.loads(tool_args)
                            except json.JSONDecodeError:
                                tool_args = {"raw": tool_args}

                        yield self._create_tool_call_start(tool_id, tool_name)
                        yield self._create_tool_call_end(tool_id, tool_args or {})

                    if chunk.get("done"):
                        yield self._create_done()
                        break

        except httpx.HTTPStatusError as e:
            error_msg = f"Ollama API error: {e.response.status_code}"
            logger.error(error_msg)
            yield self._create_error(error_msg, ErrorType.API_ERROR)

        except httpx.TimeoutException as e:
            error_msg = f"Ollama request timeout: {e}"
            logger.error(error_msg)
            yield self._create_error(error_msg, ErrorType.TIMEOUT)

        except httpx.RequestError as e:
            error_msg = f"Ollama connection error: {e}"
            logger.error(error_msg)
            yield self._create_error(error_msg, ErrorType.FATAL)

        except Exception as e:
            error_msg = f"Unexpected error in Ollama provider: {e}"
            logger.exception(error_msg)
            yield self._create_error(error_msg, ErrorType.FATAL)

    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate a completion constrained by Ollama's `format` schema.

        Raises:
            LLMProviderError: On transport errors or malformed output
        """
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": self._format_messages_for_api(messages),
            "stream": False,
            "format": schema.model_json_schema(),
            "options": {"temperature": self.config.temperature},
        }

        try:
            response = await self.client.post("/api/chat", json=payload)
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            raise LLMProviderError(
                f"Ollama API error: {e.response.status_code}",
                error_type=ErrorType.API_ERROR,
            ) from e

        except httpx.TimeoutException as e:
            raise LLMProviderError(
                f"Ollama request timeout: {e}",
                error_type=ErrorType.TIMEOUT,
            ) from e

        except httpx.RequestError as e:
            raise LLMProviderError(
                f"Ollama connection error: {e}",
                error_type=ErrorType.FATAL,
            ) from e

        except ValueError as e:
            logger.error(f"Ollama returned a non-JSON body: {e}")
            raise LLMProviderError(
                f"Malformed Ollama response: {e}",
                error_type=ErrorType.FATAL,
            ) from e

        return self._parse_structured(schema, data.get("message", {}).get("content"))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
