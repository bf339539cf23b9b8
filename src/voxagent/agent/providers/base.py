"""
Base LLM Provider Implementation.

Provides common functionality for all LLM providers: event creation,
accumulation of streamed events into assistant messages, and parsing
of schema-constrained output.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

from pydantic import ValidationError

from ...errors import AppError
from ..domain.entities import (
    ChatEvent,
    ChatEventType,
    ErrorType,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
)
from ..domain.ports import ILLMProvider, SchemaT

logger = logging.getLogger(__name__)


class LLMProviderError(AppError):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.API_ERROR,
    ):
        super().__init__(message, status_code=502, code=error_type.value)
        self.error_type = error_type


@dataclass
class LLMProviderConfig:
    """Configuration for LLM providers.

    Attributes:
        api_key: API key for the provider
        model: Model name to use
        base_url: Optional custom base URL
        timeout: Request timeout in seconds
        max_retries: Maximum retry attempts
        temperature: Default temperature
        max_tokens: Default max tokens
    """

    api_key: str
    model: str
    base_url: Optional[str] = None
    timeout: float = 60.0
    max_retries: int = 3
    temperature: float = 0.0
    max_tokens: int = 4096
    extra: dict[str, Any] = field(default_factory=dict)


class BaseLLMProvider(ILLMProvider, ABC):
    """Base class for LLM provider implementations.

    Subclasses implement the streaming chat() call and the
    schema-constrained complete_structured() call; respond() and
    complete() are derived from chat().
    """

    def __init__(self, config: LLMProviderConfig):
        """Initialize the provider.

        Args:
            config: Provider configuration
        """
        self.config = config

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self.config.model

    def _temperature(self, temperature: Optional[float]) -> float:
        return self.config.temperature if temperature is None else temperature

    def _create_text_delta(self, text: str) -> ChatEvent:
        """Create a text delta event."""
        return ChatEvent(
            type=ChatEventType.TEXT_DELTA,
            content=text,
        )

    def _create_tool_call_start(self, tool_call_id: Optional[str], name: str) -> ChatEvent:
        """Create a tool call start event."""
        return ChatEvent(
            type=ChatEventType.TOOL_CALL_START,
            tool_call_id=tool_call_id,
            tool_name=name,
        )

    def _create_tool_call_end(self, tool_call_id: Optional[str], arguments: dict) -> ChatEvent:
        """Create a tool call end event."""
        return ChatEvent(
            type=ChatEventType.TOOL_CALL_END,
            tool_call_id=tool_call_id,
            tool_arguments=arguments,
        )

    def _create_error(self, message: str, error_type: ErrorType) -> ChatEvent:
        """Create an error event."""
        return ChatEvent(
            type=ChatEventType.ERROR,
            content=message,
            error=message,
            error_type=error_type,
        )

    def _create_done(self) -> ChatEvent:
        """Create a done event."""
        return ChatEvent(type=ChatEventType.DONE)

    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tool definitions to API format.

        Subclasses should override for provider-specific formatting.
        """
        raise NotImplementedError("Subclass must implement _format_tools_for_api")

    async def respond(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
    ) -> Message:
        """Collect one streamed response into an assistant message.

        Raises:
            LLMProviderError: If the stream reports an error
        """
        text_parts: list[str] = []
        # [id, name, arguments, ended]
        pending: list[list[Any]] = []

        async for event in self.chat(messages=messages, tools=tools):
            if event.type == ChatEventType.TEXT_DELTA:
                text_parts.append(event.content or "")

            elif event.type == ChatEventType.TOOL_CALL_START:
                pending.append([event.tool_call_id, event.tool_name or "", {}, False])

            elif event.type == ChatEventType.TOOL_CALL_END:
                slot = _find_open_slot(pending, event.tool_call_id)
                if slot is None:
                    logger.warning(f"Tool call end without start: {event.tool_call_id}")
                    continue
                slot[2] = event.tool_arguments or {}
                slot[3] = True

            elif event.type == ChatEventType.ERROR:
                raise LLMProviderError(
                    event.error or "LLM completion failed",
                    error_type=event.error_type or ErrorType.FATAL,
                )

            elif event.type == ChatEventType.DONE:
                break

        tool_calls = [
            ToolCall(id=tc_id, name=name, arguments=arguments)
            for tc_id, name, arguments, _ in pending
            if name
        ]
        return Message(
            role=MessageRole.ASSISTANT,
            content="".join(text_parts),
            tool_calls=tool_calls or None,
        )

    async def complete(self, messages: list[Message]) -> str:
        """Generate a free-form text completion (no tools)."""
        response = await self.respond(messages)
        return response.content

    def _parse_structured(self, schema: type[SchemaT], raw: Any) -> SchemaT:
        """Validate raw model output against a schema.

        Args:
            schema: Pydantic model to validate against
            raw: JSON text or already-decoded object

        Returns:
            Schema instance

        Raises:
            LLMProviderError: If the output is missing or malformed
        """
        if raw is None or raw == "":
            raise LLMProviderError(
                f"Empty structured response for {schema.__name__}",
                error_type=ErrorType.FATAL,
            )
        try:
            if isinstance(raw, (str, bytes)):
                return schema.model_validate_json(raw)
            return schema.model_validate(raw)
        except (ValidationError, json.JSONDecodeError) as e:
            logger.error(f"Malformed structured response for {schema.__name__}: {raw!r}")
            raise LLMProviderError(
                f"Malformed structured response for {schema.__name__}",
                error_type=ErrorType.FATAL,
            ) from e

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Generate a response. Must be implemented by subclasses."""
        pass

    @abstractmethod
    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate a schema-constrained completion. Must be implemented by subclasses."""
        pass

    async def close(self) -> None:
        """Release provider resources."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def _find_open_slot(pending: list[list[Any]], tool_call_id: Optional[str]) -> Optional[list[Any]]:
    """Find the started-but-not-ended tool call an end event belongs to."""
    if tool_call_id is not None:
        for slot in pending:
            if not slot[3] and slot[0] == tool_call_id:
                return slot
    for slot in pending:
        if not slot[3]:
            return slot
    return None
