"""
Port interfaces (abstract base classes) for the agent module.

These define the contracts that adapters must implement.
Following the Ports & Adapters (Hexagonal) architecture pattern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, AsyncIterator, Optional, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from .entities import (
        Alias,
        ChatEvent,
        IntegrationAliasMap,
        Message,
        ToolCall,
        ToolDefinition,
    )

SchemaT = TypeVar("SchemaT", bound=BaseModel)


# ============================================
# LLM Provider Interface
# ============================================


class ILLMProvider(ABC):
    """Interface for LLM providers (GPT, Claude, Ollama, etc.).

    Implementations handle the specifics of each LLM API while
    providing a consistent interface to the orchestrator.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier (e.g., 'gpt-4o-mini')."""
        pass

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Generate a streaming response to the conversation.

        Args:
            messages: Conversation transcript
            tools: Available tools for the model to use
            system_prompt: System prompt to prepend
            temperature: Sampling temperature (provider default if None)
            max_tokens: Maximum tokens to generate

        Yields:
            ChatEvent objects representing the streaming response
        """
        pass

    @abstractmethod
    async def respond(
        self,
        messages: list[Message],
        tools: Optional[list[ToolDefinition]] = None,
    ) -> Message:
        """Generate one complete assistant message.

        The returned message carries the model's text and any tool
        calls it requested.

        Args:
            messages: Conversation transcript
            tools: Available tools for the model to use

        Returns:
            Assistant message
        """
        pass

    @abstractmethod
    async def complete(self, messages: list[Message]) -> str:
        """Generate a free-form text completion (no tools).

        Args:
            messages: Conversation transcript

        Returns:
            Generated text
        """
        pass

    @abstractmethod
    async def complete_structured(
        self,
        messages: list[Message],
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate a completion constrained to a schema.

        Args:
            messages: Conversation transcript
            schema: Pydantic model describing the expected output

        Returns:
            Instance of the schema

        Raises:
            LLMProviderError: If the call fails or the output does not
                conform to the schema
        """
        pass


# ============================================
# Tool Backend Interface
# ============================================


class IToolBackend(ABC):
    """Interface for the external tool-execution backend.

    The backend knows which actions exist for each integration and
    executes them against live external services.
    """

    @abstractmethod
    async def list_tools(self, integrations: list[str]) -> list[ToolDefinition]:
        """List callable tools for the given integrations.

        Args:
            integrations: Integration identifiers (e.g., ['SLACK'])

        Returns:
            List of tool definitions (may be empty)
        """
        pass

    @abstractmethod
    async def execute(self, tool_call: ToolCall) -> str:
        """Execute a tool call.

        Args:
            tool_call: Tool call with an assigned id

        Returns:
            Result content as a string

        Raises:
            ToolBackendError: On execution failure
        """
        pass

    async def close(self) -> None:
        """Release any held connections.

        Default no-op for backends that hold no connections.
        """
        pass


# ============================================
# Alias Store Interface
# ============================================


class IAliasStore(ABC):
    """Read-only view of the user's integration parameters."""

    @abstractmethod
    def get_aliases(self) -> IntegrationAliasMap:
        """Return the current integration -> aliases mapping."""
        pass

    @abstractmethod
    def integrations(self) -> list[str]:
        """Return configured integration identifiers, in caller order."""
        pass

    @abstractmethod
    def aliases_for(self, integration: str) -> list[Alias]:
        """Return the aliases of one integration (case-insensitive lookup)."""
        pass
