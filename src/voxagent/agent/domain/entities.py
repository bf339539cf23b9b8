"""
Domain entities for the voice agent.

These are pure domain objects with no infrastructure dependencies.
They define the core data structures used throughout the agent module.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

# ============================================
# Aliases
# ============================================


@dataclass(frozen=True)
class Alias:
    """A user-defined shortcut for an integration parameter.

    Attributes:
        name: Human-friendly name (e.g., 'general')
        value: Integration-specific value (e.g., a channel ID 'C123')
    """

    name: str
    value: str


# Integration identifier -> ordered aliases owned by that integration
IntegrationAliasMap = dict[str, list[Alias]]


# ============================================
# Intent
# ============================================


class Intent(str, Enum):
    """What the user wants the agent to do with an utterance."""

    TOOL_USE = "TOOL_USE"
    GENERAL_CHAT = "GENERAL_CHAT"


# ============================================
# Message Types
# ============================================


class MessageRole(str, Enum):
    """Role of a message in a conversation transcript."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


@dataclass
class Message:
    """A single message in a conversation transcript.

    Attributes:
        role: Message role (user, assistant, system, tool)
        content: Message text content
        tool_calls: Tool calls requested by the model (assistant messages)
        tool_call_id: ID of the tool call this message answers (tool messages)
    """

    role: MessageRole
    content: str
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: Optional[str] = None

    @property
    def has_tool_calls(self) -> bool:
        """Check if the model requested any tool calls in this message."""
        return bool(self.tool_calls)

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
        }
        if self.tool_calls:
            result["tool_calls"] = [
                {"id": tc.id, "name": tc.name, "arguments": tc.arguments}
                for tc in self.tool_calls
            ]
        if self.tool_call_id is not None:
            result["tool_call_id"] = self.tool_call_id
        return result


# ============================================
# Tool System
# ============================================


@dataclass
class ToolDefinition:
    """Definition of a callable tool offered by the tool backend.

    Attributes:
        name: Tool name (e.g., 'SLACK_SEND_MESSAGE')
        description: Human-readable description
        parameters: JSON Schema for parameters
        integration: Integration the tool belongs to (e.g., 'SLACK')
    """

    name: str
    description: str
    parameters: dict[str, Any]
    integration: Optional[str] = None

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic tool use format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


@dataclass
class ToolCall:
    """A tool call requested by the LLM.

    The id may be missing when a provider does not supply one; the
    orchestrator assigns one before dispatch.

    Attributes:
        name: Tool name being called
        arguments: Arguments passed to the tool
        id: Tool call identifier (for result correlation)
    """

    name: str
    arguments: dict[str, Any]
    id: Optional[str] = None

    def ensure_id(self) -> str:
        """Assign a fresh unique ID if none was supplied and return it."""
        if not self.id:
            self.id = str(uuid.uuid4())
        return self.id


@dataclass
class ToolResult:
    """Result from a tool execution.

    Attributes:
        tool_call_id: ID of the tool call this is a result for
        content: Result content (if successful)
        error: Error description (if failed)
        latency_ms: Execution time in milliseconds
    """

    tool_call_id: str
    content: Optional[str] = None
    error: Optional[str] = None
    latency_ms: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_message(self) -> Message:
        """Render as a tool-role transcript message."""
        if self.success:
            content = self.content or ""
        else:
            content = f"Error executing tool: {self.error}"
        return Message(
            role=MessageRole.TOOL,
            content=content,
            tool_call_id=self.tool_call_id,
        )


# ============================================
# Streaming Events
# ============================================


class ChatEventType(str, Enum):
    """Types of streaming chat events."""

    TEXT_DELTA = "text_delta"  # Partial text token
    TOOL_CALL_START = "tool_call_start"  # Tool invocation begins
    TOOL_CALL_END = "tool_call_end"  # Tool invocation ends
    ERROR = "error"  # Error occurred
    DONE = "done"  # Stream finished


class ErrorType(str, Enum):
    """Types of errors in streaming."""

    API_ERROR = "api_error"  # Provider returned an error response
    FATAL = "fatal"  # Must abort
    TIMEOUT = "timeout"  # LLM timeout
    RATE_LIMIT = "rate_limit"  # Rate limited, back off


@dataclass
class ChatEvent:
    """A streaming chat event.

    Attributes:
        type: Event type
        content: Text content (for TEXT_DELTA, ERROR)
        tool_call_id: Links TOOL_CALL_* events
        tool_name: Tool name (for TOOL_CALL_START)
        tool_arguments: Tool arguments (for TOOL_CALL_END)
        error: Error message (for ERROR events)
        error_type: Type of error
    """

    type: ChatEventType
    content: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None
    tool_arguments: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None


# ============================================
# Pipeline Routes
# ============================================


@dataclass(frozen=True)
class GeneralChat:
    """Route: answer the utterance directly, no tools."""

    utterance: str


@dataclass(frozen=True)
class ToolUse:
    """Route: drive the tool-calling loop for the resolved integrations."""

    target_apps: tuple[str, ...]
    contextualized_message: str


@dataclass(frozen=True)
class SetupRequired:
    """Route: the user must configure integration parameters first."""

    message: str


Route = Union[GeneralChat, ToolUse, SetupRequired]


# ============================================
# Results
# ============================================


class LoopState(str, Enum):
    """States of the tool-calling loop."""

    FETCHING_TOOLS = "fetching_tools"
    NO_TOOLS = "no_tools"
    ITERATING = "iterating"
    RESOLVED = "resolved"
    ITERATIONS_EXHAUSTED = "iterations_exhausted"


@dataclass
class LoopResult:
    """Outcome of one tool-calling loop run.

    Attributes:
        text: Final user-facing text
        state: Terminal loop state
        iterations: Number of model invocations performed
        tool_calls_executed: Total tool calls executed across iterations
    """

    text: str
    state: LoopState
    iterations: int = 0
    tool_calls_executed: int = 0

    @property
    def exhausted(self) -> bool:
        return self.state == LoopState.ITERATIONS_EXHAUSTED


@dataclass
class AgentReply:
    """Final reply for one utterance.

    Attributes:
        content: Text shown (and optionally spoken) to the user
        intent: Classified intent
        target_apps: Integrations the request was resolved to
        iterations: Tool loop model invocations (0 when the loop did not run)
        tool_calls_executed: Tool calls executed by the loop
        exhausted: True if the loop hit its iteration bound
    """

    content: str
    intent: Intent
    target_apps: list[str] = field(default_factory=list)
    iterations: int = 0
    tool_calls_executed: int = 0
    exhausted: bool = False
