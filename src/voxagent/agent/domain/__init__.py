"""Agent domain layer.

Pure domain entities and port interfaces with no infrastructure
dependencies.
"""

from .entities import (
    AgentReply,
    Alias,
    ChatEvent,
    ChatEventType,
    ErrorType,
    GeneralChat,
    Intent,
    IntegrationAliasMap,
    LoopResult,
    LoopState,
    Message,
    MessageRole,
    Route,
    SetupRequired,
    ToolCall,
    ToolDefinition,
    ToolResult,
    ToolUse,
)
from .ports import IAliasStore, ILLMProvider, IToolBackend

__all__ = [
    # Entities
    "AgentReply",
    "Alias",
    "ChatEvent",
    "ChatEventType",
    "ErrorType",
    "GeneralChat",
    "Intent",
    "IntegrationAliasMap",
    "LoopResult",
    "LoopState",
    "Message",
    "MessageRole",
    "Route",
    "SetupRequired",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "ToolUse",
    # Ports
    "IAliasStore",
    "ILLMProvider",
    "IToolBackend",
]
