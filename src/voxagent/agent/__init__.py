"""
Voice Agent Module.

Turns a natural-language utterance into either a direct chat reply or
a sequence of tool actions executed by an external backend, followed
by a short summary of what was done.

Architecture:
- Domain: Core entities and port interfaces
- Providers: LLM provider implementations (GPT, Claude, Ollama)
- Tools: Tool-backend client and tool registry
- Orchestrator: Intent, target, parameter and tool-loop stages
- API: FastAPI router
"""

# Domain entities
from .domain.entities import (
    AgentReply,
    Alias,
    ChatEvent,
    ChatEventType,
    ErrorType,
    Intent,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
    ToolResult,
)

# Alias store
from .alias_store import InMemoryAliasStore

# Orchestrator
from .orchestrator import AgentConfig, AgentOrchestrator

# Tools
from .tools import ToolBackendClient, ToolBackendConfig, ToolBackendError, ToolRegistry

# Providers
from .providers import (
    AnthropicProvider,
    BaseLLMProvider,
    LLMProviderConfig,
    LLMProviderError,
    OllamaProvider,
    OpenAIProvider,
)

__all__ = [
    # Domain
    "AgentReply",
    "Alias",
    "ChatEvent",
    "ChatEventType",
    "ErrorType",
    "Intent",
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    # Alias store
    "InMemoryAliasStore",
    # Orchestrator
    "AgentOrchestrator",
    "AgentConfig",
    # Tools
    "ToolBackendClient",
    "ToolBackendConfig",
    "ToolBackendError",
    "ToolRegistry",
    # Providers
    "BaseLLMProvider",
    "LLMProviderConfig",
    "LLMProviderError",
    "AnthropicProvider",
    "OpenAIProvider",
    "OllamaProvider",
]
