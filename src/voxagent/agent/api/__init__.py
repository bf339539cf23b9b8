"""Agent API layer.

Provides the FastAPI router for the voice agent.
"""

from .router import (
    create_agent_dependencies,
    get_orchestrator,
    router,
    validation_exception_handler,
)
from .schemas import (
    AliasSchema,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "router",
    "create_agent_dependencies",
    "get_orchestrator",
    "validation_exception_handler",
    "AliasSchema",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "HealthResponse",
]
