"""Tool system for the agent.

Provides:
- HTTP client for the tool-execution backend
- Tool registry with per-integration-set discovery cache
"""

from .backend_client import ToolBackendClient, ToolBackendConfig, ToolBackendError
from .registry import ToolRegistry

__all__ = [
    "ToolBackendClient",
    "ToolBackendConfig",
    "ToolBackendError",
    "ToolRegistry",
]
