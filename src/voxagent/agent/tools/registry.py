"""
Tool Registry.

Provides tool discovery (per integration set) and execution routing
for the tool-calling loop.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..domain.entities import ToolCall, ToolDefinition
from ..domain.ports import IToolBackend

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry of backend tools, keyed by integration set.

    Usage:
        registry = ToolRegistry(backend)

        tools = await registry.get_tools(["SLACK"])

        content = await registry.execute_tool_call(tool_call)

    Architecture:
        - Tools are discovered dynamically from the backend
        - Discovery results are cached per integration set for
          TOOL_CACHE_TTL_SECONDS; the cache holds no per-user state
    """

    TOOL_CACHE_TTL_SECONDS = 300

    def __init__(
        self,
        backend: IToolBackend,
        cache_ttl_seconds: Optional[float] = None,
    ):
        """Initialize the tool registry.

        Args:
            backend: Tool-execution backend
            cache_ttl_seconds: Override for the discovery cache TTL (0 disables)
        """
        self.backend = backend
        self.cache_ttl_seconds = (
            self.TOOL_CACHE_TTL_SECONDS if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self._tools_cache: dict[frozenset[str], tuple[float, list[ToolDefinition]]] = {}

    async def get_tools(
        self,
        integrations: list[str],
        refresh: bool = False,
    ) -> list[ToolDefinition]:
        """Get the tools available for a set of integrations.

        Integration names are upper-cased before they reach the backend.

        Args:
            integrations: Integration identifiers in any casing
            refresh: Bypass the cache

        Returns:
            List of tool definitions (may be empty)
        """
        names = list(dict.fromkeys(i.upper() for i in integrations))
        if not names:
            return []

        key = frozenset(names)
        cached = self._tools_cache.get(key)
        if (
            cached
            and not refresh
            and time.monotonic() - cached[0] < self.cache_ttl_seconds
        ):
            return list(cached[1])

        tools = await self.backend.list_tools(names)
        logger.info(f"Tool registry loaded {len(tools)} tools for {', '.join(names)}")

        if tools:
            self._tools_cache[key] = (time.monotonic(), tools)

        return list(tools)

    async def execute_tool_call(self, tool_call: ToolCall) -> str:
        """Execute a tool call on the backend.

        Args:
            tool_call: Tool call from the LLM (id already assigned)

        Returns:
            Result content

        Raises:
            ToolBackendError: Propagated from the backend
        """
        logger.debug(f"Executing tool: {tool_call.name}")
        return await self.backend.execute(tool_call)

    def clear_cache(self) -> None:
        """Clear the tools cache.

        Call this to force re-discovery of tools.
        """
        self._tools_cache.clear()
