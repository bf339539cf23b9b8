"""
Tool Executor.

Handles execution of one turn's tool calls with error isolation.
Coordinates with ToolRegistry to route tool calls to the backend.
"""

from __future__ import annotations

import logging
import time

from ..domain.entities import ToolCall, ToolResult
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Executes tool calls with error handling.

    Ensures that tool execution errors are caught and returned as error
    results rather than propagating exceptions, so the model can see
    the failure and react to it.

    Usage:
        executor = ToolExecutor(tool_registry)

        results = await executor.execute_tool_calls(response.tool_calls)

    Architecture:
        - Delegates to ToolRegistry for actual execution
        - Catches all exceptions and converts them to error results
        - Every call yields exactly one ToolResult with the call's id
    """

    def __init__(self, tool_registry: ToolRegistry):
        """Initialize the tool executor.

        Args:
            tool_registry: Registry for tool discovery and execution
        """
        self.tools = tool_registry

    async def execute_tool_call(self, tool_call: ToolCall) -> ToolResult:
        """Execute a tool call with error handling.

        Args:
            tool_call: Tool call to execute

        Returns:
            ToolResult carrying either content or an error description
        """
        tool_call_id = tool_call.ensure_id()
        logger.info(f"Executing tool: {tool_call.name}")
        start = time.monotonic()

        try:
            content = await self.tools.execute_tool_call(tool_call)
            latency_ms = int((time.monotonic() - start) * 1000)
            logger.debug(f"Tool {tool_call.name} result: {content}")
            return ToolResult(
                tool_call_id=tool_call_id,
                content=content,
                latency_ms=latency_ms,
            )

        except Exception as e:
            latency_ms = int((time.monotonic() - start) * 1000)
            logger.error(f"Tool execution failed: {tool_call.name}: {e}")
            return ToolResult(
                tool_call_id=tool_call_id,
                error=str(e) or type(e).__name__,
                latency_ms=latency_ms,
            )

    async def execute_tool_calls(self, tool_calls: list[ToolCall]) -> list[ToolResult]:
        """Execute multiple tool calls sequentially.

        Executes each tool call in the order the model issued them. A
        failed tool call does not stop execution of subsequent tools.

        Args:
            tool_calls: List of tool calls to execute

        Returns:
            One ToolResult per call, in the same order
        """
        results = []
        for tool_call in tool_calls:
            result = await self.execute_tool_call(tool_call)
            results.append(result)

        return results
