"""
Tool Backend Client.

Connects to a Composio-compatible action API to discover the actions
available for a set of integrations and to execute them against the
user's connected accounts.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from ...errors import AppError
from ..domain.entities import ToolCall, ToolDefinition
from ..domain.ports import IToolBackend

logger = logging.getLogger(__name__)


class ToolBackendError(AppError):
    """Error discovering or executing a backend tool."""

    def __init__(
        self,
        message: str,
        tool_name: str,
    ):
        super().__init__(message, status_code=502, code="tool_backend_error")
        self.tool_name = tool_name


@dataclass
class ToolBackendConfig:
    """Configuration for the tool backend client."""

    # Server connection
    base_url: str = "https://backend.composio.dev"
    timeout: float = 30.0
    max_retries: int = 3

    # Authentication
    api_key: Optional[str] = None

    # Connected-account owner actions execute on behalf of
    entity_id: str = "default"


class ToolBackendClient(IToolBackend):
    """HTTP client for the tool-execution backend.

    Usage:
        config = ToolBackendConfig(api_key="...")
        client = ToolBackendClient(config)

        tools = await client.list_tools(["SLACK"])

        result = await client.execute(
            ToolCall(id="call_1", name="SLACK_SEND_MESSAGE",
                     arguments={"channel": "C123", "text": "hi"})
        )

    Architecture:
        - GET  /api/v2/actions?apps=...            tool discovery
        - POST /api/v2/actions/{name}/execute      tool execution
        - One aiohttp session shared by concurrent requests
    """

    def __init__(self, config: ToolBackendConfig):
        """Initialize the backend client.

        Args:
            config: Client configuration
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _get_headers(self) -> dict[str, str]:
        """Build request headers with auth."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        return headers

    async def list_tools(self, integrations: list[str]) -> list[ToolDefinition]:
        """List the actions available for the given integrations.

        Args:
            integrations: Integration identifiers as the backend expects them

        Returns:
            List of tool definitions (may be empty)

        Raises:
            ToolBackendError: On transport or HTTP errors
        """
        if not integrations:
            return []

        session = await self._get_session()
        url = f"{self.config.base_url}/api/v2/actions"
        params = {"apps": ",".join(integrations)}

        try:
            async with session.get(
                url,
                headers=self._get_headers(),
                params=params,
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise ToolBackendError(
                        f"Failed to list tools: {response.status} - {text}",
                        tool_name="list_tools",
                    )

                data = await response.json()

        except aiohttp.ClientError as e:
            raise ToolBackendError(
                f"Failed to connect to tool backend: {e}",
                tool_name="list_tools",
            ) from e

        tools = []
        for item in data.get("items", []):
            name = item.get("name")
            if not name:
                continue
            app_name = item.get("appName") or item.get("appKey")
            tools.append(
                ToolDefinition(
                    name=name,
                    description=item.get("description", ""),
                    parameters=item.get("parameters") or {"type": "object", "properties": {}},
                    integration=app_name.upper() if app_name else None,
                )
            )

        logger.info(f"Discovered {len(tools)} tools for {', '.join(integrations)}")
        return tools

    async def execute(self, tool_call: ToolCall) -> str:
        """Execute a tool call on the backend.

        Args:
            tool_call: Tool call to execute

        Returns:
            Result payload rendered as a string

        Raises:
            ToolBackendError: On execution failure
        """
        session = await self._get_session()
        url = f"{self.config.base_url}/api/v2/actions/{tool_call.name}/execute"

        payload = {
            "input": tool_call.arguments,
            "entityId": self.config.entity_id,
        }

        for attempt in range(self.config.max_retries):
            try:
                async with session.post(
                    url,
                    headers=self._get_headers(),
                    json=payload,
                ) as response:
                    if response.status == 200:
                        data = await response.json()
                        return _render_execution_result(tool_call.name, data)

                    elif response.status == 404:
                        raise ToolBackendError(
                            f"Tool not found: {tool_call.name}",
                            tool_name=tool_call.name,
                        )

                    elif response.status == 429:
                        if attempt < self.config.max_retries - 1:
                            wait_time = 2 ** attempt
                            logger.warning(f"Rate limited, retrying in {wait_time}s")
                            await asyncio.sleep(wait_time)
                            continue

                        raise ToolBackendError(
                            "Rate limited by tool backend",
                            tool_name=tool_call.name,
                        )

                    else:
                        text = await response.text()
                        raise ToolBackendError(
                            f"Tool execution failed: {response.status} - {text}",
                            tool_name=tool_call.name,
                        )

            except aiohttp.ClientError as e:
                if attempt < self.config.max_retries - 1:
                    wait_time = 2 ** attempt
                    logger.warning(f"Connection error, retrying in {wait_time}s: {e}")
                    await asyncio.sleep(wait_time)
                    continue

                raise ToolBackendError(
                    f"Failed to connect to tool backend: {e}",
                    tool_name=tool_call.name,
                ) from e

        raise ToolBackendError(
            f"Tool execution failed after {self.config.max_retries} retries",
            tool_name=tool_call.name,
        )


def _render_execution_result(tool_name: str, data: dict[str, Any]) -> str:
    """Turn an execution response body into tool-message content.

    Raises:
        ToolBackendError: If the backend reports the action failed
    """
    # The backend has shipped both spellings of this flag
    successful = data.get("successful", data.get("successfull", True))
    if not successful or data.get("error"):
        raise ToolBackendError(
            f"{data.get('error') or 'Action reported failure'}",
            tool_name=tool_name,
        )

    result = data.get("data", data)
    if isinstance(result, str):
        return result
    return json.dumps(result)
