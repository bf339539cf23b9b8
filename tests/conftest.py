"""
Shared fixtures: scripted LLM provider and in-memory tool backend.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Optional, Union

import pytest

from voxagent.agent.domain.entities import (
    ChatEvent,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
)
from voxagent.agent.domain.ports import ILLMProvider, IToolBackend


class FakeLLMProvider(ILLMProvider):
    """LLM provider that replays scripted answers and records every call.

    structured: answers for complete_structured(), consumed in order.
        Each entry is a dict (validated against the requested schema),
        a schema instance, or an Exception to raise.
    responses: assistant messages for respond(), consumed in order.
        When exhausted, default_response() is used if set.
    completions: strings (or Exceptions) for complete().
    """

    def __init__(
        self,
        structured: Optional[list[Any]] = None,
        responses: Optional[list[Union[Message, Exception]]] = None,
        completions: Optional[list[Union[str, Exception]]] = None,
        default_response: Optional[Callable[[], Message]] = None,
    ):
        self.structured = list(structured or [])
        self.responses = list(responses or [])
        self.completions = list(completions or [])
        self.default_response = default_response

        self.structured_calls: list[tuple[list[Message], type]] = []
        self.respond_calls: list[tuple[list[Message], Optional[list[ToolDefinition]]]] = []
        self.complete_calls: list[list[Message]] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def chat(
        self,
        messages,
        tools=None,
        system_prompt=None,
        temperature=None,
        max_tokens=None,
    ) -> AsyncIterator[ChatEvent]:
        raise NotImplementedError
        yield  # pragma: no cover

    async def respond(self, messages, tools=None) -> Message:
        # Snapshot: the loop keeps appending to the same list
        self.respond_calls.append((list(messages), tools))
        if self.responses:
            answer = self.responses.pop(0)
        elif self.default_response is not None:
            answer = self.default_response()
        else:
            raise AssertionError("FakeLLMProvider ran out of scripted responses")
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def complete(self, messages) -> str:
        self.complete_calls.append(list(messages))
        if not self.completions:
            raise AssertionError("FakeLLMProvider ran out of scripted completions")
        answer = self.completions.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def complete_structured(self, messages, schema):
        self.structured_calls.append((list(messages), schema))
        if not self.structured:
            raise AssertionError("FakeLLMProvider ran out of scripted structured answers")
        answer = self.structured.pop(0)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, dict):
            return schema.model_validate(answer)
        return answer


class FakeToolBackend(IToolBackend):
    """Tool backend serving fixed definitions and scripted results."""

    def __init__(
        self,
        tools: Optional[list[ToolDefinition]] = None,
        results: Optional[dict[str, Union[str, Exception]]] = None,
    ):
        self.tools = list(tools or [])
        self.results = dict(results or {})
        self.list_calls: list[list[str]] = []
        self.executed: list[ToolCall] = []
        self.closed = False

    async def list_tools(self, integrations: list[str]) -> list[ToolDefinition]:
        self.list_calls.append(list(integrations))
        wanted = set(integrations)
        return [t for t in self.tools if t.integration is None or t.integration in wanted]

    async def execute(self, tool_call: ToolCall) -> str:
        self.executed.append(tool_call)
        result = self.results.get(tool_call.name, '{"ok": true}')
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


def assistant(content: str = "", tool_calls: Optional[list[ToolCall]] = None) -> Message:
    """Build an assistant message."""
    return Message(role=MessageRole.ASSISTANT, content=content, tool_calls=tool_calls)


@pytest.fixture
def slack_send_tool():
    return ToolDefinition(
        name="SLACK_SEND_MESSAGE",
        description="Send a message to a Slack channel",
        parameters={
            "type": "object",
            "properties": {
                "channel": {"type": "string"},
                "text": {"type": "string"},
            },
            "required": ["channel", "text"],
        },
        integration="SLACK",
    )


@pytest.fixture
def fake_backend(slack_send_tool):
    return FakeToolBackend(tools=[slack_send_tool])
