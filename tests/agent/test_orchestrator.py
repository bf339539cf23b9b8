"""
End-to-end pipeline tests for AgentOrchestrator.

Each test scripts the LLM answers stage by stage:
intent -> targets -> aliases (structured), then loop turns (respond),
then summaries or plain chat replies (complete).
"""

import pytest

from conftest import FakeLLMProvider, FakeToolBackend, assistant

from voxagent.agent.alias_store import InMemoryAliasStore
from voxagent.agent.domain.entities import (
    GeneralChat,
    Intent,
    MessageRole,
    SetupRequired,
    ToolCall,
    ToolUse,
)
from voxagent.agent.orchestrator import AgentConfig, AgentOrchestrator
from voxagent.agent.providers.base import LLMProviderError
from voxagent.agent.tools.registry import ToolRegistry


def make_orchestrator(llm, backend, max_tool_iterations=10):
    return AgentOrchestrator(
        llm_provider=llm,
        tool_registry=ToolRegistry(backend),
        config=AgentConfig(max_tool_iterations=max_tool_iterations),
    )


@pytest.fixture
def slack_store():
    return InMemoryAliasStore.from_payload(
        {"SLACK": [{"name": "general", "value": "C123"}, {"name": "random", "value": "C456"}]}
    )


class TestGeneralChat:
    """Scenario: small talk never touches tools."""

    @pytest.mark.asyncio
    async def test_hello_gets_direct_reply(self, fake_backend, slack_store):
        llm = FakeLLMProvider(
            structured=[{"intent": "GENERAL_CHAT"}],
            completions=["Hi! How can I help?"],
        )
        reply = await make_orchestrator(llm, fake_backend).handle("hello", slack_store)

        assert reply.content == "Hi! How can I help?"
        assert reply.intent == Intent.GENERAL_CHAT
        # Only the classifier used a structured call
        assert len(llm.structured_calls) == 1
        assert llm.respond_calls == []
        assert fake_backend.list_calls == []

    @pytest.mark.asyncio
    async def test_reply_uses_only_the_utterance(self, fake_backend, slack_store):
        llm = FakeLLMProvider(structured=[{"intent": "GENERAL_CHAT"}], completions=["ok"])
        await make_orchestrator(llm, fake_backend).handle("tell me a joke", slack_store)

        (messages,) = llm.complete_calls
        assert len(messages) == 1
        assert messages[0].role == MessageRole.USER
        assert messages[0].content == "tell me a joke"

    @pytest.mark.asyncio
    async def test_route_is_general_chat(self, fake_backend, slack_store):
        llm = FakeLLMProvider(structured=[{"intent": "GENERAL_CHAT"}])
        intent, route = await make_orchestrator(llm, fake_backend).route("hello", slack_store)
        assert intent == Intent.GENERAL_CHAT
        assert route == GeneralChat(utterance="hello")


class TestToolUse:
    """Scenario: a Slack request runs through every stage."""

    @pytest.mark.asyncio
    async def test_send_message_to_general(self, fake_backend, slack_store):
        llm = FakeLLMProvider(
            structured=[
                {"intent": "TOOL_USE"},
                {"apps": ["SLACK"]},
                {"aliases": ["general"]},
            ],
            responses=[
                assistant("", [ToolCall(
                    id="call_1",
                    name="SLACK_SEND_MESSAGE",
                    arguments={"channel": "C123", "text": "hi"},
                )]),
                assistant("Done! I posted 'hi' to #general."),
            ],
        )
        reply = await make_orchestrator(llm, fake_backend).handle(
            "send a message to #general on slack", slack_store
        )

        assert reply.content == "Done! I posted 'hi' to #general."
        assert reply.intent == Intent.TOOL_USE
        assert reply.target_apps == ["SLACK"]
        assert reply.iterations == 2
        assert reply.tool_calls_executed == 1
        assert not reply.exhausted

        first_transcript, _ = llm.respond_calls[0]
        assert "general = C123" in first_transcript[1].content
        assert "random = C456" not in first_transcript[1].content
        assert [c.name for c in fake_backend.executed] == ["SLACK_SEND_MESSAGE"]

    @pytest.mark.asyncio
    async def test_route_carries_context(self, fake_backend, slack_store):
        llm = FakeLLMProvider(
            structured=[{"intent": "TOOL_USE"}, {"apps": ["slack"]}, {"aliases": ["general"]}],
        )
        intent, route = await make_orchestrator(llm, fake_backend).route(
            "post to #general", slack_store
        )

        assert intent == Intent.TOOL_USE
        assert isinstance(route, ToolUse)
        assert route.target_apps == ("SLACK",)
        assert route.contextualized_message.endswith("--- Relevant Parameters ---\ngeneral = C123")

    @pytest.mark.asyncio
    async def test_matcher_failure_still_runs_loop(self, fake_backend, slack_store):
        """A failed alias match sends the bare utterance to the loop."""
        llm = FakeLLMProvider(
            structured=[{"intent": "TOOL_USE"}, {"apps": ["SLACK"]}, LLMProviderError("bad json")],
            responses=[assistant("I need a channel.")],
        )
        reply = await make_orchestrator(llm, fake_backend).handle("post hi", slack_store)

        assert reply.content == "I need a channel."
        first_transcript, _ = llm.respond_calls[0]
        assert first_transcript[1].content == "post hi"

    @pytest.mark.asyncio
    async def test_exhaustion_returns_summary(self, fake_backend, slack_store):
        """The loop bound comes from AgentConfig and exhaustion is summarized."""
        llm = FakeLLMProvider(
            structured=[{"intent": "TOOL_USE"}, {"apps": ["SLACK"]}, {"aliases": []}],
            default_response=lambda: assistant("", [ToolCall(
                name="SLACK_SEND_MESSAGE", arguments={"channel": "C123", "text": "x"},
            )]),
            completions=["All set! Sent your messages."],
        )
        reply = await make_orchestrator(llm, fake_backend, 3).handle("spam", slack_store)

        assert reply.content == "All set! Sent your messages."
        assert reply.exhausted
        assert len(llm.respond_calls) == 3

    @pytest.mark.asyncio
    async def test_classifier_failure_propagates(self, fake_backend, slack_store):
        llm = FakeLLMProvider(structured=[LLMProviderError("malformed")])
        with pytest.raises(LLMProviderError):
            await make_orchestrator(llm, fake_backend).handle("x", slack_store)


class TestSetupRequired:
    """Scenario: missing configuration short-circuits before the loop."""

    @pytest.mark.asyncio
    async def test_no_integrations_configured(self, fake_backend):
        llm = FakeLLMProvider(structured=[{"intent": "TOOL_USE"}])
        reply = await make_orchestrator(llm, fake_backend).handle(
            "post to slack", InMemoryAliasStore()
        )

        assert reply.content == (
            "I can't perform any actions yet. Please add some integration "
            "parameters in the settings first."
        )
        assert len(llm.structured_calls) == 1

    @pytest.mark.asyncio
    async def test_no_target_resolved(self, fake_backend, slack_store):
        llm = FakeLLMProvider(structured=[{"intent": "TOOL_USE"}, {"apps": ["TRELLO"]}])
        reply = await make_orchestrator(llm, fake_backend).handle("make a card", slack_store)

        assert reply.content.startswith("I can't perform any actions yet.")
        assert llm.respond_calls == []

    @pytest.mark.asyncio
    async def test_target_without_aliases(self, fake_backend):
        """An integration with zero aliases asks for its parameters; no matcher, no loop."""
        store = InMemoryAliasStore.from_payload({
            "SLACK": [{"name": "general", "value": "C123"}],
            "GITHUB": [],
        })
        llm = FakeLLMProvider(structured=[{"intent": "TOOL_USE"}, {"apps": ["github"]}])
        orchestrator = make_orchestrator(llm, fake_backend)

        intent, route = await orchestrator.route("open an issue", store)
        assert route == SetupRequired(
            message="To work with GITHUB, you first need to add its required "
            "parameters (like a channel ID or URL) in the settings."
        )
        # Classifier and resolver only
        assert len(llm.structured_calls) == 2
        assert fake_backend.list_calls == []

    @pytest.mark.asyncio
    async def test_setup_reply_content(self, fake_backend):
        store = InMemoryAliasStore.from_payload({"GITHUB": []})
        llm = FakeLLMProvider(structured=[{"intent": "TOOL_USE"}, {"apps": ["GITHUB"]}])
        reply = await make_orchestrator(llm, fake_backend).handle("open an issue", store)

        assert "To work with GITHUB" in reply.content
        assert reply.intent == Intent.TOOL_USE
        assert reply.iterations == 0


class TestConcurrentRequests:
    """One orchestrator instance holds no per-request state."""

    @pytest.mark.asyncio
    async def test_separate_stores_do_not_leak(self, slack_send_tool):
        backend = FakeToolBackend(tools=[slack_send_tool])
        llm = FakeLLMProvider(
            structured=[
                {"intent": "TOOL_USE"}, {"apps": ["SLACK"]}, {"aliases": ["general"]},
                {"intent": "TOOL_USE"}, {"apps": ["SLACK"]}, {"aliases": ["general"]},
            ],
            responses=[assistant("first"), assistant("second")],
        )
        orchestrator = make_orchestrator(llm, backend)

        store_a = InMemoryAliasStore.from_payload({"SLACK": [{"name": "general", "value": "A1"}]})
        store_b = InMemoryAliasStore.from_payload({"SLACK": [{"name": "general", "value": "B2"}]})

        await orchestrator.handle("post", store_a)
        await orchestrator.handle("post", store_b)

        first, _ = llm.respond_calls[0]
        second, _ = llm.respond_calls[1]
        assert "general = A1" in first[1].content
        assert "general = B2" in second[1].content
        assert len(second) == 2
