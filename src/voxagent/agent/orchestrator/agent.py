"""
Agent Orchestrator.

Main orchestration logic for the voice agent. Routes one utterance
through the pipeline:

- Intent classification (GENERAL_CHAT vs TOOL_USE)
- Target integration resolution
- Parameter (alias) matching and context composition
- The bounded tool-calling loop, with summarization on exhaustion
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.entities import (
    AgentReply,
    GeneralChat,
    Intent,
    Message,
    Route,
    SetupRequired,
    ToolUse,
)
from ..domain.ports import IAliasStore, ILLMProvider
from ..tools.registry import ToolRegistry
from . import prompts
from .context_composer import ContextComposer
from .intent_classifier import IntentClassifier
from .parameter_matcher import ParameterMatcher
from .summarizer import ActionSummarizer
from .target_resolver import TargetResolver
from .tool_executor import ToolExecutor
from .tool_loop import ToolCallingLoop

logger = logging.getLogger(__name__)


@dataclass
class AgentConfig:
    """Configuration for the agent orchestrator.

    Attributes:
        max_tool_iterations: Maximum model invocations per tool loop run
        summary_prefix_size: Transcript entries summarized on exhaustion
        tool_system_prompt: Instruction seeding the tool loop transcript
    """

    max_tool_iterations: int = 10
    summary_prefix_size: int = 4
    tool_system_prompt: str = prompts.TOOL_EXECUTION


class AgentOrchestrator:
    """Orchestrates the agent pipeline for one utterance at a time.

    The orchestrator holds no per-request state, so one instance serves
    concurrent requests. The alias store is passed per call.

    Usage:
        orchestrator = AgentOrchestrator(
            llm_provider=OpenAIProvider(config),
            tool_registry=ToolRegistry(backend),
        )

        reply = await orchestrator.handle(
            "send hi to #general on slack",
            InMemoryAliasStore.from_payload(payload),
        )
        print(reply.content)
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        tool_registry: ToolRegistry,
        config: Optional[AgentConfig] = None,
        intent_classifier: Optional[IntentClassifier] = None,
        target_resolver: Optional[TargetResolver] = None,
        parameter_matcher: Optional[ParameterMatcher] = None,
        context_composer: Optional[ContextComposer] = None,
        tool_loop: Optional[ToolCallingLoop] = None,
    ):
        """Initialize the orchestrator.

        Args:
            llm_provider: LLM provider shared by every stage
            tool_registry: Registry for tool discovery and execution
            config: Agent configuration
            intent_classifier: Override for the intent classifier
            target_resolver: Override for the target resolver
            parameter_matcher: Override for the parameter matcher
            context_composer: Override for the context composer
            tool_loop: Override for the tool-calling loop
        """
        self.llm = llm_provider
        self.tools = tool_registry
        self.config = config or AgentConfig()

        self.intent_classifier = intent_classifier or IntentClassifier(llm_provider)
        self.target_resolver = target_resolver or TargetResolver(llm_provider)
        self.parameter_matcher = parameter_matcher or ParameterMatcher(llm_provider)
        self.context_composer = context_composer or ContextComposer()
        self.tool_loop = tool_loop or ToolCallingLoop(
            llm_provider=llm_provider,
            tool_registry=tool_registry,
            tool_executor=ToolExecutor(tool_registry),
            summarizer=ActionSummarizer(llm_provider),
            max_iterations=self.config.max_tool_iterations,
            summary_prefix_size=self.config.summary_prefix_size,
            system_prompt=self.config.tool_system_prompt,
        )

    async def route(
        self,
        utterance: str,
        alias_store: IAliasStore,
    ) -> tuple[Intent, Route]:
        """Decide how an utterance should be handled.

        Args:
            utterance: Raw user message
            alias_store: The caller's integration parameters

        Returns:
            Tuple of (classified intent, route)

        Raises:
            LLMProviderError: If classification or resolution fails
        """
        intent = await self.intent_classifier.classify(utterance)

        if intent == Intent.GENERAL_CHAT:
            return intent, GeneralChat(utterance=utterance)

        available = alias_store.integrations()
        if not available:
            logger.warning("Tool use requested but no integrations are configured")
            return intent, SetupRequired(message=prompts.SETUP_NO_INTEGRATIONS)

        targets = await self.target_resolver.resolve(utterance, available)
        if not targets:
            logger.warning("No target integration resolved for tool use request")
            return intent, SetupRequired(message=prompts.SETUP_NO_INTEGRATIONS)

        candidates = []
        for app in targets:
            app_aliases = alias_store.aliases_for(app)
            if not app_aliases:
                logger.warning(f"Integration {app} has no parameters configured")
                return intent, SetupRequired(
                    message=prompts.SETUP_MISSING_PARAMETERS.format(app=app)
                )
            candidates.extend(app_aliases)

        relevant = await self.parameter_matcher.match(utterance, candidates)
        contextualized = self.context_composer.compose(utterance, relevant)

        return intent, ToolUse(
            target_apps=tuple(targets),
            contextualized_message=contextualized,
        )

    async def handle(
        self,
        utterance: str,
        alias_store: IAliasStore,
    ) -> AgentReply:
        """Process one utterance end to end.

        Args:
            utterance: Raw user message
            alias_store: The caller's integration parameters

        Returns:
            AgentReply with the text to show the user

        Raises:
            LLMProviderError: If a non-recoverable model call fails
        """
        intent, route = await self.route(utterance, alias_store)

        if isinstance(route, GeneralChat):
            content = await self.llm.complete([Message.user(route.utterance)])
            return AgentReply(content=content, intent=intent)

        if isinstance(route, SetupRequired):
            return AgentReply(content=route.message, intent=intent)

        if isinstance(route, ToolUse):
            result = await self.tool_loop.run(
                route.contextualized_message,
                list(route.target_apps),
            )
            return AgentReply(
                content=result.text,
                intent=intent,
                target_apps=list(route.target_apps),
                iterations=result.iterations,
                tool_calls_executed=result.tool_calls_executed,
                exhausted=result.exhausted,
            )

        raise TypeError(f"Unhandled route: {route!r}")
