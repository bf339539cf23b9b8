"""
Tool-Calling Loop.

Drives a bounded request/execute/observe cycle between the LLM and the
tool backend for one contextualized request:

    FETCHING_TOOLS -> ITERATING(k) -> RESOLVED | ITERATIONS_EXHAUSTED
                   -> NO_TOOLS

The transcript lives only for the duration of one run().
"""

from __future__ import annotations

import logging

from ..domain.entities import LoopResult, LoopState, Message
from ..domain.ports import ILLMProvider
from ..tools.registry import ToolRegistry
from . import prompts
from .summarizer import ActionSummarizer
from .tool_executor import ToolExecutor

logger = logging.getLogger(__name__)


class ToolCallingLoop:
    """Bounded tool-calling loop.

    Every model invocation counts towards max_iterations. A response
    without tool calls ends the loop on that iteration. If the bound is
    reached while the model still wants tools, the leading transcript
    entries are summarized instead.

    Usage:
        loop = ToolCallingLoop(llm, registry, ToolExecutor(registry),
                               ActionSummarizer(llm), max_iterations=10)
        result = await loop.run(message, ["SLACK"])
        print(result.text)
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        tool_registry: ToolRegistry,
        tool_executor: ToolExecutor,
        summarizer: ActionSummarizer,
        max_iterations: int = 10,
        summary_prefix_size: int = 4,
        system_prompt: str = prompts.TOOL_EXECUTION,
    ):
        """Initialize the loop.

        Args:
            llm_provider: LLM used for tool-calling turns
            tool_registry: Registry used to discover tools
            tool_executor: Executor for each turn's tool calls
            summarizer: Summarizer used on iteration exhaustion
            max_iterations: Maximum model invocations per run
            summary_prefix_size: Transcript entries handed to the summarizer
            system_prompt: Instruction seeding every transcript
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.llm = llm_provider
        self.tools = tool_registry
        self.executor = tool_executor
        self.summarizer = summarizer
        self.max_iterations = max_iterations
        self.summary_prefix_size = summary_prefix_size
        self.system_prompt = system_prompt

    async def run(
        self,
        contextualized_message: str,
        target_integrations: list[str],
    ) -> LoopResult:
        """Run the loop for one request.

        Args:
            contextualized_message: User message with parameter context
            target_integrations: Resolved integrations (any casing)

        Returns:
            LoopResult with the user-facing text and terminal state

        Raises:
            LLMProviderError: If a model call fails
        """
        state = LoopState.FETCHING_TOOLS
        logger.info(f"Fetching tools for: {', '.join(target_integrations)}")
        tools = await self.tools.get_tools(target_integrations)

        if not tools:
            state = LoopState.NO_TOOLS
            logger.warning(f"No tools available for: {', '.join(target_integrations)}")
            return LoopResult(
                text=prompts.NO_TOOLS_FOUND.format(apps=" and ".join(target_integrations)),
                state=state,
            )

        logger.info(f"Loaded {len(tools)} tools")

        transcript: list[Message] = [
            Message.system(self.system_prompt),
            Message.user(contextualized_message),
        ]
        tool_calls_executed = 0
        state = LoopState.ITERATING

        for iteration in range(1, self.max_iterations + 1):
            logger.info(f"Tool loop iteration {iteration}/{self.max_iterations}")
            response = await self.llm.respond(transcript, tools)

            # Ids must exist before the assistant turn is recorded
            for tool_call in response.tool_calls or []:
                tool_call.ensure_id()
            transcript.append(response)

            if not response.has_tool_calls:
                logger.info(f"Tool loop resolved after {iteration} iteration(s)")
                return LoopResult(
                    text=response.content,
                    state=LoopState.RESOLVED,
                    iterations=iteration,
                    tool_calls_executed=tool_calls_executed,
                )

            logger.info(f"Model requested {len(response.tool_calls)} tool call(s)")
            results = await self.executor.execute_tool_calls(response.tool_calls)
            transcript.extend(result.to_message() for result in results)
            tool_calls_executed += len(results)

        state = LoopState.ITERATIONS_EXHAUSTED
        logger.warning(
            f"Tool loop hit {self.max_iterations} iterations; summarizing instead"
        )
        summary = await self.summarizer.summarize(transcript[: self.summary_prefix_size])
        if not summary.strip():
            logger.warning("Summarizer returned empty text; using fallback confirmation")
            summary = prompts.SUMMARY_FALLBACK
        return LoopResult(
            text=summary,
            state=state,
            iterations=self.max_iterations,
            tool_calls_executed=tool_calls_executed,
        )
