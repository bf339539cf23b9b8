"""
Action Summarizer.

Produces a short, friendly confirmation of what the tool-calling loop
did when the loop ran out of iterations before the model wrapped up.
"""

from __future__ import annotations

import json
import logging

from ..domain.entities import Message
from ..domain.ports import ILLMProvider
from . import prompts

logger = logging.getLogger(__name__)


class ActionSummarizer:
    """Summarizes a transcript prefix with one free-text LLM call."""

    def __init__(self, llm_provider: ILLMProvider):
        self.llm = llm_provider

    async def summarize(self, transcript_prefix: list[Message]) -> str:
        """Summarize the actions recorded in a transcript prefix.

        Args:
            transcript_prefix: Leading transcript entries (system prompt,
                first user message, first assistant turn, first tool result)

        Returns:
            Confirmation text

        Raises:
            LLMProviderError: On provider failure
        """
        history = json.dumps([message.to_dict() for message in transcript_prefix], indent=2)
        logger.info(f"Summarizing {len(transcript_prefix)} transcript entries")

        return await self.llm.complete(
            [
                Message.system(prompts.SUMMARY_GENERATION),
                Message.user(prompts.SUMMARY_REQUEST.format(history=history)),
            ]
        )
