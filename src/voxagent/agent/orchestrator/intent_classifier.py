"""
Intent Classifier.

Decides whether an utterance asks the agent to act on an external
application or is ordinary conversation.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import Intent, Message
from ..domain.ports import ILLMProvider
from . import prompts

logger = logging.getLogger(__name__)


class IntentClassification(BaseModel):
    """Classification of the user's intent."""

    model_config = ConfigDict(extra="forbid")

    intent: Literal["TOOL_USE", "GENERAL_CHAT"] = Field(
        description="TOOL_USE if the request needs an action on an external application, otherwise GENERAL_CHAT",
    )


class IntentClassifier:
    """Classifies utterances with one schema-constrained LLM call.

    Failures are not retried or recovered: a provider error or a
    response outside the schema propagates to the caller.

    Usage:
        classifier = IntentClassifier(llm_provider)
        intent = await classifier.classify("send hi to #general")
    """

    def __init__(self, llm_provider: ILLMProvider):
        self.llm = llm_provider

    async def classify(self, utterance: str) -> Intent:
        """Classify an utterance.

        Args:
            utterance: Raw user message

        Returns:
            Intent.TOOL_USE or Intent.GENERAL_CHAT

        Raises:
            LLMProviderError: On provider failure or malformed output
        """
        result = await self.llm.complete_structured(
            [
                Message.system(prompts.INTENT_CLASSIFICATION),
                Message.user(utterance),
            ],
            IntentClassification,
        )
        intent = Intent(result.intent)
        logger.info(f"Classified intent: {intent.value}")
        return intent
