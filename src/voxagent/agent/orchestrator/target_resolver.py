"""
Target Resolver.

Maps an utterance to the configured integrations it refers to.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import Message
from ..domain.ports import ILLMProvider
from . import prompts

logger = logging.getLogger(__name__)


class TargetApps(BaseModel):
    """Applications the user wants to interact with."""

    model_config = ConfigDict(extra="forbid")

    apps: list[str] = Field(
        description="Names of the relevant applications, taken from the available list",
    )


class TargetResolver:
    """Resolves target integrations with one schema-constrained LLM call.

    The model's answer is never trusted as-is: every name is compared
    case-insensitively against the available integrations, unknown
    names are dropped, duplicates collapse, and the caller's spelling
    is returned.

    Usage:
        resolver = TargetResolver(llm_provider)
        targets = await resolver.resolve("post to slack", ["slack", "github"])
        # ["slack"]
    """

    def __init__(self, llm_provider: ILLMProvider):
        self.llm = llm_provider

    async def resolve(
        self,
        utterance: str,
        available_integrations: list[str],
    ) -> list[str]:
        """Resolve the integrations an utterance targets.

        Args:
            utterance: Raw user message
            available_integrations: Integrations the caller has configured

        Returns:
            Ordered, de-duplicated subset of available_integrations

        Raises:
            LLMProviderError: On provider failure or malformed output
        """
        if not available_integrations:
            return []

        by_upper: dict[str, str] = {}
        for name in available_integrations:
            by_upper.setdefault(name.upper(), name)

        result = await self.llm.complete_structured(
            [
                Message.system(
                    prompts.APP_IDENTIFICATION.format(apps=", ".join(by_upper.values()))
                ),
                Message.user(utterance),
            ],
            TargetApps,
        )

        targets: list[str] = []
        for name in result.apps:
            canonical = by_upper.get(name.strip().upper())
            if canonical is None:
                logger.debug(f"Dropping unknown integration from model output: {name!r}")
                continue
            if canonical not in targets:
                targets.append(canonical)

        logger.info(f"Resolved target integrations: {targets}")
        return targets
