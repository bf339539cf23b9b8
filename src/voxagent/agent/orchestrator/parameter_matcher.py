"""
Parameter Matcher.

Selects which stored aliases an utterance refers to.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import Alias, Message
from ..domain.ports import ILLMProvider
from . import prompts

logger = logging.getLogger(__name__)


class RelevantAliases(BaseModel):
    """Aliases the user's message refers to."""

    model_config = ConfigDict(extra="forbid")

    aliases: list[str] = Field(
        description="Names of the referenced aliases, taken from the available list",
    )


class ParameterMatcher:
    """Matches aliases with one schema-constrained LLM call.

    Matching is best-effort: any failure degrades to "no parameters"
    rather than failing the request.
    """

    def __init__(self, llm_provider: ILLMProvider):
        self.llm = llm_provider

    async def match(self, utterance: str, candidates: list[Alias]) -> list[Alias]:
        """Return the candidates the utterance refers to, in candidate order.

        No model call is made when there are no candidates.
        """
        if not candidates:
            return []

        names = ", ".join(alias.name for alias in candidates)
        try:
            result = await self.llm.complete_structured(
                [
                    Message.system(prompts.ALIAS_MATCHING.format(aliases=names)),
                    Message.user(utterance),
                ],
                RelevantAliases,
            )
        except Exception as e:
            logger.warning(f"Alias matching failed, continuing without parameters: {e}")
            return []

        selected = set(result.aliases)
        matched = [alias for alias in candidates if alias.name in selected]
        logger.info(f"Matched {len(matched)} of {len(candidates)} aliases")
        return matched
