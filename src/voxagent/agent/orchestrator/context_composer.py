"""
Context Composer.

Appends matched parameters to the outgoing message so the tool-calling
model sees concrete values (channel IDs, URLs) next to the request.
"""

from __future__ import annotations

from typing import Sequence

from ..domain.entities import Alias
from . import prompts


class ContextComposer:
    """Formats relevant aliases into a labelled block.

    Usage:
        composer = ContextComposer()
        message = composer.compose(
            "send hi to #general",
            [Alias(name="general", value="C123")],
        )
        # "send hi to #general\\n\\n--- Relevant Parameters ---\\ngeneral = C123"
    """

    def __init__(self, header: str = prompts.RELEVANT_PARAMETERS_HEADER):
        self.header = header

    def compose(self, utterance: str, relevant_aliases: Sequence[Alias]) -> str:
        if not relevant_aliases:
            return utterance

        lines = "\n".join(f"{alias.name} = {alias.value}" for alias in relevant_aliases)
        return f"{utterance}{self.header}{lines}"
