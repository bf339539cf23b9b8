"""
Request-scoped alias store.

The caller owns the integration parameters and sends them with every
request; this store is a read-only view over that payload.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .domain.entities import Alias, IntegrationAliasMap
from .domain.ports import IAliasStore

logger = logging.getLogger(__name__)


class InMemoryAliasStore(IAliasStore):
    """Read-only alias store backed by a dict.

    Integration keys are looked up case-insensitively; the spelling the
    caller used is what integrations() returns.

    Usage:
        store = InMemoryAliasStore.from_payload({
            "slack": [{"name": "general", "value": "C123"}],
        })
        store.aliases_for("SLACK")  # [Alias(name='general', value='C123')]
    """

    def __init__(self, aliases: Optional[IntegrationAliasMap] = None):
        self._aliases: IntegrationAliasMap = {
            key: list(values) for key, values in (aliases or {}).items()
        }
        self._index: dict[str, str] = {}
        for key in self._aliases:
            folded = key.upper()
            if folded in self._index:
                logger.warning(f"Duplicate integration key ignored: {key}")
                continue
            self._index[folded] = key

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, list[Any]]
    ) -> InMemoryAliasStore:
        """Build a store from request data.

        Entries may be Alias instances, mappings with name/value keys,
        or objects with name/value attributes.
        """
        aliases: IntegrationAliasMap = {}
        for integration, entries in payload.items():
            converted = []
            for entry in entries:
                if isinstance(entry, Alias):
                    converted.append(entry)
                elif isinstance(entry, Mapping):
                    converted.append(Alias(name=str(entry["name"]), value=str(entry["value"])))
                else:
                    converted.append(Alias(name=str(entry.name), value=str(entry.value)))
            aliases[integration] = converted
        return cls(aliases)

    def get_aliases(self) -> IntegrationAliasMap:
        return {key: list(values) for key, values in self._aliases.items()}

    def integrations(self) -> list[str]:
        return list(self._index.values())

    def canonical_name(self, integration: str) -> Optional[str]:
        """Return the caller's spelling of an integration, if configured."""
        return self._index.get(integration.upper())

    def aliases_for(self, integration: str) -> list[Alias]:
        key = self.canonical_name(integration)
        if key is None:
            return []
        return list(self._aliases[key])
