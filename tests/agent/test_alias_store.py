"""
Tests for the request-scoped alias store.
"""

from types import SimpleNamespace

from voxagent.agent.alias_store import InMemoryAliasStore
from voxagent.agent.domain.entities import Alias


class TestInMemoryAliasStore:
    """Tests for lookup and payload conversion."""

    def test_lookup_is_case_insensitive(self):
        store = InMemoryAliasStore({"Slack": [Alias("general", "C123")]})
        assert store.aliases_for("SLACK") == [Alias("general", "C123")]
        assert store.aliases_for("slack") == [Alias("general", "C123")]

    def test_integrations_keep_caller_spelling_and_order(self):
        store = InMemoryAliasStore({"github": [], "Slack": []})
        assert store.integrations() == ["github", "Slack"]

    def test_unknown_integration_returns_empty(self):
        assert InMemoryAliasStore().aliases_for("SLACK") == []

    def test_duplicate_case_variants_keep_first(self):
        store = InMemoryAliasStore({
            "SLACK": [Alias("a", "1")],
            "slack": [Alias("b", "2")],
        })
        assert store.integrations() == ["SLACK"]
        assert store.aliases_for("Slack") == [Alias("a", "1")]

    def test_from_payload_accepts_dicts_and_objects(self):
        store = InMemoryAliasStore.from_payload({
            "SLACK": [{"name": "general", "value": "C123"}],
            "GITHUB": [SimpleNamespace(name="repo", value="org/app")],
        })
        assert store.aliases_for("SLACK") == [Alias("general", "C123")]
        assert store.aliases_for("GITHUB") == [Alias("repo", "org/app")]

    def test_get_aliases_returns_copy(self):
        store = InMemoryAliasStore({"SLACK": [Alias("general", "C123")]})
        snapshot = store.get_aliases()
        snapshot["SLACK"].append(Alias("x", "y"))
        assert store.aliases_for("SLACK") == [Alias("general", "C123")]
