"""
Test Conversation Context Module
================================

Unit tests for the context store and template rendering.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversation.context import ContextStore, DEFAULT_CONTEXT_KEYS


class TestContextStore:
    """Tests for ContextStore."""

    def test_default_keys_in_order(self):
        store = ContextStore()
        assert store.recognized_keys() == ("name", "music", "cake", "hobby", "interested")

    def test_interested_maps_to_reason(self):
        store = ContextStore()
        assert store.placeholder_for("interested") == "[reason]"
        assert store.placeholder_for("unknown") is None

    def test_set_and_get(self):
        store = ContextStore()
        store.set_fact("name", "Anna")
        assert store.get_fact("name") == "Anna"

    def test_overwrite(self):
        """Test a later fact replaces an earlier one."""
        store = ContextStore()
        store.set_fact("name", "Anna")
        store.set_fact("name", "Ben")
        assert store.get_fact("name") == "Ben"

    @pytest.mark.parametrize("key,value", [("", "Anna"), ("name", ""), (None, "Anna"), ("name", None)])
    def test_empty_input_ignored(self, key, value):
        store = ContextStore()
        store.set_fact(key, value)
        assert store.facts() == {}

    def test_custom_keys(self):
        store = ContextStore({"city": "[city]"})
        assert store.recognized_keys() == ("city",)
        store.set_fact("city", "Oslo")
        assert store.render("You live in [city].") == "You live in Oslo."

    def test_facts_is_a_snapshot(self):
        store = ContextStore()
        store.set_fact("cake", "lemon")
        snapshot = store.facts()
        snapshot["cake"] = "chocolate"
        assert store.get_fact("cake") == "lemon"

    def test_default_keys_not_shared(self):
        ContextStore().set_fact("name", "Anna")
        assert "name" in DEFAULT_CONTEXT_KEYS
        assert ContextStore().get_fact("name") is None


class TestRender:
    """Tests for placeholder substitution."""

    def test_known_fact_substituted(self):
        store = ContextStore()
        store.set_fact("name", "Anna")
        assert store.render("Nice to meet you [name]!") == "Nice to meet you Anna!"

    def test_absent_fact_removed_with_leading_space(self):
        store = ContextStore()
        assert store.render("Hello there [name]!") == "Hello there!"

    def test_absent_fact_without_leading_space_kept(self):
        """Test only the space-prefixed form is removed."""
        store = ContextStore()
        assert store.render("[name], what a lovely name!") == "[name], what a lovely name!"

    def test_every_occurrence_replaced(self):
        store = ContextStore()
        store.set_fact("cake", "lemon")
        assert store.render("[cake] is good, [cake] is great") == "lemon is good, lemon is great"

    def test_several_placeholders(self):
        store = ContextStore()
        store.set_fact("hobby", "chess")
        store.set_fact("interested", "it is fun")
        rendered = store.render("So you like [hobby] because [reason]. Interesting!")
        assert rendered == "So you like chess because it is fun. Interesting!"

    def test_no_placeholders(self):
        store = ContextStore()
        store.set_fact("name", "Anna")
        assert store.render("How are you?") == "How are you?"

    def test_unknown_placeholder_untouched(self):
        store = ContextStore()
        assert store.render("I like [colour]") == "I like [colour]"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
