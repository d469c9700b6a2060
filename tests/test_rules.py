"""
Test Rule Table Module
======================

Unit tests for conversation rules and the rule table.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversation.rules import Rule, CompiledRule, RuleTable


class TestRule:
    """Tests for Rule."""

    def test_responses_stored_as_tuple(self):
        rule = Rule("greeting", r"\bhi\b", ["Hello!", "Hi!"])
        assert rule.responses == ("Hello!", "Hi!")

    def test_immutable(self):
        rule = Rule("greeting", r"\bhi\b", ("Hello!",))
        with pytest.raises(AttributeError):
            rule.pattern = "other"

    def test_to_dict(self):
        rule = Rule("cake", r"cake\sis\s(\w+)", ("Yum [cake]",))
        assert rule.to_dict() == {
            "type": "cake",
            "pattern": r"cake\sis\s(\w+)",
            "responses": ["Yum [cake]"],
        }

    def test_from_dict_single_response(self):
        rule = Rule.from_dict({"type": "thanks", "pattern": "thanks", "responses": "Welcome!"})
        assert rule.responses == ("Welcome!",)

    def test_from_dict_no_responses(self):
        rule = Rule.from_dict({"pattern": "thanks"})
        assert rule.type == ""
        assert rule.responses == ()

    def test_from_dict_requires_pattern(self):
        with pytest.raises(KeyError):
            Rule.from_dict({"type": "thanks"})


class TestCompiledRule:
    """Tests for pattern compilation."""

    def test_case_insensitive(self):
        entry = CompiledRule.compile(Rule("greeting", r"\bhello\b", ("Hi",)))
        assert entry.active
        assert entry.regex.search("HELLO there")

    def test_invalid_pattern_inactive(self):
        entry = CompiledRule.compile(Rule("broken", "(unclosed", ("Never",)))
        assert not entry.active
        assert entry.regex is None
        assert entry.error

    def test_invalid_pattern_logged(self, caplog):
        with caplog.at_level("ERROR", logger="chatbot.conversation.rules"):
            CompiledRule.compile(Rule("broken", "[a-", ("Never",)))
        assert "Error compiling conversation pattern" in caplog.text


class TestRuleTable:
    """Tests for RuleTable."""

    def test_empty(self):
        table = RuleTable()
        assert len(table) == 0
        assert table.entries() == ()

    def test_load_preserves_order(self):
        table = RuleTable()
        count = table.load([
            Rule("a", "one", ("1",)),
            Rule("b", "two", ("2",)),
        ])
        assert count == 2
        assert [rule.type for rule in table.all()] == ["a", "b"]

    def test_load_appends(self):
        table = RuleTable([Rule("a", "one", ("1",))])
        table.load([Rule("b", "two", ("2",))])
        assert [rule.type for rule in table.all()] == ["a", "b"]

    def test_invalid_pattern_kept_inactive(self):
        """Test a bad pattern is disabled without affecting other rules."""
        table = RuleTable([
            Rule("broken", "(unclosed", ("Never",)),
            Rule("greeting", r"\bhello\b", ("Hi",)),
        ])
        assert len(table) == 2
        assert [entry.rule.type for entry in table.inactive()] == ["broken"]

    def test_snapshot_unaffected_by_load(self):
        table = RuleTable([Rule("a", "one", ("1",))])
        snapshot = table.entries()
        table.load([Rule("b", "two", ("2",))])
        assert len(snapshot) == 1
        assert len(table.entries()) == 2


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
