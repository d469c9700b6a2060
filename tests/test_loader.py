"""
Test Conversation Loader Module
===============================

Unit tests for reading conversation rules from XML and YAML files.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversation.loader import (
    load_conversations, load_default_conversations, parse_xml, parse_yaml
)
from core.exceptions import ConversationLoadError


SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<conversations>
    <conversation>
        <type>greeting</type>
        <pattern id="1">\\b(hi|hello)\\b</pattern>
        <response id="1">Hello there!</response>
        <response id="1">Hi!</response>
        <pattern id="2">good\\smorning</pattern>
        <response id="2">Morning!</response>
    </conversation>
    <conversation>
        <type>name</type>
        <pattern id="1">
            my\\sname\\sis\\s(\\w+)
        </pattern>
        <response id="1">
            Nice to meet you [name]!
        </response>
    </conversation>
</conversations>
"""


class TestParseXml:
    """Tests for the XML format."""

    def test_one_rule_per_pattern(self):
        rules = parse_xml(SAMPLE_XML)
        assert [(rule.type, rule.pattern) for rule in rules] == [
            ("greeting", r"\b(hi|hello)\b"),
            ("greeting", r"good\smorning"),
            ("name", r"my\sname\sis\s(\w+)"),
        ]

    def test_responses_grouped_by_id(self):
        rules = parse_xml(SAMPLE_XML)
        assert rules[0].responses == ("Hello there!", "Hi!")
        assert rules[1].responses == ("Morning!",)

    def test_whitespace_cleaned(self):
        rules = parse_xml(SAMPLE_XML)
        assert rules[2].pattern == r"my\sname\sis\s(\w+)"
        assert rules[2].responses == ("Nice to meet you [name]!",)

    def test_pattern_spaces_stripped(self):
        rules = parse_xml(
            "<conversations><conversation><type>t</type>"
            "<pattern id='1'>how are you</pattern></conversation></conversations>"
        )
        assert rules[0].pattern == "howareyou"

    def test_pattern_without_responses(self):
        rules = parse_xml(
            "<conversations><conversation><type>t</type>"
            "<pattern id='1'>x</pattern><response id='2'>y</response>"
            "</conversation></conversations>"
        )
        assert rules[0].responses == ()

    def test_conversation_without_type_skipped(self):
        rules = parse_xml(
            "<conversations>"
            "<conversation><pattern id='1'>x</pattern></conversation>"
            "<conversation><type>t</type><pattern id='1'>y</pattern></conversation>"
            "</conversations>"
        )
        assert [rule.pattern for rule in rules] == ["y"]


class TestParseYaml:
    """Tests for the YAML format."""

    def test_mapping_form(self):
        rules = parse_yaml(
            "conversations:\n"
            "  - type: greeting\n"
            "    pattern: '\\bhello\\b'\n"
            "    responses: ['Hi!', 'Hello!']\n"
        )
        assert len(rules) == 1
        assert rules[0].pattern == r"\bhello\b"
        assert rules[0].responses == ("Hi!", "Hello!")

    def test_list_form(self):
        rules = parse_yaml("- type: thanks\n  pattern: thanks\n  responses: Welcome!\n")
        assert rules[0].responses == ("Welcome!",)

    def test_empty_document(self):
        assert parse_yaml("") == []

    def test_missing_pattern(self):
        with pytest.raises(ConversationLoadError):
            parse_yaml("conversations:\n  - type: greeting\n")

    def test_responses_must_be_list_or_string(self):
        with pytest.raises(ConversationLoadError):
            parse_yaml("- type: t\n  pattern: x\n  responses: 5\n")

    def test_wrong_shape(self):
        with pytest.raises(ConversationLoadError):
            parse_yaml("conversations: nope\n")


class TestLoadConversations:
    """Tests for loading conversation files."""

    def test_load_xml_file(self, tmp_path):
        path = tmp_path / "rules.xml"
        path.write_text(SAMPLE_XML, encoding="utf-8")
        assert len(load_conversations(path)) == 3

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("- type: t\n  pattern: x\n  responses: [y]\n", encoding="utf-8")
        assert len(load_conversations(str(path))) == 1

    def test_missing_file_gives_empty_list(self, tmp_path):
        assert load_conversations(tmp_path / "missing.xml") == []

    def test_malformed_xml_gives_empty_list(self, tmp_path):
        path = tmp_path / "broken.xml"
        path.write_text("<conversations><conversation>", encoding="utf-8")
        assert load_conversations(path) == []

    def test_bad_yaml_gives_empty_list(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("conversations: [unclosed\n", encoding="utf-8")
        assert load_conversations(path) == []

    def test_non_list_responses_gives_empty_list(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("- type: t\n  pattern: x\n  responses: 5\n", encoding="utf-8")
        assert load_conversations(path) == []

    def test_undecodable_yaml_gives_empty_list(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_bytes(b"\xff\xfe- type: t\n")
        assert load_conversations(path) == []

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "rules.txt"
        path.write_text("anything", encoding="utf-8")
        assert load_conversations(path) == []

    def test_bundled_conversations(self):
        rules = load_default_conversations()
        types = {rule.type for rule in rules}
        assert {"greeting", "name", "definition"} <= types
        assert all(" " not in rule.pattern for rule in rules)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
