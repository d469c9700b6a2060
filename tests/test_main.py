"""
Test Command Line Module
========================

Tests for argument parsing and the one-shot command line modes.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Config
from main import parse_args, run_test_message, run_status_check


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults(self):
        args = parse_args([])
        assert not args.test
        assert not args.status
        assert args.config is None

    def test_test_message(self):
        args = parse_args(["--test", "hello", "--conversations", "rules.yaml"])
        assert args.test == "hello"
        assert args.conversations == "rules.yaml"

    def test_modes_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--test", "hello", "--status"])


class TestOneShotModes:
    """Tests for --test and --status output."""

    def test_run_test_message(self, capsys):
        config = Config()
        config.chat.random_seed = 3
        run_test_message(config, "my name is Anna")

        out = capsys.readouterr().out
        assert out.startswith("You: my name is Anna\nBot: ")
        assert "Anna" in out.splitlines()[1]

    def test_run_test_message_fallback(self, capsys):
        run_test_message(Config(), "the weather is nice")
        assert capsys.readouterr().out.endswith("Bot: Sorry I didn't understand.\n")

    def test_run_status_check(self, capsys, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text(
            "- type: greeting\n  pattern: hello\n  responses: [Hi]\n"
            "- type: broken\n  pattern: '(oops'\n  responses: [Never]\n",
            encoding="utf-8",
        )
        config = Config()
        config.chat.conversation_file = str(rules)

        run_status_check(config)

        out = capsys.readouterr().out
        assert "Loaded: 2" in out
        assert "Inactive: 1" in out
        assert "interested -> [reason]" in out


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
