"""
Conversation Matcher - Pattern matching and response selection
==============================================================

This module implements the core of the chatbot: every line of a user
message is matched against every active rule, matching rules contribute a
randomly chosen response, capture groups are stored as conversation
context, and a definition rule starts a dictionary lookup whose future
becomes the reply of the message that asked for it.
"""

import random
import re
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from core.logging import get_logger
from .context import ContextStore
from .rules import CompiledRule, RuleTable

logger = get_logger("conversation.matcher")


DEFINITION_MARKER = "definition"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class MatchOutcome:
    """
    Result of matching one user message.

    Attributes:
        text (str): Joined responses of all matching rules, unrendered
        matched (list): Types of the rules that matched, in match order
        definition (Future): Set when a definition rule matched; the lookup
            of the first definition line of the message
    """
    text: str = ""
    matched: List[str] = field(default_factory=list)
    definition: Optional[Future] = None

    @property
    def awaiting_definition(self) -> bool:
        return self.definition is not None


class ConversationMatcher:
    """
    Matches user messages against the rule table.

    Example:
        table = RuleTable([Rule("name", r"my name is (\\w+)", ("Nice to meet you [name]!",))])
        context = ContextStore()
        matcher = ConversationMatcher(table, context)

        matcher.process("my name is Anna")  # "Nice to meet you [name]!"
        context.get_fact("name")            # "Anna"
    """

    def __init__(
        self,
        rules: RuleTable,
        context: ContextStore,
        lookup: Optional[Callable[[str], Future]] = None,
        definition_marker: str = DEFINITION_MARKER,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            rules: Rule table to match against
            context: Store receiving captured context facts
            lookup: Starts a definition lookup for a word. Without it,
                definition rules answer like any other rule.
            definition_marker: Pattern substring identifying definition rules
            rng: Random source for response selection
        """
        self.rules = rules
        self.context = context
        self.lookup = lookup
        self.definition_marker = definition_marker
        self.rng = rng or random.Random()

    def process(self, message: str) -> str:
        """
        Match a message and return the joined responses.

        Returns:
            Space-joined responses, or an empty string if nothing matched
        """
        return self.match(message).text

    def match(self, message: str) -> MatchOutcome:
        """
        Match every line of a message against every active rule.

        Args:
            message: User message, possibly spanning several lines

        Returns:
            MatchOutcome with the joined responses and pending definition
        """
        outcome = MatchOutcome()
        replies: List[str] = []
        entries = self.rules.entries()

        for line in split_lines(message):
            for entry in entries:
                reply = self._match_rule(entry, line, outcome)
                if reply:
                    replies.append(reply)

        outcome.text = " ".join(replies)

        logger.debug(
            f"Matched {len(outcome.matched)} rule(s)",
            extra={"rule_types": outcome.matched, "awaiting_definition": outcome.awaiting_definition}
        )

        return outcome

    def _match_rule(self, entry: CompiledRule, line: str, outcome: MatchOutcome) -> str:
        if not entry.active:
            return ""

        match = entry.regex.search(line)
        if match is None:
            return ""

        outcome.matched.append(entry.rule.type)
        captured = match.group(1) if entry.regex.groups else None

        if captured is not None:
            self._update_context(entry.rule.pattern, captured)

            if self.lookup is not None and self.definition_marker in entry.rule.pattern:
                self._request_definition(captured, outcome)
                return ""

        return self._random_response(entry)

    def _update_context(self, pattern: str, captured: str) -> None:
        for key in self.context.recognized_keys():
            if key in pattern:
                self.context.set_fact(key, captured)

    def _request_definition(self, word: str, outcome: MatchOutcome) -> None:
        # one reply per message: only its first definition line is looked up
        if outcome.definition is not None:
            logger.debug(f"Ignoring extra definition request for {word!r}")
            return

        logger.info(f"Looking up definition for {word!r}")
        outcome.definition = self.lookup(word)
        outcome.definition.add_done_callback(_log_failed_lookup)

    def _random_response(self, entry: CompiledRule) -> str:
        try:
            return self.rng.choice(entry.rule.responses)
        except IndexError:
            logger.error(
                "Error getting a response: rule has no responses",
                extra={"rule_type": entry.rule.type, "pattern": entry.rule.pattern}
            )
            return ""


def split_lines(message: str) -> List[str]:
    """Split a message on \\n, \\r and \\r\\n; a trailing break adds no line."""
    lines = _LINE_BREAK.split(message)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _log_failed_lookup(future: Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error(f"Definition lookup failed: {future.exception()}")
