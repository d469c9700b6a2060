"""
Rule Table - Conversation rules and their compiled patterns
===========================================================

This module defines the conversation rule type and the table the matcher
reads from. Patterns are compiled once, when rules are loaded; a rule
whose pattern does not compile is kept as inactive and never matches.
"""

import re
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Pattern, Tuple

from core.logging import get_logger

logger = get_logger("conversation.rules")


@dataclass(frozen=True)
class Rule:
    """
    One recognizable user intent.

    Attributes:
        type (str): Conversation type from the data file (greeting, name, ...)
        pattern (str): Regular expression, matched case-insensitively
        responses (tuple): Candidate replies, one picked at random
    """
    type: str
    pattern: str
    responses: Tuple[str, ...] = ()

    def __post_init__(self):
        # accept any iterable of responses, store an immutable tuple
        object.__setattr__(self, "responses", tuple(self.responses))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "pattern": self.pattern,
            "responses": list(self.responses),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        return cls(
            type=str(data.get("type", "")),
            pattern=str(data["pattern"]),
            responses=_as_responses(data.get("responses")),
        )


def _as_responses(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(r) for r in value)


@dataclass(frozen=True)
class CompiledRule:
    """
    A rule together with the outcome of compiling its pattern.

    Exactly one of ``regex`` and ``error`` is set.
    """
    rule: Rule
    regex: Optional[Pattern] = None
    error: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.regex is not None

    @classmethod
    def compile(cls, rule: Rule) -> "CompiledRule":
        try:
            return cls(rule=rule, regex=re.compile(rule.pattern, re.IGNORECASE))
        except re.error as e:
            logger.error(
                f"Error compiling conversation pattern {rule.pattern!r}: {e}; rule disabled",
                extra={"rule_type": rule.type}
            )
            return cls(rule=rule, error=str(e))


class RuleTable:
    """
    Ordered, append-only collection of conversation rules.

    Appends build a new tuple and swap it in, so readers iterating a
    snapshot never observe a partially appended table.

    Example:
        table = RuleTable()
        table.load([Rule("greeting", r"\\bhello\\b", ("Hi!",))])

        for entry in table.entries():
            ...
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._entries: Tuple[CompiledRule, ...] = ()
        self._write_lock = threading.Lock()

        if rules:
            self.load(rules)

    def load(self, rules: Iterable[Rule]) -> int:
        """
        Compile and append rules.

        Args:
            rules: Rules in table order

        Returns:
            Number of rules appended (including inactive ones)
        """
        compiled = tuple(CompiledRule.compile(rule) for rule in rules)

        with self._write_lock:
            self._entries = self._entries + compiled

        inactive = sum(1 for entry in compiled if not entry.active)
        logger.info(f"Loaded {len(compiled)} conversation rule(s), {inactive} inactive")

        return len(compiled)

    def entries(self) -> Tuple[CompiledRule, ...]:
        """Snapshot of every compiled rule, in table order."""
        return self._entries

    def all(self) -> Tuple[Rule, ...]:
        """Snapshot of every rule, in table order."""
        return tuple(entry.rule for entry in self._entries)

    def inactive(self) -> Tuple[CompiledRule, ...]:
        """Rules disabled because their pattern failed to compile."""
        return tuple(entry for entry in self._entries if not entry.active)

    def __len__(self) -> int:
        return len(self._entries)
