"""
Conversation Context - Facts captured from user input
=====================================================

This module stores facts the user has told the bot (their name, the cake
they like, ...) and substitutes them into response templates.
"""

import threading
from typing import Dict, Mapping, Optional, Tuple

from core.config import DEFAULT_CONTEXT_KEYS
from core.logging import get_logger

logger = get_logger("conversation.context")


class ContextStore:
    """
    Session-wide store of conversation facts.

    Each recognized context key maps to the placeholder token it fills in
    response templates. The key doubles as the marker a rule pattern must
    contain for its capture group to be stored under that key.

    Example:
        store = ContextStore()
        store.set_fact("name", "Anna")

        store.render("Hello [name]")   # "Hello Anna"
        store.render("I like [cake]")  # "I like"
    """

    def __init__(self, context_keys: Optional[Mapping[str, str]] = None):
        """
        Args:
            context_keys: Ordered mapping of context key to placeholder.
                Defaults to ``DEFAULT_CONTEXT_KEYS``.
        """
        self._placeholders: Dict[str, str] = dict(
            DEFAULT_CONTEXT_KEYS if context_keys is None else context_keys
        )
        self._facts: Dict[str, str] = {}
        self._lock = threading.Lock()

    def recognized_keys(self) -> Tuple[str, ...]:
        """Context keys in rendering order."""
        return tuple(self._placeholders)

    def placeholder_for(self, key: str) -> Optional[str]:
        return self._placeholders.get(key)

    def set_fact(self, key: Optional[str], value: Optional[str]) -> None:
        """
        Store or overwrite a fact.

        Empty or missing keys and values are logged and ignored.

        Args:
            key: Context key
            value: Captured value
        """
        if not key or not value:
            logger.warning(f"Invalid key or value for context: key={key!r}, value={value!r}")
            return

        with self._lock:
            self._facts[key] = value

        logger.debug(f"Context updated: {key}={value!r}")

    def get_fact(self, key: str) -> Optional[str]:
        with self._lock:
            return self._facts.get(key)

    def facts(self) -> Dict[str, str]:
        """Snapshot of every stored fact."""
        with self._lock:
            return dict(self._facts)

    def render(self, template: str) -> str:
        """
        Substitute stored facts into a response template.

        Known placeholders are replaced by their fact. A placeholder with no
        stored fact is removed together with the space in front of it.

        Args:
            template: Response text with zero or more placeholders

        Returns:
            Rendered response
        """
        facts = self.facts()
        result = template

        for key, placeholder in self._placeholders.items():
            value = facts.get(key)
            if value is not None:
                result = result.replace(placeholder, value)
            else:
                result = result.replace(" " + placeholder, "")

        return result
