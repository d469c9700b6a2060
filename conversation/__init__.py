"""
Conversation Module - Rule-based conversation engine
====================================================

This module provides the matching engine behind the chatbot:
- Rules loaded from XML or YAML conversation files
- Case-insensitive regex matching with random response selection
- Context facts captured from user input and rendered into replies
- Definition lookups answered per requesting message
"""

from .context import ContextStore, DEFAULT_CONTEXT_KEYS
from .loader import load_conversations, load_default_conversations
from .matcher import ConversationMatcher, MatchOutcome, split_lines
from .rules import CompiledRule, Rule, RuleTable

__all__ = [
    "ContextStore",
    "DEFAULT_CONTEXT_KEYS",
    "load_conversations",
    "load_default_conversations",
    "ConversationMatcher",
    "MatchOutcome",
    "split_lines",
    "CompiledRule",
    "Rule",
    "RuleTable",
]
