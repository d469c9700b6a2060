"""
Services Module - Chatbot services
==================================

This module provides the main services:
- Dictionary Client: word definition lookups
- Chat Responder: replies from matched rules and context
- Chat Pipeline: throttling, debouncing and reply delivery
- Factory: wiring a chatbot session from configuration
"""

from .dictionary import DictionaryClient
from .chat_responder import ChatResponder
from .pipeline import ChatPipeline
from .factory import Chatbot, create_chatbot

__all__ = [
    "DictionaryClient",
    "ChatResponder",
    "ChatPipeline",
    "Chatbot",
    "create_chatbot",
]
