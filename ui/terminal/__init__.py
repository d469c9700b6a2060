"""
Terminal UI Module - Textual-based chat window
==============================================

This module provides the terminal chat window using Textual.
"""

from .app import ChatbotApp, run_tui

__all__ = [
    "ChatbotApp",
    "run_tui",
]
