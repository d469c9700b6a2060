"""
Chatbot - Rule-based terminal chatbot
=====================================

A small conversational bot for the terminal. Replies come from a table of
regular-expression rules loaded from a data file:
1. Facts the user mentions (name, favourite cake, ...) are remembered and
   substituted into later replies
2. "definition of <word>" is answered from an online dictionary

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
__license__ = "MIT"
