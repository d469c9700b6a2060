"""
UI Module - User interfaces for the chatbot
===========================================

- terminal: Textual chat window
"""
