"""
Exception Definitions - Custom exceptions for the chatbot
=========================================================

This module defines the custom exceptions used throughout the application.
None of them is fatal: each is raised inside a component and caught at
that component's boundary, where it is logged and turned into an empty
result or a fallback reply.
"""


class ChatbotError(Exception):
    """
    Base exception for all chatbot errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(ChatbotError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Invalid configuration values
    - Configuration parsing errors
    - Unwritable configuration files
    """
    pass


class ConversationLoadError(ChatbotError):
    """
    Conversation data errors.

    Raised by the loaders when the conversation file cannot be read or
    does not have the expected structure. The public loader entry points
    catch it and fall back to an empty rule list.
    """
    pass


class DefinitionLookupError(ChatbotError):
    """
    Dictionary lookup errors.

    Raised when the dictionary service returns something that is not a
    list of entries. Never leaves the dictionary client: it is resolved to
    the no-definition reply.

    Attributes:
        word (str): The word that was looked up
    """

    def __init__(self, message: str, word: str = "", details: dict = None):
        self.word = word
        super().__init__(message, details)


class UIError(ChatbotError):
    """
    User interface errors.

    Raised when the terminal UI cannot be started.
    """
    pass
