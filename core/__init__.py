"""
Core Module - Foundation components for the chatbot
===================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
- Submission throttling
- Timers and debouncing
"""

from .config import Config, load_config, save_config
from .exceptions import (
    ChatbotError,
    ConfigError,
    ConversationLoadError,
    DefinitionLookupError,
    UIError,
)
from .logging import setup_logging, get_logger
from .rate_limiter import RateLimitResult, Throttle
from .scheduler import Debouncer, ManualScheduler, Scheduler, ThreadingScheduler, TimerHandle

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "ChatbotError",
    "ConfigError",
    "ConversationLoadError",
    "DefinitionLookupError",
    "UIError",
    "setup_logging",
    "get_logger",
    "RateLimitResult",
    "Throttle",
    "Debouncer",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "TimerHandle",
]
