"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


# context key (substring a pattern must contain) -> placeholder token
DEFAULT_CONTEXT_KEYS: Dict[str, str] = {
    "name": "[name]",
    "music": "[music]",
    "cake": "[cake]",
    "hobby": "[hobby]",
    "interested": "[reason]",
}


def _default_context_keys() -> Dict[str, str]:
    return dict(DEFAULT_CONTEXT_KEYS)


@dataclass
class ChatConfig:
    """
    Conversation configuration.

    Controls the transcript labels, the reply used when nothing matches,
    where the conversation rules come from and which context facts are
    captured from user input.
    """
    user_label: str = "You: "
    bot_label: str = "Bot: "
    fallback_response: str = "Sorry I didn't understand."

    # Empty = bundled conversation_data.xml
    conversation_file: str = ""

    # Ordered: placeholders are rendered in this order
    context_keys: Dict[str, str] = field(default_factory=_default_context_keys)

    # Optional fixed seed for response selection
    random_seed: Optional[int] = None

    def validate(self) -> None:
        if not self.fallback_response:
            raise ConfigError("fallback_response cannot be empty")

        if not isinstance(self.context_keys, dict):
            raise ConfigError(
                f"context_keys must be a mapping, got {type(self.context_keys).__name__}"
            )

        for key, placeholder in self.context_keys.items():
            if not key or not placeholder:
                raise ConfigError(
                    "Context keys and placeholders must be non-empty",
                    {"key": key, "placeholder": placeholder}
                )


@dataclass
class PipelineConfig:
    """
    Event pipeline timing and worker settings.
    """
    throttle_ms: int = 500
    debounce_ms: int = 500
    worker_threads: int = 4

    def validate(self) -> None:
        if self.throttle_ms < 0:
            raise ConfigError("throttle_ms cannot be negative")

        if self.debounce_ms < 0:
            raise ConfigError("debounce_ms cannot be negative")

        if self.worker_threads < 1:
            raise ConfigError("worker_threads must be at least 1")


@dataclass
class DictionaryConfig:
    """
    Word definition lookup settings.
    """
    api_base: str = "https://api.dictionaryapi.dev/api/v2/entries/en/"
    timeout: float = 10.0
    io_threads: int = 4

    # Rules whose pattern contains this marker trigger a lookup
    marker: str = "definition"

    definition_label: str = "Definition: "
    no_definition_response: str = "Sorry, I could not find the definition for: "

    def validate(self) -> None:
        if not self.api_base.startswith(("http://", "https://")):
            raise ConfigError(f"Invalid dictionary api_base: {self.api_base}")

        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

        if self.io_threads < 1:
            raise ConfigError("io_threads must be at least 1")

        if not self.marker:
            raise ConfigError("Definition marker cannot be empty")


@dataclass
class UIConfig:
    """
    Terminal UI configuration.
    """
    title: str = "Chat bot"
    theme: str = "textual-dark"
    input_placeholder: str = "Type your message here..."

    def validate(self) -> None:
        if not self.title:
            raise ConfigError("UI title cannot be empty")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for validating and exporting them.
    """
    app_name: str = "Chatbot"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    chat: ChatConfig = field(default_factory=ChatConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    log_dir: str = ""

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.log_level}")

        self.chat.validate()
        self.pipeline.validate()
        self.dictionary.validate()
        self.ui.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "log_level": self.log_level,
            "chat": asdict(self.chat),
            "pipeline": asdict(self.pipeline),
            "dictionary": asdict(self.dictionary),
            "ui": asdict(self.ui),
        }


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "CHATBOT_CONFIG_DIR" in os.environ:
        return Path(os.environ["CHATBOT_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "chatbot"

    return Path.home() / ".config" / "chatbot"


def get_default_log_dir() -> Path:
    """
    Get the default log directory path.

    Returns:
        Path to the log directory
    """
    if "XDG_STATE_HOME" in os.environ:
        return Path(os.environ["XDG_STATE_HOME"]) / "chatbot" / "logs"

    return Path.home() / ".local" / "state" / "chatbot" / "logs"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file (if present)
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()
    config.config_dir = str(get_default_config_dir())
    config.log_dir = str(get_default_log_dir())

    if config_path:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError("Config file not found", {"path": str(yaml_path)})
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


_SECTIONS = ("chat", "pipeline", "dictionary", "ui")


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    for key in ("app_name", "version", "debug", "log_level", "log_dir"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in _SECTIONS:
        section_cfg = yaml_config.get(section)
        if not section_cfg:
            continue
        if not isinstance(section_cfg, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in section_cfg.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: CHATBOT_SECTION_KEY,
    for example CHATBOT_PIPELINE_DEBOUNCE_MS.

    Args:
        config: Config object to update
    """
    env_mappings = {
        "CHATBOT_LOG_LEVEL": (None, "log_level"),
        "CHATBOT_DEBUG": (None, "debug", bool),
        "CHATBOT_LOG_DIR": (None, "log_dir"),

        "CHATBOT_CHAT_CONVERSATION_FILE": ("chat", "conversation_file"),
        "CHATBOT_CHAT_FALLBACK_RESPONSE": ("chat", "fallback_response"),

        "CHATBOT_PIPELINE_THROTTLE_MS": ("pipeline", "throttle_ms", int),
        "CHATBOT_PIPELINE_DEBOUNCE_MS": ("pipeline", "debounce_ms", int),

        "CHATBOT_DICTIONARY_API_BASE": ("dictionary", "api_base"),
        "CHATBOT_DICTIONARY_TIMEOUT": ("dictionary", "timeout", float),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = mapping[0], mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str
        target = config if section is None else getattr(config, section)

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}")

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Returns:
        Path the configuration was written to

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    try:
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})

    return yaml_path


def create_default_config(config_dir: Optional[str] = None) -> Config:
    """
    Create a default configuration file.

    Args:
        config_dir: Directory to create configuration in (optional)

    Returns:
        Config object with default values
    """
    config = Config()
    config.config_dir = config_dir or str(get_default_config_dir())
    config.log_dir = str(get_default_log_dir())

    save_config(config)

    return config
