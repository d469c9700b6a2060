"""
Conversation Loader - Reading conversation rules from data files
================================================================

Two file formats are supported:

XML (the bundled data)::

    <conversations>
      <conversation>
        <type>greeting</type>
        <pattern id="1">\\b(hi|hello)\\b</pattern>
        <response id="1">Hello there!</response>
        <response id="1">Hi!</response>
      </conversation>
    </conversations>

  Each <pattern> becomes one rule whose responses are the <response>
  elements sharing its id. Spaces and newlines are stripped from pattern
  text, so literal spaces must be written as ``\\s``.

YAML::

    conversations:
      - type: greeting
        pattern: "\\\\b(hi|hello)\\\\b"
        responses: ["Hello there!", "Hi!"]

Load failures never propagate: they are logged and produce an empty list.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union

import yaml

from core.exceptions import ConversationLoadError
from core.logging import get_logger
from .rules import Rule

logger = get_logger("conversation.loader")


DEFAULT_CONVERSATION_FILE = Path(__file__).parent / "data" / "conversation_data.xml"

CONVERSATION_TAG = "conversation"
TYPE_TAG = "type"
PATTERN_TAG = "pattern"
RESPONSE_TAG = "response"
ID_ATTRIBUTE = "id"

_PATTERN_WHITESPACE = re.compile(r"[\n ]")
_RESPONSE_INDENT = re.compile(r"  +")


def load_conversations(path: Union[str, Path]) -> List[Rule]:
    """
    Load conversation rules from an XML or YAML file.

    Args:
        path: Path to the conversation file

    Returns:
        Rules in file order, or an empty list if the file cannot be loaded
    """
    path = Path(path).expanduser()

    try:
        suffix = path.suffix.lower()
        if suffix == ".xml":
            rules = parse_xml(path.read_bytes())
        elif suffix in (".yaml", ".yml"):
            rules = parse_yaml(path.read_text(encoding="utf-8"))
        else:
            raise ConversationLoadError(
                f"Unsupported conversation file type: {path.suffix or '(none)'}",
                {"path": str(path)}
            )
    except (OSError, UnicodeDecodeError, ET.ParseError, yaml.YAMLError, ConversationLoadError) as e:
        logger.error(f"Error fetching conversation list from {path}: {e}")
        return []

    logger.info(f"Loaded {len(rules)} conversation rule(s) from {path}")
    return rules


def load_default_conversations() -> List[Rule]:
    """Load the conversation rules bundled with the package."""
    return load_conversations(DEFAULT_CONVERSATION_FILE)


def parse_xml(data: Union[str, bytes]) -> List[Rule]:
    """
    Parse conversation rules from XML.

    Raises:
        ET.ParseError: If the document is not well-formed
    """
    root = ET.fromstring(data)
    rules: List[Rule] = []

    conversations = [root] if root.tag == CONVERSATION_TAG else list(root.iter(CONVERSATION_TAG))

    for index, conversation in enumerate(conversations):
        type_element = conversation.find(f".//{TYPE_TAG}")
        if type_element is None:
            logger.warning(f"Skipping conversation #{index}: missing <{TYPE_TAG}>")
            continue

        conversation_type = _text(type_element).strip()
        responses = list(conversation.iter(RESPONSE_TAG))

        for pattern_element in conversation.iter(PATTERN_TAG):
            pattern_id = pattern_element.get(ID_ATTRIBUTE, "")
            rules.append(Rule(
                type=conversation_type,
                pattern=_PATTERN_WHITESPACE.sub("", _text(pattern_element)).strip(),
                responses=tuple(
                    _RESPONSE_INDENT.sub("", _text(response)).strip()
                    for response in responses
                    if response.get(ID_ATTRIBUTE, "") == pattern_id
                ),
            ))

    return rules


def parse_yaml(text: str) -> List[Rule]:
    """
    Parse conversation rules from YAML.

    Raises:
        yaml.YAMLError: If the document is not valid YAML
        ConversationLoadError: If the document has the wrong shape, or a
            conversation lacks a pattern or has non-list responses
    """
    data = yaml.safe_load(text) or {}

    if isinstance(data, dict):
        entries = data.get("conversations") or []
    else:
        entries = data

    if not isinstance(entries, list):
        raise ConversationLoadError("'conversations' must be a list")

    rules: List[Rule] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or "pattern" not in entry:
            raise ConversationLoadError(f"Conversation #{index} has no pattern")
        responses = entry.get("responses")
        if responses is not None and not isinstance(responses, (str, list)):
            raise ConversationLoadError(
                f"Conversation #{index}: responses must be a string or a list",
                {"responses": responses}
            )
        rules.append(Rule.from_dict(entry))

    return rules


def _text(element: ET.Element) -> str:
    # text content of the element and all of its descendants
    return "".join(element.itertext())
