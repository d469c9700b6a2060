"""
Chatbot Factory - Wiring the chatbot from configuration
=======================================================

This module builds one chatbot session: context store, rule table,
dictionary client, matcher and responder, and the pipeline that the UI
drives.
"""

import random
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import List, Optional

import httpx

from conversation.context import ContextStore
from conversation.loader import load_conversations, load_default_conversations
from conversation.matcher import ConversationMatcher
from conversation.rules import Rule, RuleTable
from core.config import Config
from core.logging import get_logger
from core.scheduler import Scheduler
from .chat_responder import ChatResponder
from .dictionary import DictionaryClient
from .pipeline import ChatPipeline, Dispatch, Sink

logger = get_logger("services.factory")


@dataclass
class Chatbot:
    """
    The components of one chatbot session.

    Everything here lives as long as the session; nothing is shared
    between sessions.
    """
    config: Config
    context: ContextStore
    rules: RuleTable
    dictionary: DictionaryClient
    matcher: ConversationMatcher
    responder: ChatResponder

    def create_pipeline(
        self,
        sink: Sink,
        dispatch: Optional[Dispatch] = None,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None
    ) -> ChatPipeline:
        """
        Create the event pipeline feeding this chatbot.

        Closing the pipeline also closes the dictionary client.

        Args:
            sink: Transcript sink, called on the UI thread
            dispatch: UI-thread hand-off for replies
            scheduler: Timer source (tests pass a ManualScheduler)
            executor: Worker pool override
        """
        pipeline_config = self.config.pipeline
        return ChatPipeline(
            responder=self.responder,
            sink=sink,
            scheduler=scheduler,
            executor=executor,
            dispatch=dispatch,
            throttle_seconds=pipeline_config.throttle_ms / 1000.0,
            debounce_seconds=pipeline_config.debounce_ms / 1000.0,
            max_workers=pipeline_config.worker_threads,
            on_close=self.close,
        )

    def close(self) -> None:
        self.dictionary.close()


def load_rules(config: Config, conversation_file: Optional[str] = None) -> List[Rule]:
    """
    Load the conversation rules named by the configuration.

    Args:
        config: Application configuration
        conversation_file: Overrides ``config.chat.conversation_file``

    Returns:
        Loaded rules; empty if the file could not be loaded
    """
    path = conversation_file or config.chat.conversation_file
    if path:
        return load_conversations(path)
    return load_default_conversations()


def create_chatbot(
    config: Config,
    conversation_file: Optional[str] = None,
    rules: Optional[List[Rule]] = None,
    http_client: Optional[httpx.Client] = None
) -> Chatbot:
    """
    Build a chatbot session from configuration.

    Args:
        config: Application configuration
        conversation_file: Conversation file override
        rules: Rules to use instead of loading a file
        http_client: HTTP client for the dictionary client

    Returns:
        Ready-to-use Chatbot
    """
    chat_config = config.chat
    dictionary_config = config.dictionary

    context = ContextStore(chat_config.context_keys)

    table = RuleTable()
    table.load(rules if rules is not None else load_rules(config, conversation_file))
    if not len(table):
        logger.warning("No conversation rules loaded; every message gets the fallback reply")

    dictionary = DictionaryClient(
        api_base=dictionary_config.api_base,
        timeout=dictionary_config.timeout,
        definition_label=dictionary_config.definition_label,
        no_definition_response=dictionary_config.no_definition_response,
        max_workers=dictionary_config.io_threads,
        http_client=http_client,
    )

    matcher = ConversationMatcher(
        rules=table,
        context=context,
        lookup=dictionary.lookup,
        definition_marker=dictionary_config.marker,
        rng=random.Random(chat_config.random_seed),
    )

    responder = ChatResponder(
        matcher=matcher,
        context=context,
        fallback_response=chat_config.fallback_response,
        user_label=chat_config.user_label,
        bot_label=chat_config.bot_label,
    )

    return Chatbot(
        config=config,
        context=context,
        rules=table,
        dictionary=dictionary,
        matcher=matcher,
        responder=responder,
    )
