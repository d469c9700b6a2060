"""
Chat Responder - Turning user messages into bot replies
=======================================================

This module combines the conversation matcher with context rendering and
the fallback reply, producing one reply per user message.
"""

from concurrent.futures import Future
from typing import Optional

from conversation.context import ContextStore
from conversation.matcher import ConversationMatcher
from core.logging import get_logger

logger = get_logger("services.chat_responder")


DEFAULT_FALLBACK_RESPONSE = "Sorry I didn't understand."


def _completed(value: str) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


class ChatResponder:
    """
    Reply generator for the chat pipeline.

    Replies come back as futures: most are already completed, a reply
    waiting on a word definition completes when the lookup does.

    Example:
        responder = ChatResponder(matcher, context)

        reply = responder.get_response("my name is Anna").result()
        print(responder.add_bot_label(reply))
    """

    def __init__(
        self,
        matcher: ConversationMatcher,
        context: ContextStore,
        fallback_response: str = DEFAULT_FALLBACK_RESPONSE,
        user_label: str = "You: ",
        bot_label: str = "Bot: "
    ):
        self.matcher = matcher
        self.context = context
        self.fallback_response = fallback_response
        self.user_label = user_label
        self.bot_label = bot_label

    def get_response(self, message: str) -> Future:
        """
        Compute the reply to a user message.

        A message that triggered a definition lookup is answered with the
        definition; otherwise the matched responses are rendered with the
        stored context, or the fallback reply is used if nothing matched.

        Args:
            message: User message

        Returns:
            Future completed with the reply text
        """
        outcome = self.matcher.match(message)

        if outcome.awaiting_definition:
            logger.debug("Reply is waiting for a definition")
            return outcome.definition

        if not outcome.text:
            logger.info("No rule matched, using fallback response")
            return _completed(self.fallback_response)

        return _completed(self.context.render(outcome.text))

    def respond(self, message: str, timeout: Optional[float] = None) -> str:
        """
        Compute the reply to a user message, waiting for it if needed.

        Args:
            message: User message
            timeout: Seconds to wait for a pending definition

        Raises:
            concurrent.futures.TimeoutError: If the definition does not arrive in time
        """
        return self.get_response(message).result(timeout=timeout)

    def add_user_label(self, message: str) -> str:
        return f"{self.user_label}{message}\n"

    def add_bot_label(self, message: str) -> str:
        return f"{self.bot_label}{message}\n"
