"""
Chat Pipeline - From submitted text to rendered replies
=======================================================

This module sequences one user submission through the chatbot:

    submit -> throttle -> echo -> debounce -> match (worker pool)
           -> reply or pending definition -> dispatch to the transcript

Echoes are written synchronously on the submitting (UI) thread; replies
are computed on the worker pool and handed back to the UI through the
``dispatch`` callable. Replies of different submissions may arrive out of
order when one of them waits on a definition lookup.
"""

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from core.logging import get_logger
from core.rate_limiter import Throttle
from core.scheduler import Debouncer, Scheduler, ThreadingScheduler
from .chat_responder import ChatResponder

logger = get_logger("services.pipeline")


Sink = Callable[[str], None]
Dispatch = Callable[..., Any]


def _call_directly(callback: Callable[..., Any], *args) -> Any:
    return callback(*args)


class ChatPipeline:
    """
    Event pipeline between the UI and the chat responder.

    Example:
        pipeline = ChatPipeline(responder, sink=transcript.append)

        pipeline.submit("my name is Anna")
        # transcript: "You: my name is Anna\\n"
        # ~0.5s later: "Bot: Nice to meet you Anna!\\n"

        pipeline.close()
    """

    def __init__(
        self,
        responder: ChatResponder,
        sink: Sink,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None,
        dispatch: Optional[Dispatch] = None,
        throttle_seconds: float = 0.5,
        debounce_seconds: float = 0.5,
        max_workers: int = 4,
        on_close: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the pipeline.

        Args:
            responder: Produces replies for debounced messages
            sink: Appends a line to the transcript; UI thread only
            scheduler: Timer source, a ThreadingScheduler by default
            executor: Worker pool for matching, a thread pool by default
            dispatch: Runs ``callback(*args)`` on the UI thread; replies
                reach the sink through it. Calls directly by default.
            throttle_seconds: Minimum interval between accepted submissions
            debounce_seconds: Quiet period before a message is processed
            max_workers: Size of the default worker pool
            on_close: Extra cleanup run by ``close`` (e.g. the dictionary client)
        """
        self.responder = responder
        self.sink = sink
        self.scheduler = scheduler or ThreadingScheduler()
        self.dispatch = dispatch or _call_directly

        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="chat-worker"
        )
        self._throttle = Throttle(throttle_seconds, clock=self.scheduler.now)
        self._debouncer = Debouncer(self.scheduler, debounce_seconds, self._on_debounced)
        self._pending: List[Future] = []
        self._lock = threading.Lock()
        self._closed = False
        self._on_close = on_close

    def submit(self, text: str) -> bool:
        """
        Feed one user submission into the pipeline.

        Must be called on the UI thread.

        Args:
            text: Text the user submitted

        Returns:
            True if the submission was accepted (not throttled and not empty)
        """
        if self._closed:
            logger.debug("Pipeline closed, ignoring submission")
            return False

        if not self._throttle.check_and_record().allowed:
            return False

        if not text or not text.strip():
            return False

        self.sink(self.responder.add_user_label(text))
        self._debouncer.submit(text)
        return True

    def _on_debounced(self, message: str) -> None:
        if self._closed:
            return

        try:
            self._executor.submit(self._process, message)
        except RuntimeError as e:
            # executor already shut down
            logger.debug(f"Dropping message, worker pool unavailable: {e}")

    def _process(self, message: str) -> None:
        reply = self.responder.get_response(message)

        with self._lock:
            self._pending.append(reply)

        reply.add_done_callback(self._deliver)

    def _deliver(self, reply: Future) -> None:
        with self._lock:
            if reply in self._pending:
                self._pending.remove(reply)

        if reply.cancelled() or self._closed:
            return

        try:
            self.dispatch(self.sink, self.responder.add_bot_label(reply.result()))
        except Exception as e:
            logger.error(f"Failed to deliver reply: {e}", exc_info=True)

    @property
    def pending_replies(self) -> int:
        """Replies computed but not yet delivered (waiting on a definition)."""
        with self._lock:
            return len(self._pending)

    def close(self) -> None:
        """
        Shut the pipeline down.

        Pending timers and queued work are cancelled; replies still waiting
        on a definition are abandoned.
        """
        if self._closed:
            return
        self._closed = True

        self._debouncer.cancel()
        self.scheduler.shutdown()
        self._executor.shutdown(wait=False, cancel_futures=True)

        with self._lock:
            pending, self._pending = self._pending, []
        for reply in pending:
            reply.cancel()

        if self._on_close is not None:
            self._on_close()

        logger.info("Chat pipeline closed")
