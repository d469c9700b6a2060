"""
Textual Application - Chat window
=================================

This module implements the terminal chat window: a scrollable transcript
above a message input with a send button. Submitted text is fed into the
chat pipeline; the pipeline writes echoes and replies back through the
transcript sink, replies marshaled onto the UI thread.
"""

import sys
import threading
from concurrent.futures import Executor
from typing import Any, Callable, List, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Footer, Header, Input, RichLog

from core.config import Config, load_config
from core.exceptions import UIError
from core.logging import get_logger
from core.scheduler import Scheduler
from services.factory import Chatbot, create_chatbot
from services.pipeline import ChatPipeline

logger = get_logger("tui.app")


class ChatbotApp(App):
    """
    Chatbot Terminal UI Application.

    Example:
        app = ChatbotApp(config=load_config())
        app.run()
    """

    CSS = """
    Screen {
        background: $surface;
    }

    #transcript {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    #input-row {
        height: auto;
        margin: 1 0 0 0;
    }

    #message-input {
        width: 1fr;
    }

    #send-btn {
        width: 12;
        margin: 0 0 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False),
        Binding("ctrl+l", "clear_transcript", "Clear"),
    ]

    def __init__(
        self,
        config: Optional[Config] = None,
        chatbot: Optional[Chatbot] = None,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None
    ):
        """
        Args:
            config: Application configuration, loaded if not given
            chatbot: Prebuilt chatbot session, created from config if not given
            scheduler: Pipeline timer source override
            executor: Pipeline worker pool override
        """
        super().__init__()

        self.config = config or load_config()
        self.chatbot = chatbot or create_chatbot(self.config)
        self.transcript: List[str] = []
        self.pipeline: Optional[ChatPipeline] = None

        self._scheduler = scheduler
        self._executor = executor
        self._ui_thread: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield RichLog(id="transcript", wrap=True, markup=False, auto_scroll=True)
        with Horizontal(id="input-row"):
            yield Input(placeholder=self.config.ui.input_placeholder, id="message-input")
            yield Button("Send", id="send-btn", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self._ui_thread = threading.get_ident()
        self.title = self.config.ui.title

        if self.config.ui.theme in self.available_themes:
            self.theme = self.config.ui.theme

        self.pipeline = self.chatbot.create_pipeline(
            sink=self.append_transcript,
            dispatch=self.dispatch_to_ui,
            scheduler=self._scheduler,
            executor=self._executor,
        )

        self.query_one("#message-input", Input).focus()
        logger.info(f"Chat window started with {len(self.chatbot.rules)} rule(s)")

    def on_unmount(self) -> None:
        if self.pipeline is not None:
            self.pipeline.close()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self.send_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.send_message()

    def send_message(self) -> None:
        """Submit the input text and clear the input if it was accepted."""
        input_widget = self.query_one("#message-input", Input)

        if self.pipeline is not None and self.pipeline.submit(input_widget.value):
            input_widget.value = ""

    def append_transcript(self, line: str) -> None:
        """Transcript sink: append one echo or reply."""
        self.transcript.append(line)
        self.query_one("#transcript", RichLog).write(Text(line.rstrip("\n")))

    def dispatch_to_ui(self, callback: Callable[..., Any], *args) -> None:
        """Run ``callback`` on the UI thread."""
        if threading.get_ident() == self._ui_thread:
            callback(*args)
        else:
            self.call_from_thread(callback, *args)

    def action_clear_transcript(self) -> None:
        self.transcript.clear()
        self.query_one("#transcript", RichLog).clear()


def run_tui(config: Optional[Config] = None) -> None:
    """
    Run the chat window until the user quits.

    Raises:
        UIError: If stdout is not an interactive terminal
    """
    if not sys.stdout.isatty():
        raise UIError("The chat window needs an interactive terminal; try --test")

    app = ChatbotApp(config=config)
    app.run()


if __name__ == "__main__":
    run_tui()
