"""Feedback entry modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

_MAX_FEEDBACK_LENGTH = 500


class FeedbackModal(ModalScreen[str | None]):
    """Free-text feedback prompt; dismisses with the text or ``None``."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", priority=True),
        Binding("enter", "confirm", "Send", priority=True),
        Binding("backspace", "backspace", "Delete char", priority=True),
    ]

    CSS = """
    FeedbackModal {
        align: center middle;
        background: $background 60%;
    }

    #feedback-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #feedback-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #feedback-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #feedback-error {
        color: #ffb3b3;
    }

    #feedback-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="feedback-dialog"):
            yield Static("Feedback", id="feedback-title")
            yield Static(id="feedback-value")
            yield Static(id="feedback-error")
            yield Static("Type text, Enter send, Esc cancel", id="feedback-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.is_printable and event.character:
            if len(self.value) < _MAX_FEEDBACK_LENGTH:
                self.value += event.character
            self.error = ""
            self._refresh_content()
        # Ignore all non-text keys while typing.
        event.stop()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_backspace(self) -> None:
        if self.value:
            self.value = self.value[:-1]
            self._refresh_content()

    def action_confirm(self) -> None:
        normalized = self.value.strip()
        if not normalized:
            self.error = "Please enter your feedback!"
            self._refresh_content()
            return
        self.dismiss(normalized)

    def _refresh_content(self) -> None:
        self.query_one("#feedback-value", Static).update(Text(f"{self.value}|"))
        self.query_one("#feedback-error", Static).update(self.error or "")
