"""Input row containing the prompt field and send button."""

from __future__ import annotations

from textual.containers import Horizontal
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Prompt entry row."""

    DEFAULT_CSS = """
    InputBox {
        height: auto;
    }
    InputBox > #message_input {
        width: 1fr;
    }
    """

    def __init__(self, placeholder: str = "Type prompt here", **kwargs) -> None:
        super().__init__(**kwargs)
        self.placeholder = placeholder

    def compose(self):  # type: ignore[override]
        yield Input(placeholder=self.placeholder, id="message_input")
        yield Button("Send", id="send_button", variant="success")
