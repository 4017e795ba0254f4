"""Indicator shown while the assistant composes a reply."""

from __future__ import annotations

from textual.widgets import Static


class TypingIndicator(Static):
    """Single-line "is typing" notice bound to the composing flag."""

    DEFAULT_CSS = """
    TypingIndicator {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self, author_name: str = "Kirin", **kwargs) -> None:
        super().__init__(f"{author_name} is typing...", **kwargs)
        self.active = False
        self.display = False

    def set_active(self, active: bool) -> None:
        self.active = active
        self.display = active
