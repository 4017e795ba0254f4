"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..models import Message

PROFILE_GLYPH = "👤"


def avatar_glyph(avatar: str | None) -> str:
    """Return the participant's avatar, or the generic profile glyph."""
    if avatar and avatar.strip():
        return avatar.strip()
    return PROFILE_GLYPH


def format_timestamp(value: datetime) -> str:
    """Render a message time as local ``HH:MM``."""
    return value.astimezone().strftime("%H:%M")


class MessageBubble(Vertical):
    """Render a single chat message with author header and plain text body."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
        margin-bottom: 1;
    }
    MessageBubble > #header-block {
        text-style: bold;
    }
    MessageBubble > #content-block {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        content: str,
        author_name: str,
        kind: str,
        avatar: str | None = None,
        timestamp: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.message_content = content
        self.author_name = author_name
        self.avatar = avatar_glyph(avatar)
        self.timestamp = timestamp
        self.add_class(f"role-{kind}")
        self._content_widget: Static | None = None

    @classmethod
    def from_message(cls, message: Message, show_timestamps: bool = True) -> MessageBubble:
        return cls(
            content=message.text,
            author_name=message.author.display_name,
            kind=message.author.kind.value,
            avatar=message.author.avatar,
            timestamp=format_timestamp(message.created_at) if show_timestamps else "",
        )

    def _compose_header(self) -> str:
        header = f"{self.avatar} {self.author_name}"
        if self.timestamp:
            header = f"{header}  {self.timestamp}"
        return header

    def compose(self) -> ComposeResult:
        self._content_widget = Static(Text(self.message_content), id="content-block")
        yield Static(Text(self._compose_header()), id="header-block")
        yield self._content_widget

    def set_content(self, content: str) -> None:
        """Replace the body text and rerender."""
        self.message_content = content
        if self._content_widget is not None:
            self._content_widget.update(Text(content))
