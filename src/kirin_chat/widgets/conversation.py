"""Scrollable conversation view widget."""

from __future__ import annotations

from collections.abc import Sequence

from textual.containers import VerticalScroll

from ..models import Message, ParticipantKind
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container holding one bubble per transcript message."""

    def __init__(
        self,
        *args,
        show_timestamps: bool = True,
        accent_color: str | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.show_timestamps = show_timestamps
        self.accent_color = accent_color
        self._bubbles: list[MessageBubble] = []

    @property
    def bubbles(self) -> list[MessageBubble]:
        return list(self._bubbles)

    async def sync(self, snapshot: Sequence[Message]) -> None:
        """Bring the bubbles in line with ``snapshot``.

        The transcript only grows and only its last entry changes text, so
        existing bubbles are updated in place and new ones are mounted.
        """
        for index, message in enumerate(snapshot):
            if index < len(self._bubbles):
                bubble = self._bubbles[index]
                if bubble.message_content != message.text:
                    bubble.set_content(message.text)
                continue
            bubble = MessageBubble.from_message(message, self.show_timestamps)
            bubble.add_class(f"message-{message.author.kind.value}")
            if self.accent_color and message.author.kind is ParticipantKind.USER:
                bubble.styles.border_left = ("wide", self.accent_color)
            self._bubbles.append(bubble)
            await self.mount(bubble)
        self.scroll_end(animate=False)
