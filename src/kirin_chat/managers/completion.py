"""Single-shot (non-streamed) reply handling."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..models import ASSISTANT, SERVER, Message, OutgoingTurnRequest

if TYPE_CHECKING:
    from ..chat import BackendClient
    from ..message_store import MessageStore
    from ..state import ComposingIndicator

LOGGER = logging.getLogger(__name__)

THINK_END_MARKER = "</think>"


def strip_thinking(content: str) -> str:
    """Drop a leading reasoning segment ending at the first ``</think>``."""
    position = content.find(THINK_END_MARKER)
    if position == -1:
        return content
    return content[position + len(THINK_END_MARKER) :]


class NonStreamConsumer:
    """Issue a turn in single-shot mode and append the reply."""

    def __init__(
        self,
        backend: BackendClient,
        store: MessageStore,
        indicator: ComposingIndicator,
    ) -> None:
        self.backend = backend
        self.store = store
        self.indicator = indicator
        self._settled = False

    async def consume(self, request: OutgoingTurnRequest) -> bool:
        """Return True when an assistant reply was appended."""
        try:
            completion = await self.backend.complete_chat(request)
        except asyncio.CancelledError:
            self.abort()
            raise
        except Exception as exc:  # noqa: BLE001 - every failure becomes a transcript entry.
            self._settled = True
            description = str(exc) or exc.__class__.__name__
            self.store.append(Message(author=SERVER, text=description))
            self.indicator.clear()
            LOGGER.warning(
                "chat.completion.failed",
                extra={
                    "event": "chat.completion.failed",
                    "error_type": exc.__class__.__name__,
                    "error": description,
                },
            )
            return False

        self._settled = True
        text = strip_thinking(completion.content)
        if len(text) != len(completion.content):
            LOGGER.debug(
                "chat.completion.thinking_stripped",
                extra={
                    "event": "chat.completion.thinking_stripped",
                    "thinking": completion.content[: len(completion.content) - len(text)],
                },
            )
        self.store.append(
            Message(author=ASSISTANT, text=text, created_at=completion.created_at)
        )
        self.indicator.clear()
        LOGGER.info(
            "chat.completion.completed",
            extra={"event": "chat.completion.completed", "chars": len(text)},
        )
        return True

    def abort(self) -> None:
        """Stop waiting for the reply without touching the transcript."""
        if self._settled:
            return
        self._settled = True
        self.indicator.clear()
        LOGGER.info("chat.completion.aborted", extra={"event": "chat.completion.aborted"})
