"""Consumption of a streamed assistant reply.

Drives one turn through ``IDLE -> OPENED -> RECEIVING`` and exactly one of
``COMPLETED``, ``ABORTED`` or ``FAILED``, mirroring each step into the message
store and clearing the composing indicator on the terminal transition.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import TYPE_CHECKING

from ..models import ASSISTANT, SERVER, Message, OutgoingTurnRequest, utc_now
from ..state import StreamState, can_transition

if TYPE_CHECKING:
    from ..chat import BackendClient
    from ..message_store import MessageStore
    from ..state import ComposingIndicator

LOGGER = logging.getLogger(__name__)

SERVICE_UNAVAILABLE_TEXT = (
    "Sorry, the service isn't available right now. Please try again later."
)


class StreamConsumer:
    """Apply the events of one streamed turn to the transcript.

    A consumer handles a single request; create a new one per turn.
    """

    def __init__(
        self,
        backend: BackendClient,
        store: MessageStore,
        indicator: ComposingIndicator,
    ) -> None:
        self.backend = backend
        self.store = store
        self.indicator = indicator
        self._state = StreamState.IDLE
        self._text = ""
        self._active: Message | None = None
        self._on_state_change: list[Callable[[StreamState], None]] = []

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def text(self) -> str:
        """Assistant text accumulated so far."""
        return self._text

    def on_state_change(self, callback: Callable[[StreamState], None]) -> None:
        """Register callback invoked with each new state."""
        self._on_state_change.append(callback)

    async def consume(self, request: OutgoingTurnRequest) -> StreamState:
        """Read the stream for ``request`` until a terminal state is reached.

        Transport failures never propagate: they end the turn in ``FAILED``.
        Cancelling the awaiting task ends it in ``ABORTED`` and re-raises.
        """
        if self._state is not StreamState.IDLE:
            raise RuntimeError("A StreamConsumer can only consume one request.")

        try:
            async for event in self.backend.stream_chat(request):
                if event.kind == "open":
                    self._open(event.status_code)
                elif event.kind == "fragment":
                    self._receive(event.data)
                elif event.kind == "complete":
                    self._complete()
        except asyncio.CancelledError:
            self.abort()
            raise
        except Exception as exc:  # noqa: BLE001 - transport can fail in many ways.
            self._fail(exc)
        else:
            # Body ended without an explicit completion event.
            self._complete()
        return self._state

    def abort(self) -> None:
        """Stop the turn quietly, keeping whatever text already arrived."""
        if not self._transition(StreamState.ABORTED):
            return
        self._settle_partial()
        self.indicator.clear()
        LOGGER.info(
            "chat.stream.aborted",
            extra={"event": "chat.stream.aborted", "chars": len(self._text)},
        )

    def _open(self, status_code: int | None) -> None:
        if not self._transition(StreamState.OPENED):
            return
        self._active = Message(author=ASSISTANT, text="", created_at=utc_now())
        self.store.begin_active(self._active)
        LOGGER.info(
            "chat.stream.open",
            extra={"event": "chat.stream.open", "status_code": status_code},
        )

    def _receive(self, fragment: str) -> None:
        if self._state is StreamState.IDLE:
            self._open(None)
        if self._active is None or not self._transition(StreamState.RECEIVING):
            return
        self._text += fragment
        self._active = self._active.with_text(self._text)
        self.store.replace_last(self._active)

    def _complete(self) -> None:
        if self._state is StreamState.IDLE:
            self._open(None)
        if not self._transition(StreamState.COMPLETED):
            return
        if self._active is not None:
            self.store.finalize_active()
            self._active = None
        self.indicator.clear()
        LOGGER.info(
            "chat.stream.completed",
            extra={"event": "chat.stream.completed", "chars": len(self._text)},
        )

    def _fail(self, exc: Exception) -> None:
        if not self._transition(StreamState.FAILED):
            return
        self._settle_partial()
        self.store.append(Message(author=SERVER, text=SERVICE_UNAVAILABLE_TEXT))
        self.indicator.clear()
        LOGGER.warning(
            "chat.stream.failed",
            extra={
                "event": "chat.stream.failed",
                "error_type": exc.__class__.__name__,
                "error": str(exc),
            },
        )

    def _settle_partial(self) -> None:
        """Keep a partial reply in the log; drop a placeholder that never got text."""
        if self._active is None:
            return
        if self._text:
            self.store.finalize_active()
        else:
            self.store.discard_active()
        self._active = None

    def _transition(self, new_state: StreamState) -> bool:
        if not can_transition(self._state, new_state):
            if not self._state.is_terminal:
                LOGGER.warning(
                    "chat.stream.invalid_transition",
                    extra={
                        "event": "chat.stream.invalid_transition",
                        "from_state": self._state.value,
                        "to_state": new_state.value,
                    },
                )
            return False
        old_state = self._state
        self._state = new_state
        if old_state is not new_state:
            for callback in list(self._on_state_change):
                callback(new_state)
        return True
