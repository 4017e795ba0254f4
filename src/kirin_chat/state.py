"""Conversation session, composing flag and stream lifecycle states."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)

UNSET_THREAD_ID = 0


class StreamState(str, Enum):
    """Finite state machine for one streamed turn."""

    IDLE = "IDLE"
    OPENED = "OPENED"
    RECEIVING = "RECEIVING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {StreamState.COMPLETED, StreamState.ABORTED, StreamState.FAILED}
)

_ALLOWED_TRANSITIONS: dict[StreamState, frozenset[StreamState]] = {
    StreamState.IDLE: frozenset(
        {StreamState.OPENED, StreamState.ABORTED, StreamState.FAILED}
    ),
    StreamState.OPENED: frozenset(
        {
            StreamState.RECEIVING,
            StreamState.COMPLETED,
            StreamState.ABORTED,
            StreamState.FAILED,
        }
    ),
    StreamState.RECEIVING: frozenset(
        {
            StreamState.RECEIVING,
            StreamState.COMPLETED,
            StreamState.ABORTED,
            StreamState.FAILED,
        }
    ),
}


def can_transition(current: StreamState, new_state: StreamState) -> bool:
    """Return True when ``current -> new_state`` is a legal stream transition."""
    return new_state in _ALLOWED_TRANSITIONS.get(current, frozenset())


class ConversationSession:
    """Conversation identity for one controller lifetime.

    ``thread_id`` starts at the sentinel ``0`` and is bound exactly once.
    """

    def __init__(self) -> None:
        self._thread_id = UNSET_THREAD_ID
        self._closed = False

    @property
    def thread_id(self) -> int:
        return self._thread_id

    @property
    def is_initialized(self) -> bool:
        return self._thread_id > 0

    @property
    def closed(self) -> bool:
        return self._closed

    def bind(self, thread_id: int) -> None:
        """Record the backend-assigned thread id."""
        if self.is_initialized:
            raise RuntimeError(
                f"Conversation is already bound to thread {self._thread_id}."
            )
        if thread_id <= 0:
            raise ValueError(f"Invalid thread id {thread_id!r}.")
        self._thread_id = thread_id

    def close(self) -> None:
        self._closed = True


IndicatorListener = Callable[[bool], None]


class ComposingIndicator:
    """Boolean "assistant is composing" flag with change notifications."""

    def __init__(self) -> None:
        self._active = False
        self._listeners: list[IndicatorListener] = []

    @property
    def active(self) -> bool:
        return self._active

    def on_change(self, callback: IndicatorListener) -> None:
        """Register callback invoked with the new value on every change."""
        self._listeners.append(callback)

    def set(self) -> None:
        self._update(True)

    def clear(self) -> None:
        self._update(False)

    def _update(self, value: bool) -> None:
        if value == self._active:
            return
        self._active = value
        for callback in list(self._listeners):
            try:
                callback(value)
            except Exception as exc:  # noqa: BLE001 - UI callbacks must not break state.
                LOGGER.error(
                    "indicator.listener.failed",
                    extra={"event": "indicator.listener.failed", "error": str(exc)},
                )
