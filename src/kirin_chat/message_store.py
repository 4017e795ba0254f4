"""Append-only transcript storage with an explicit in-flight assistant message."""

from __future__ import annotations

from collections.abc import Callable
import logging

from .models import Message

LOGGER = logging.getLogger(__name__)

Snapshot = tuple[Message, ...]
SnapshotListener = Callable[[Snapshot], None]


class MessageStore:
    """Own the ordered chat transcript.

    Finalized messages live in an append-only log. At most one *active*
    message (the assistant reply currently being streamed) sits after the log;
    it is the only entry whose text may change and it leaves the active slot
    either by being finalized into the log or discarded before anything was
    shown for it.

    Every mutation notifies subscribers synchronously with the recomputed
    snapshot, so a renderer sees each state before the next mutation lands.
    """

    def __init__(self, initial: list[Message] | None = None) -> None:
        self._messages: list[Message] = list(initial or [])
        self._active: Message | None = None
        self._listeners: list[SnapshotListener] = []

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callback receiving the snapshot after every mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def message_count(self) -> int:
        """Return the number of visible messages, the active one included."""
        return len(self._messages) + (1 if self._active is not None else 0)

    @property
    def active(self) -> Message | None:
        """Return the in-flight streaming message, if any."""
        return self._active

    def snapshot(self) -> Snapshot:
        """Return an immutable view of the transcript in display order."""
        if self._active is None:
            return tuple(self._messages)
        return (*self._messages, self._active)

    def append(self, message: Message) -> None:
        """Append a finalized message after the log (and after any active message)."""
        if self._active is not None:
            # An active reply keeps its position ahead of anything appended later.
            self._messages.append(self._active)
            self._active = None
        self._messages.append(message)
        self._notify()

    def begin_active(self, message: Message) -> None:
        """Install ``message`` as the in-flight streaming target.

        The placeholder is not published until its first update: an empty
        assistant bubble carries no information for the renderer.
        """
        if self._active is not None:
            raise RuntimeError("A streaming message is already active.")
        self._active = message

    def replace_last(self, message: Message) -> None:
        """Replace the in-flight streaming message with an updated copy."""
        if self._active is None:
            raise RuntimeError("There is no active streaming message to replace.")
        if message.author != self._active.author:
            raise ValueError("The active message author cannot change.")
        self._active = message
        self._notify()

    def finalize_active(self) -> Message | None:
        """Move the active message into the log and return it."""
        message = self._active
        if message is None:
            return None
        self._active = None
        self._messages.append(message)
        self._notify()
        return message

    def discard_active(self) -> None:
        """Drop an active message that never received any text.

        Discarding a message that already has text would retract something the
        renderer has shown, so that is refused.
        """
        if self._active is None:
            return
        if self._active.text:
            raise RuntimeError("Cannot discard a streaming message that has text.")
        self._active = None

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as exc:  # noqa: BLE001 - a renderer must not break the store.
                LOGGER.error(
                    "store.listener.failed",
                    extra={"event": "store.listener.failed", "error": str(exc)},
                )
