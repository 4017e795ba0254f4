"""Incremental parser for ``text/event-stream`` bodies."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerSentEvent:
    """A dispatched Server-Sent Event."""

    event: str
    data: str
    id: str | None = None


class EventStreamParser:
    """Turn decoded lines of an event stream into dispatched events.

    Feed every line (without its terminator) to :meth:`feed_line`; a blank
    line dispatches the event collected so far. Call :meth:`flush` once the
    body ends to dispatch an event the server did not terminate.
    """

    def __init__(self) -> None:
        self._event = ""
        self._data: list[str] = []
        self._last_id: str | None = None

    def feed_line(self, line: str) -> ServerSentEvent | None:
        if line == "":
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            if "\x00" not in value:
                self._last_id = value
        # "retry" and unknown fields carry nothing for a reader without reconnection.
        return None

    def flush(self) -> ServerSentEvent | None:
        return self._dispatch()

    def _dispatch(self) -> ServerSentEvent | None:
        if not self._data:
            self._event = ""
            return None
        event = ServerSentEvent(
            event=self._event or "message",
            data="\n".join(self._data),
            id=self._last_id,
        )
        self._event = ""
        self._data = []
        return event
