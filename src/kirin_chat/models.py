"""Typed records shared by the controller, the HTTP client and the UI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ParticipantKind(str, Enum):
    """Closed set of transcript authors."""

    USER = "user"
    ASSISTANT = "assistant"
    SERVER = "server"


@dataclass(frozen=True)
class Participant:
    """Identity and display metadata for a message author."""

    kind: ParticipantKind
    id: str
    display_name: str
    avatar: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ParticipantKind):
            raise TypeError(f"Unknown participant kind {self.kind!r}.")
        if not self.id.strip():
            raise ValueError("Participant id must not be empty.")
        if not self.display_name.strip():
            raise ValueError("Participant display_name must not be empty.")


USER = Participant(ParticipantKind.USER, id="user", display_name="You")
ASSISTANT = Participant(
    ParticipantKind.ASSISTANT, id="smile", display_name="Kirin", avatar="🦙"
)
SERVER = Participant(
    ParticipantKind.SERVER, id="server", display_name="Server", avatar="🌐"
)


@dataclass(frozen=True)
class Message:
    """One transcript entry.

    Messages are immutable values. The streaming path produces a fresh
    ``Message`` per fragment via :meth:`with_text` instead of mutating text in
    place, so a finalized message can never change underneath a reader.
    """

    author: Participant
    text: str
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not isinstance(self.author, Participant):
            raise TypeError("Message author must be a Participant.")
        if not isinstance(self.text, str):
            raise TypeError("Message text must be a string.")
        if not isinstance(self.created_at, datetime):
            raise TypeError("Message created_at must be a datetime.")
        if self.created_at.tzinfo is None:
            raise ValueError("Message created_at must be timezone-aware.")

    def with_text(self, text: str) -> Message:
        """Return a copy carrying ``text`` with the same author and timestamp."""
        return replace(self, text=text)


Role = Literal["user", "system"]


@dataclass(frozen=True)
class ContentEntry:
    """A role-tagged entry of an outgoing turn."""

    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class OutgoingTurnRequest:
    """Request body for one turn; built per call and never stored."""

    model: str
    thread_id: int
    stream: bool
    messages: tuple[ContentEntry, ...]

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the backend's camelCase field names."""
        return {
            "model": self.model,
            "threadId": self.thread_id,
            "stream": self.stream,
            "messages": [entry.to_payload() for entry in self.messages],
        }


@dataclass(frozen=True)
class ChatCompletion:
    """Parsed single-shot response."""

    content: str
    created_at: datetime


@dataclass(frozen=True)
class StreamEvent:
    """A single typed event yielded while a streamed response is read."""

    kind: Literal["open", "fragment", "complete"]
    data: str = ""
    status_code: int | None = None
