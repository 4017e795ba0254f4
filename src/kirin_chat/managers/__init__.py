"""Collaborators the chat controller delegates a turn's lifecycle to.

Available managers:
- SessionInitializer: one-shot thread id acquisition
- StreamConsumer: streamed reply state machine
- NonStreamConsumer: single-shot reply handling
"""

from __future__ import annotations

from .completion import THINK_END_MARKER, NonStreamConsumer, strip_thinking
from .session import InitResult, SessionInitializer
from .stream import SERVICE_UNAVAILABLE_TEXT, StreamConsumer

__all__ = [
    "InitResult",
    "NonStreamConsumer",
    "SERVICE_UNAVAILABLE_TEXT",
    "SessionInitializer",
    "StreamConsumer",
    "THINK_END_MARKER",
    "strip_thinking",
]
