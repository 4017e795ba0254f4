"""Streaming chat session controller.

Owns the transcript, the conversation session and the composing flag, frames
user turns into backend requests and hands each one to the consumer for the
configured delivery mode.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from .chat import BackendClient
from .managers.completion import NonStreamConsumer
from .managers.session import InitResult, SessionInitializer
from .managers.stream import StreamConsumer
from .message_store import MessageStore, Snapshot, SnapshotListener
from .models import ASSISTANT, USER, ContentEntry, Message, OutgoingTurnRequest
from .state import ComposingIndicator, ConversationSession
from .task_manager import TaskManager

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "deepseek-r1:70b"
DEFAULT_SYSTEM_PROMPT = "You are a helpful, respectful and honest assistant."
DEFAULT_GREETING = (
    "Hello! How are you today? As a helpful, respectful and honest assistant, "
    "I am happy to serve you."
)

ACTIVE_TURN = "active_turn"
SESSION_INIT = "session_init"

Consumer = StreamConsumer | NonStreamConsumer


class ChatController:
    """Coordinate one conversation between the UI and the assistant backend."""

    def __init__(
        self,
        backend: BackendClient,
        *,
        model: str = DEFAULT_MODEL,
        stream: bool = True,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        greeting: str = DEFAULT_GREETING,
        task_manager: TaskManager | None = None,
    ) -> None:
        self.backend = backend
        self.model = model
        self.stream = stream
        self.system_prompt = system_prompt
        self.session = ConversationSession()
        self.indicator = ComposingIndicator()
        initial = [Message(author=ASSISTANT, text=greeting)] if greeting else []
        self.store = MessageStore(initial)
        self.task_manager = task_manager or TaskManager()
        self.initializer = SessionInitializer(backend, self.session)
        self._start_result: InitResult | None = None
        self._consumer: Consumer | None = None

    @classmethod
    def from_config(cls, config: dict[str, dict[str, Any]]) -> ChatController:
        """Build a controller and its HTTP client from validated config."""
        backend_config = config["backend"]
        backend = BackendClient(
            str(backend_config["host"]),
            threads_path=str(backend_config["threads_path"]),
            chat_path=str(backend_config["chat_path"]),
            connect_timeout=float(backend_config["connect_timeout"]),
        )
        return cls(
            backend,
            model=str(backend_config["model"]),
            stream=bool(backend_config["stream"]),
            system_prompt=str(backend_config["system_prompt"]),
            greeting=str(backend_config["greeting"]),
        )

    @property
    def messages(self) -> Snapshot:
        """Read-only transcript snapshot for rendering and tests."""
        return self.store.snapshot()

    @property
    def composing(self) -> bool:
        return self.indicator.active

    @property
    def thread_id(self) -> int:
        return self.session.thread_id

    @property
    def consumer(self) -> Consumer | None:
        """Consumer handling the most recent turn."""
        return self._consumer

    def subscribe(self, listener: SnapshotListener) -> None:
        """Receive a snapshot after every transcript mutation."""
        self.store.subscribe(listener)

    def on_composing_change(self, callback: Callable[[bool], None]) -> None:
        self.indicator.on_change(callback)

    async def start(self) -> InitResult:
        """Acquire the conversation thread once per controller lifetime."""
        if self._start_result is None:
            self._start_result = await self.initializer.initialize()
        return self._start_result

    def start_in_background(self) -> asyncio.Task[InitResult]:
        """Schedule :meth:`start` without holding up the first turn."""
        task = asyncio.create_task(self.start())
        self.task_manager.add(task, name=SESSION_INIT)
        return task

    def build_request(self, text: str) -> OutgoingTurnRequest:
        """Frame ``text`` for the backend; expects the user turn already appended."""
        entries = [ContentEntry(role="user", content=text)]
        # Guide the assistant once, on the first user turn only.
        user_turns = sum(
            1 for message in self.store.snapshot() if message.author == USER
        )
        if user_turns == 1:
            entries.insert(0, ContentEntry(role="system", content=self.system_prompt))
        return OutgoingTurnRequest(
            model=self.model,
            thread_id=self.session.thread_id,
            stream=self.stream,
            messages=tuple(entries),
        )

    def dispatch(self, text: str) -> asyncio.Task[Any] | None:
        """Record a user turn and schedule its delivery.

        Returns the task consuming the reply, or ``None`` when the turn was
        rejected (blank text, or a previous reply still in progress).
        """
        if not isinstance(text, str) or not text.strip():
            LOGGER.info(
                "chat.turn.rejected",
                extra={"event": "chat.turn.rejected", "reason": "empty"},
            )
            return None
        if self.indicator.active:
            LOGGER.warning(
                "chat.turn.rejected",
                extra={"event": "chat.turn.rejected", "reason": "busy"},
            )
            return None

        self.store.append(Message(author=USER, text=text))
        self.indicator.set()
        request = self.build_request(text)
        if not self.session.is_initialized:
            LOGGER.warning(
                "chat.turn.no_thread",
                extra={"event": "chat.turn.no_thread", "thread_id": request.thread_id},
            )

        consumer: Consumer
        if request.stream:
            consumer = StreamConsumer(self.backend, self.store, self.indicator)
        else:
            consumer = NonStreamConsumer(self.backend, self.store, self.indicator)
        self._consumer = consumer

        LOGGER.info(
            "chat.turn.dispatched",
            extra={
                "event": "chat.turn.dispatched",
                "stream": request.stream,
                "thread_id": request.thread_id,
                "entries": len(request.messages),
            },
        )
        task = asyncio.create_task(consumer.consume(request))

        def _abort_if_cancelled(done: asyncio.Task[Any]) -> None:
            # Cancelled before its first step, the consumer never saw the abort.
            if done.cancelled():
                consumer.abort()

        task.add_done_callback(_abort_if_cancelled)
        self.task_manager.add(task, name=ACTIVE_TURN)
        return task

    async def send_message(self, text: str) -> None:
        """Dispatch a user turn and wait until its reply reaches a terminal state."""
        task = self.dispatch(text)
        if task is not None:
            await asyncio.wait({task})

    async def abort(self) -> bool:
        """Abort the in-flight reply; return False when nothing was running."""
        aborted = await self.task_manager.cancel(ACTIVE_TURN)
        if aborted:
            LOGGER.info("chat.turn.aborted", extra={"event": "chat.turn.aborted"})
        return aborted

    async def close(self) -> None:
        """Tear down the conversation: cancel tasks and release the HTTP client."""
        await self.task_manager.cancel_all()
        self.session.close()
        await self.backend.aclose()
        LOGGER.info("chat.session.closed", extra={"event": "chat.session.closed"})
