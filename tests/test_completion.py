"""Tests for single-shot replies and reasoning stripping."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import unittest

from kirin_chat.exceptions import TransportError
from kirin_chat.managers.completion import NonStreamConsumer, strip_thinking
from kirin_chat.message_store import MessageStore
from kirin_chat.models import (
    ASSISTANT,
    SERVER,
    ChatCompletion,
    ContentEntry,
    Message,
    OutgoingTurnRequest,
)
from kirin_chat.state import ComposingIndicator

REQUEST = OutgoingTurnRequest(
    model="m",
    thread_id=1,
    stream=False,
    messages=(ContentEntry(role="user", content="hi"),),
)


class CompletionBackend:
    """Return a canned completion or raise a canned error."""

    def __init__(
        self,
        completion: ChatCompletion | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.completion = completion
        self.error = error
        self.gate = gate

    async def complete_chat(self, request: OutgoingTurnRequest) -> ChatCompletion:
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        assert self.completion is not None
        return self.completion


class StripThinkingTests(unittest.TestCase):
    """Validate removal of the reasoning segment."""

    def test_text_after_marker_is_kept(self) -> None:
        self.assertEqual(strip_thinking("<think>hmm</think>Answer"), "Answer")

    def test_only_first_marker_counts(self) -> None:
        self.assertEqual(strip_thinking("a</think>b</think>c"), "b</think>c")

    def test_content_without_marker_passes_through(self) -> None:
        self.assertEqual(strip_thinking("Plain answer"), "Plain answer")


class NonStreamConsumerTests(unittest.IsolatedAsyncioTestCase):
    """Validate transcript updates in single-shot mode."""

    def setUp(self) -> None:
        self.store = MessageStore([Message(author=ASSISTANT, text="Hello!")])
        self.indicator = ComposingIndicator()
        self.indicator.set()

    async def test_reply_is_appended_with_server_timestamp(self) -> None:
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        backend = CompletionBackend(
            ChatCompletion(content="<think>plan</think>Final answer", created_at=created)
        )
        consumer = NonStreamConsumer(backend, self.store, self.indicator)  # type: ignore[arg-type]

        self.assertTrue(await consumer.consume(REQUEST))

        last = self.store.snapshot()[-1]
        self.assertEqual(last.author, ASSISTANT)
        self.assertEqual(last.text, "Final answer")
        self.assertEqual(last.created_at, created)
        self.assertFalse(self.indicator.active)

    async def test_failure_appends_error_description(self) -> None:
        backend = CompletionBackend(error=TransportError("Internal Server Error", 500))
        consumer = NonStreamConsumer(backend, self.store, self.indicator)  # type: ignore[arg-type]

        with self.assertLogs("kirin_chat.managers.completion", level="WARNING"):
            self.assertFalse(await consumer.consume(REQUEST))

        last = self.store.snapshot()[-1]
        self.assertEqual((last.author, last.text), (SERVER, "Internal Server Error"))
        self.assertFalse(self.indicator.active)

    async def test_cancellation_leaves_transcript_untouched(self) -> None:
        backend = CompletionBackend(gate=asyncio.Event())
        consumer = NonStreamConsumer(backend, self.store, self.indicator)  # type: ignore[arg-type]
        task = asyncio.create_task(consumer.consume(REQUEST))
        await asyncio.sleep(0)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(self.store.message_count, 1)
        self.assertFalse(self.indicator.active)


if __name__ == "__main__":
    unittest.main()
