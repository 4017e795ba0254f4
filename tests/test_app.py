"""Runtime-style tests for the Textual app class."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
import logging
from pathlib import Path
import tempfile
import unittest

from kirin_chat.config import DEFAULT_CONFIG
from kirin_chat.controller import ACTIVE_TURN, DEFAULT_GREETING, ChatController
from kirin_chat.models import OutgoingTurnRequest, StreamEvent

try:
    from textual.widgets import Input

    from kirin_chat.app import KirinChatApp
    from kirin_chat.widgets.conversation import ConversationView
    from kirin_chat.widgets.typing_indicator import TypingIndicator
except ModuleNotFoundError:
    Input = None  # type: ignore[assignment]
    KirinChatApp = None  # type: ignore[assignment]


class _AppBackend:
    def __init__(self, fragments: tuple[str, ...]) -> None:
        self.fragments = fragments
        self.gate: asyncio.Event | None = None
        self.waiting = asyncio.Event()
        self.closed = False

    async def create_thread(self) -> int:
        return 3

    async def stream_chat(
        self, request: OutgoingTurnRequest
    ) -> AsyncGenerator[StreamEvent, None]:
        yield StreamEvent(kind="open", status_code=200)
        for fragment in self.fragments:
            yield StreamEvent(kind="fragment", data=fragment)
        if self.gate is not None:
            self.waiting.set()
            await self.gate.wait()
        yield StreamEvent(kind="complete")

    async def aclose(self) -> None:
        self.closed = True


@unittest.skipIf(KirinChatApp is None, "textual is not installed")
class AppBindingTests(unittest.TestCase):
    """Validate binding derivation from config."""

    def test_binding_specs_created_from_keybinds(self) -> None:
        bindings = KirinChatApp._binding_specs_from_config(DEFAULT_CONFIG)  # type: ignore[union-attr]
        self.assertEqual(
            [(b.key, b.action) for b in bindings],
            [
                ("ctrl+enter", "send_message"),
                ("escape", "abort_response"),
                ("ctrl+q", "quit"),
            ],
        )

    def test_blank_keybind_is_not_registered(self) -> None:
        config = {
            **DEFAULT_CONFIG,
            "keybinds": {**DEFAULT_CONFIG["keybinds"], "abort_response": " "},
        }
        bindings = KirinChatApp._binding_specs_from_config(config)  # type: ignore[union-attr]
        self.assertNotIn("abort_response", {binding.action for binding in bindings})


@unittest.skipIf(KirinChatApp is None, "textual is not installed")
class AppRuntimeTests(unittest.IsolatedAsyncioTestCase):
    """Drive the real app against an in-memory backend."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)
        self._temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self._temp_dir.name) / "config.toml"

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)
        self._temp_dir.cleanup()

    def _app(self, backend: _AppBackend) -> KirinChatApp:
        controller = ChatController(backend, system_prompt="Be kind.")  # type: ignore[arg-type]
        return KirinChatApp(config_path=self.config_path, controller=controller)  # type: ignore[misc]

    async def _settle(self, pilot, view: ConversationView, expected: int) -> None:
        for _ in range(20):
            if len(view.bubbles) >= expected:
                return
            await pilot.pause()

    async def test_reply_is_rendered_and_session_bound(self) -> None:
        backend = _AppBackend(("Hi", " there"))
        app = self._app(backend)
        async with app.run_test() as pilot:
            input_widget = app.query_one("#message_input", Input)
            input_widget.value = "hello"
            await app.action_send_message()
            self.assertEqual(input_widget.value, "")

            await asyncio.wait({app.controller.task_manager.get(ACTIVE_TURN)})
            view = app.query_one(ConversationView)
            await self._settle(pilot, view, 3)
            await pilot.pause()

            self.assertEqual(
                [bubble.message_content for bubble in view.bubbles],
                [DEFAULT_GREETING, "hello", "Hi there"],
            )
            self.assertFalse(app.query_one(TypingIndicator).active)
            self.assertEqual(app.controller.thread_id, 3)
        self.assertTrue(backend.closed)

    async def test_empty_prompt_is_not_sent(self) -> None:
        app = self._app(_AppBackend(()))
        async with app.run_test():
            await app.action_send_message()
            self.assertEqual(app.sub_title, "Cannot send an empty message.")
            self.assertEqual(len(app.controller.messages), 1)

    async def test_abort_and_busy_feedback(self) -> None:
        backend = _AppBackend(("Hel",))
        backend.gate = asyncio.Event()
        app = self._app(backend)
        async with app.run_test() as pilot:
            input_widget = app.query_one("#message_input", Input)
            input_widget.value = "hi"
            await app.action_send_message()
            await backend.waiting.wait()
            await pilot.pause()
            self.assertTrue(app.query_one(TypingIndicator).active)

            input_widget.value = "again"
            await app.action_send_message()
            self.assertEqual(app.sub_title, "Wait for the current response to finish.")
            self.assertEqual(input_widget.value, "again")

            await app.action_abort_response()
            self.assertEqual(app.sub_title, "Response stopped.")
            self.assertFalse(app.query_one(TypingIndicator).active)
            self.assertEqual(app.controller.messages[-1].text, "Hel")


if __name__ == "__main__":
    unittest.main()
