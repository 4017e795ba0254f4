"""Main Textual application for chatting with the Kirin assistant."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Button, Footer, Header, Input

from .config import load_config
from .controller import ChatController
from .logging_utils import configure_logging
from .message_store import Snapshot
from .models import ASSISTANT
from .widgets.conversation import ConversationView
from .widgets.input_box import InputBox
from .widgets.typing_indicator import TypingIndicator

LOGGER = logging.getLogger(__name__)


class KirinChatApp(App[None]):
    """Terminal presentation layer over a :class:`ChatController`."""

    CSS = """
    #conversation {
        height: 1fr;
        padding: 0 1;
    }
    .message-user {
        border-left: wide $primary;
    }
    .message-server {
        border-left: wide $error;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "abort_response": "Stop response",
        "quit": "Quit",
    }

    def __init__(
        self,
        config_path: Path | None = None,
        controller: ChatController | None = None,
    ) -> None:
        self.config = load_config(config_path)
        configure_logging(self.config["logging"])
        self.window_title = str(self.config["app"]["title"])
        self.controller = controller or ChatController.from_config(self.config)
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        """Compose app widgets."""
        yield Header()
        yield ConversationView(
            id="conversation",
            show_timestamps=bool(self.config["ui"]["show_timestamps"]),
            accent_color=str(self.config["ui"]["theme_color"]),
        )
        yield TypingIndicator(author_name=ASSISTANT.display_name, id="typing_indicator")
        yield InputBox(placeholder=str(self.config["ui"]["placeholder"]), id="input_box")
        yield Footer()

    async def on_mount(self) -> None:
        """Wire the controller to the widgets and start the conversation."""
        self.title = self.window_title
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self.controller.subscribe(self._on_snapshot)
        self.controller.on_composing_change(self._on_composing_change)
        await self.query_one(ConversationView).sync(self.controller.messages)
        self.controller.start_in_background()
        self.query_one("#message_input", Input).focus()

    async def on_unmount(self) -> None:
        await self.controller.close()

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        # Store callbacks are synchronous; mounting is not. Rendering is queued
        # so each snapshot is applied in order.
        self.call_later(self._render_snapshot, snapshot)

    async def _render_snapshot(self, snapshot: Snapshot) -> None:
        for view in self.query(ConversationView):
            await view.sync(snapshot)

    def _on_composing_change(self, active: bool) -> None:
        # Also fires during teardown, when the widget may already be gone.
        for indicator in self.query(TypingIndicator):
            indicator.set_active(active)

    async def action_send_message(self) -> None:
        """Send the prompt in the input field."""
        input_widget = self.query_one("#message_input", Input)
        text = input_widget.value
        if not text.strip():
            self.sub_title = "Cannot send an empty message."
            return
        if self.controller.dispatch(text) is None:
            self.sub_title = "Wait for the current response to finish."
            return
        input_widget.value = ""
        self.sub_title = ""

    async def action_abort_response(self) -> None:
        """Stop the assistant's in-flight response."""
        if await self.controller.abort():
            self.sub_title = "Response stopped."

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            event.stop()
            await self.action_send_message()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            event.stop()
            await self.action_send_message()
