"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import kirin_chat


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(kirin_chat.load_config))
        self.assertTrue(callable(kirin_chat.ensure_config_dir))
        for name in (
            "BackendClient",
            "ChatController",
            "ComposingIndicator",
            "ConversationSession",
            "InitializationError",
            "KirinChatError",
            "Message",
            "MessageStore",
            "StreamState",
            "TransportError",
        ):
            self.assertIsNotNone(getattr(kirin_chat, name))

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(kirin_chat, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
