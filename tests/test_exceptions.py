"""Tests for the domain exception hierarchy."""

from __future__ import annotations

import unittest

from kirin_chat.exceptions import (
    ConfigValidationError,
    InitializationError,
    KirinChatError,
    TransportError,
)


class ExceptionHierarchyTests(unittest.TestCase):
    def test_all_errors_share_base(self) -> None:
        for error_type in (ConfigValidationError, InitializationError, TransportError):
            self.assertTrue(issubclass(error_type, KirinChatError))
        self.assertTrue(issubclass(KirinChatError, RuntimeError))

    def test_transport_error_keeps_status_code(self) -> None:
        error = TransportError("Service Unavailable", status_code=503)
        self.assertEqual(str(error), "Service Unavailable")
        self.assertEqual(error.status_code, 503)
        self.assertIsNone(TransportError("reset").status_code)


if __name__ == "__main__":
    unittest.main()
