"""Domain exception hierarchy for the Kirin chat front-end."""

from __future__ import annotations


class KirinChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class InitializationError(KirinChatError):
    """Raised when the conversation thread cannot be created."""


class TransportError(KirinChatError):
    """Raised when a turn cannot be delivered or its response cannot be read."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigValidationError(KirinChatError):
    """Raised when configuration cannot be validated safely."""
