"""Top-level package for kirin-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import KirinChatApp
    from .chat import BackendClient
    from .config import ensure_config_dir, load_config
    from .controller import ChatController
    from .exceptions import (
        ConfigValidationError,
        InitializationError,
        KirinChatError,
        TransportError,
    )
    from .message_store import MessageStore
    from .models import Message, Participant
    from .state import ComposingIndicator, ConversationSession, StreamState

__all__ = [
    "BackendClient",
    "ChatController",
    "ComposingIndicator",
    "ConfigValidationError",
    "ConversationSession",
    "InitializationError",
    "KirinChatApp",
    "KirinChatError",
    "Message",
    "MessageStore",
    "Participant",
    "StreamState",
    "TransportError",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "BackendClient": ".chat",
    "ChatController": ".controller",
    "ComposingIndicator": ".state",
    "ConfigValidationError": ".exceptions",
    "ConversationSession": ".state",
    "InitializationError": ".exceptions",
    "KirinChatApp": ".app",
    "KirinChatError": ".exceptions",
    "Message": ".models",
    "MessageStore": ".message_store",
    "Participant": ".models",
    "StreamState": ".state",
    "TransportError": ".exceptions",
    "ensure_config_dir": ".config",
    "load_config": ".config",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the UI dependency is only loaded when used."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
