"""Widget exports for the kirin_chat UI."""

from .conversation import ConversationView
from .input_box import InputBox
from .message import MessageBubble
from .typing_indicator import TypingIndicator

__all__ = ["ConversationView", "InputBox", "MessageBubble", "TypingIndicator"]
