"""One-shot acquisition of the conversation thread id."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from ..exceptions import InitializationError
from ..state import UNSET_THREAD_ID, ConversationSession

if TYPE_CHECKING:
    from ..chat import BackendClient

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitResult:
    """Outcome of a session initialization attempt."""

    thread_id: int = UNSET_THREAD_ID
    error: InitializationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionInitializer:
    """Bind a :class:`ConversationSession` to a backend thread."""

    def __init__(self, backend: BackendClient, session: ConversationSession) -> None:
        self.backend = backend
        self.session = session

    async def initialize(self) -> InitResult:
        """Create the backend thread unless the session already has one.

        Failures are logged and returned; the session stays unbound and turns
        keep flowing with the sentinel id.
        """
        if self.session.is_initialized:
            return InitResult(thread_id=self.session.thread_id)

        try:
            thread_id = await self.backend.create_thread()
            self.session.bind(thread_id)
        except InitializationError as exc:
            LOGGER.error(
                "chat.session.init_failed",
                extra={"event": "chat.session.init_failed", "error": str(exc)},
            )
            return InitResult(error=exc)
        except ValueError as exc:
            LOGGER.error(
                "chat.session.init_failed",
                extra={"event": "chat.session.init_failed", "error": str(exc)},
            )
            return InitResult(error=InitializationError(str(exc)))

        LOGGER.info(
            "chat.session.created",
            extra={"event": "chat.session.created", "thread_id": thread_id},
        )
        return InitResult(thread_id=thread_id)
