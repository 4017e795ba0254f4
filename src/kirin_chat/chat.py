"""Async HTTP client for the thread and chat endpoints of the assistant backend."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
import logging
from typing import Any

import httpx

from .exceptions import InitializationError, KirinChatError, TransportError
from .models import ChatCompletion, OutgoingTurnRequest, StreamEvent, utc_now
from .sse import EventStreamParser

LOGGER = logging.getLogger(__name__)

_JSON_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-cache",
}


def _parse_created_at(value: Any) -> datetime:
    """Parse the server's ISO-8601 creation timestamp, falling back to now."""
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    LOGGER.warning(
        "chat.response.timestamp_invalid",
        extra={"event": "chat.response.timestamp_invalid", "value": repr(value)},
    )
    return utc_now()


class BackendClient:
    """Thin wrapper over :class:`httpx.AsyncClient` speaking the backend protocol."""

    def __init__(
        self,
        host: str,
        *,
        threads_path: str = "/v1/threads",
        chat_path: str = "/api/chat",
        connect_timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = host
        self.threads_path = threads_path
        self.chat_path = chat_path
        if client is not None:
            self._client = client
        else:
            # Streams may idle between fragments indefinitely; only connecting is bounded.
            self._client = httpx.AsyncClient(
                base_url=host,
                timeout=httpx.Timeout(None, connect=connect_timeout),
            )

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    async def create_thread(self) -> int:
        """Allocate a conversation thread and return its id."""
        try:
            response = await self._client.post(
                self.threads_path, json={}, headers=_JSON_HEADERS
            )
        except httpx.HTTPError as exc:
            raise InitializationError(str(self._map_exception(exc))) from exc

        if not response.is_success:
            raise InitializationError(self._status_text(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise InitializationError("Thread response is not valid JSON.") from exc

        thread_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(thread_id, int) or isinstance(thread_id, bool):
            raise InitializationError(
                f"Thread response has no integer id: {body!r}"
            )
        return thread_id

    async def stream_chat(
        self, request: OutgoingTurnRequest
    ) -> AsyncGenerator[StreamEvent, None]:
        """Submit a streamed turn and yield ``open``, ``fragment`` and ``complete`` events.

        Raises:
            TransportError: On a non-success status, connection or read failure.
        """
        headers = {**_JSON_HEADERS, "Accept": "text/event-stream"}
        try:
            async with self._client.stream(
                "POST", self.chat_path, json=request.to_payload(), headers=headers
            ) as response:
                if not response.is_success:
                    raise TransportError(
                        self._status_text(response), status_code=response.status_code
                    )
                yield StreamEvent(kind="open", status_code=response.status_code)

                parser = EventStreamParser()
                async for line in response.aiter_lines():
                    event = parser.feed_line(line)
                    if event is None:
                        continue
                    if event.event != "message":
                        LOGGER.debug(
                            "chat.stream.event_ignored",
                            extra={
                                "event": "chat.stream.event_ignored",
                                "sse_event": event.event,
                            },
                        )
                        continue
                    yield StreamEvent(kind="fragment", data=event.data)

                trailing = parser.flush()
                if trailing is not None and trailing.event == "message":
                    yield StreamEvent(kind="fragment", data=trailing.data)
        except KirinChatError:
            raise
        except httpx.HTTPError as exc:
            raise self._map_exception(exc) from exc

        yield StreamEvent(kind="complete")

    async def complete_chat(self, request: OutgoingTurnRequest) -> ChatCompletion:
        """Submit a single-shot turn and return the parsed reply.

        Raises:
            TransportError: On a non-success status, connection failure or a
                body lacking ``message.content``.
        """
        try:
            response = await self._client.post(
                self.chat_path, json=request.to_payload(), headers=_JSON_HEADERS
            )
        except httpx.HTTPError as exc:
            raise self._map_exception(exc) from exc

        if not response.is_success:
            raise TransportError(
                self._status_text(response), status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError("Response body is not valid JSON.") from exc

        message = body.get("message") if isinstance(body, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise TransportError("Response body has no message content.")

        return ChatCompletion(
            content=content, created_at=_parse_created_at(body.get("created_at"))
        )

    @staticmethod
    def _status_text(response: httpx.Response) -> str:
        return response.reason_phrase or f"HTTP {response.status_code}"

    def _map_exception(self, exc: Exception) -> KirinChatError:
        if isinstance(exc, KirinChatError):
            return exc
        if isinstance(
            exc,
            (
                httpx.ConnectError,
                httpx.ConnectTimeout,
                httpx.NetworkError,
            ),
        ):
            return TransportError(f"Unable to connect to backend at {self.host}.")
        if isinstance(exc, httpx.TimeoutException):
            return TransportError(f"Request to backend at {self.host} timed out.")
        return TransportError(f"Request to backend at {self.host} failed: {exc}")
