"""Lifecycle tracking for the controller's asyncio tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


class TaskManager:
    """Track the in-flight turn and background tasks so they can be torn down."""

    def __init__(self) -> None:
        self._named: dict[str, asyncio.Task[Any]] = {}
        self._background: set[asyncio.Task[Any]] = set()

    def add(self, task: asyncio.Task[Any], name: str | None = None) -> None:
        """Register a task, optionally under a unique name.

        A named task replaces any prior task of that name without cancelling
        it. Unnamed tasks drop out of tracking once they finish.
        """
        if name is not None:
            self._named[name] = task
            return
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        task.add_done_callback(self._log_background_exception)

    def _log_background_exception(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "task.background.exception",
                extra={
                    "event": "task.background.exception",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    def get(self, name: str) -> asyncio.Task[Any] | None:
        """Return the named task or ``None``."""
        return self._named.get(name)

    def is_running(self, name: str) -> bool:
        task = self._named.get(name)
        return task is not None and not task.done()

    async def cancel(self, name: str) -> bool:
        """Cancel a named task, await it, and report whether it was running."""
        task = self._named.pop(name, None)
        if task is None or task.done():
            return False
        task.cancel()
        await self._settle(task)
        return True

    async def cancel_all(self) -> None:
        """Cancel every tracked task and await them all."""
        tasks = list(self._named.values()) + list(self._background)
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            await self._settle(task)
        self._named.clear()
        self._background.clear()

    async def _settle(self, task: asyncio.Task[Any]) -> None:
        """Await a cancelled task; its own failure is logged, not raised."""
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as exc:  # noqa: BLE001 - teardown must reach every task.
            LOGGER.warning(
                "task.cancel.exception",
                extra={
                    "event": "task.cancel.exception",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
