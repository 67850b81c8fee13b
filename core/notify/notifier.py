"""
core.notify.notifier

Best-effort signals to the local coordinator server.

  GET <coordinator_url>/obs-ready    after a successful provisioning pass
  GET <coordinator_url>/change-game  when the UI picks another game

There is no acknowledgment contract beyond HTTP success. The fire-and-forget
methods (`notify_ready`, `notify_game_changed`) never raise: failures are
logged and local state is left untouched. The awaited variants
(`send_ready`, `send_game_changed`) raise NotificationError for callers that
want to report the outcome (e.g. the CLI).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Set

import httpx

from configs.settings import settings
from exceptions.exceptions import NotificationError


logger = logging.getLogger(__name__)

READY_PATH = "/obs-ready"
CHANGE_GAME_PATH = "/change-game"


class CoordinatorTransport(Protocol):
    async def get(self, path: str) -> None:
        """Issue a GET; raise NotificationError on any failure."""
        ...


class HttpxCoordinatorTransport:
    """CoordinatorTransport over `httpx.AsyncClient`."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.base_url = (base_url or settings.coordinator_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.notify_timeout

    async def get(self, path: str) -> None:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise NotificationError(url, details=str(e)) from e

        if not response.is_success:
            raise NotificationError(url, status_code=response.status_code)


class CoordinatorNotifier:
    """Sends readiness / game-change signals through a CoordinatorTransport."""

    def __init__(self, transport: Optional[CoordinatorTransport] = None) -> None:
        self.transport = transport or HttpxCoordinatorTransport()
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Awaited variants
    # ------------------------------------------------------------------

    async def send_ready(self) -> None:
        await self.transport.get(READY_PATH)
        logger.info("[NOTIFY] Coordinator told OBS is ready")

    async def send_game_changed(self, game: str) -> None:
        await self.transport.get(CHANGE_GAME_PATH)
        logger.info("[NOTIFY] Game changed to %s", game)

    # ------------------------------------------------------------------
    # Fire-and-forget variants
    # ------------------------------------------------------------------

    def notify_ready(self) -> asyncio.Task:
        return self._fire(self.send_ready(), "readiness")

    def notify_game_changed(self, game: str) -> asyncio.Task:
        return self._fire(self.send_game_changed(game), "change-game")

    async def drain(self) -> None:
        """Wait for every in-flight notification (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _fire(self, coro, label: str) -> asyncio.Task:
        task = asyncio.create_task(self._guarded(coro, label))
        # Keep a strong reference until the task finishes.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _guarded(self, coro, label: str) -> None:
        try:
            await coro
        except NotificationError as e:
            logger.warning("[NOTIFY] %s signal failed: %s", label, e)
        except Exception:
            logger.exception("[NOTIFY] Unexpected error sending %s signal", label)
