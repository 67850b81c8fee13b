"""
core.obs.listener

Bridges obsws-python's threaded `EventClient` callbacks onto the asyncio
event loop.

obsws-python delivers events on its own worker thread. Every callback here
only validates the payload and hands the typed event to the loop with
`call_soon_threadsafe`; a single pump task then feeds the dispatcher in
arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import obsws_python as obs
from obsws_python.error import OBSSDKError

from configs.settings import settings
from exceptions.exceptions import TransportError

from .events import Identified, ObsEvent, parse_event


logger = logging.getLogger(__name__)

EventHandler = Callable[[ObsEvent], Awaitable[None]]


def _payload(data: Any) -> Dict[str, Any]:
    """obsws-python hands callbacks a dataclass-like object with snake_case attrs."""
    if data is None:
        return {}
    if isinstance(data, dict):
        return dict(data)
    return {k: v for k, v in vars(data).items() if not k.startswith("_")}


class ObsEventListener:
    """Feeds OBS lifecycle events to an async handler, one at a time.

    Parameters
    ----------
    handler:
        Coroutine function called for every validated event, typically
        `SessionEventDispatcher.dispatch`.
    event_client_factory:
        Callable returning a connected `obsws_python.EventClient`. Overridable
        for tests.
    """

    def __init__(
        self,
        handler: EventHandler,
        event_client_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._handler = handler
        self._factory = event_client_factory or self._default_factory
        self._client: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue] = None
        self._pump_task: Optional[asyncio.Task] = None

    @staticmethod
    def _default_factory() -> Any:
        return obs.EventClient(
            host=settings.obs_host,
            port=settings.obs_port,
            password=settings.obs_password or "",
            timeout=settings.obs_timeout,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect, subscribe, and emit `Identified` once the handshake is done."""
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._pump_task = asyncio.create_task(self._pump())

        try:
            # EventClient authenticates inside its constructor.
            self._client = await asyncio.to_thread(self._factory)
        except (OBSSDKError, OSError) as e:
            await self.stop()
            raise TransportError(f"Could not subscribe to OBS events: {e}") from e

        self._client.callback.register(
            [
                self.on_exit_started,
                self.on_record_state_changed,
                self.on_replay_buffer_saved,
                self.on_input_created,
            ]
        )
        logger.info("[OBS] Event client identified")
        self._queue.put_nowait(Identified())

    async def stop(self) -> None:
        if self._client is not None:
            try:
                await asyncio.to_thread(self._client.disconnect)
            except (OBSSDKError, OSError):
                logger.warning("[OBS] Error while closing event client", exc_info=True)
            self._client = None

        if self._pump_task is not None:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

    async def _pump(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                await self._handler(event)
            except Exception:
                logger.exception("[OBS] Handler failed for %s", event.type)

    # ------------------------------------------------------------------
    # obsws-python callbacks (worker thread)
    # ------------------------------------------------------------------

    def submit(self, event_type: str, data: Any = None) -> None:
        """Validate a raw event and queue it on the loop. Thread-safe."""
        try:
            event = parse_event(event_type, _payload(data))
        except TransportError as e:
            logger.warning("[OBS] Dropping event: %s", e)
            return

        if self._loop is None or self._queue is None:
            logger.warning("[OBS] Listener not started; dropping %s", event_type)
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    def on_exit_started(self, data: Any) -> None:
        self.submit("ExitStarted", data)

    def on_record_state_changed(self, data: Any) -> None:
        self.submit("RecordStateChanged", data)

    def on_replay_buffer_saved(self, data: Any) -> None:
        self.submit("ReplayBufferSaved", data)

    def on_input_created(self, data: Any) -> None:
        self.submit("InputCreated", data)
