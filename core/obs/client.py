"""
core.obs.client

Thin async wrapper around the obs-websocket request API.

The orchestrator only needs three requests:

  - CreateScene
  - CreateInput
  - GetSceneItemList

`ObsRequestClient` is the protocol the provisioning code depends on, and
`ObsWebsocketClient` implements it on top of obsws-python's blocking
`ReqClient`, running each request in a worker thread so the event loop
never blocks.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import obsws_python as obs
from obsws_python.error import OBSSDKError, OBSSDKRequestError

from configs.settings import settings
from exceptions.exceptions import TransportError


logger = logging.getLogger(__name__)

# obs-websocket v5 RequestStatus codes the orchestrator cares about
RESOURCE_ALREADY_EXISTS = 601
RESOURCE_NOT_FOUND = 600


class ObsRequestClient(Protocol):
    async def create_scene(self, scene_name: str) -> None: ...

    async def create_input(
        self,
        scene_name: str,
        input_name: str,
        input_kind: str,
        input_settings: Dict[str, Any],
    ) -> None: ...

    async def list_scene_sources(self, scene_name: str) -> List[str]: ...


class ObsWebsocketClient:
    """ObsRequestClient backed by `obsws_python.ReqClient`.

    Parameters
    ----------
    host, port, password, timeout:
        Connection parameters; default to the values in `configs.settings`.
    req_client:
        An already-connected client. When given, no new connection is opened
        (used by tests and by callers that share one connection).
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
        req_client: Any = None,
    ) -> None:
        self.host = host or settings.obs_host
        self.port = port or settings.obs_port
        self.password = password if password is not None else settings.obs_password
        self.timeout = timeout or settings.obs_timeout
        self._client = req_client

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the websocket connection (blocking)."""
        if self._client is not None:
            return
        try:
            self._client = obs.ReqClient(
                host=self.host,
                port=self.port,
                password=self.password or "",
                timeout=self.timeout,
            )
        except (OBSSDKError, OSError) as e:
            raise TransportError(
                f"Could not connect to OBS at {self.host}:{self.port}: {e}"
            ) from e
        logger.info("[OBS] Request client connected to %s:%s", self.host, self.port)

    def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            self._client.disconnect()
        except (OBSSDKError, OSError):
            logger.warning("[OBS] Error while closing request client", exc_info=True)
        finally:
            self._client = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def create_scene(self, scene_name: str) -> None:
        await self._call("create_scene", scene_name)

    async def create_input(
        self,
        scene_name: str,
        input_name: str,
        input_kind: str,
        input_settings: Dict[str, Any],
    ) -> None:
        await self._call(
            "create_input",
            scene_name,
            input_name,
            input_kind,
            input_settings,
            True,
        )

    async def list_scene_sources(self, scene_name: str) -> List[str]:
        resp = await self._call("get_scene_item_list", scene_name)
        items = getattr(resp, "scene_items", None) or []
        return [item.get("sourceName", "") for item in items]

    async def _call(self, method_name: str, *args: Any) -> Any:
        if self._client is None:
            raise TransportError("OBS request client is not connected")

        fn = getattr(self._client, method_name)
        try:
            return await asyncio.to_thread(fn, *args)
        except OBSSDKRequestError as e:
            raise TransportError(
                f"OBS rejected {method_name}: {e}", code=getattr(e, "code", None)
            ) from e
        except (OBSSDKError, OSError) as e:
            raise TransportError(f"OBS request {method_name} failed: {e}") from e
