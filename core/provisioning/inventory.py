"""Inventory checks deciding whether a scene still needs capture sources."""

from __future__ import annotations

import logging
from typing import Protocol

from core.obs.client import ObsRequestClient


logger = logging.getLogger(__name__)


class InventoryChecker(Protocol):
    async def needs_sources(self, scene_name: str) -> bool: ...


class AnySourceInventory:
    """Reports a scene as provisioned as soon as it holds any source at all.

    A scene holding only an audio capture is therefore never completed with
    a video capture. A per-kind checker can replace this class without any
    change to the provisioner.
    """

    def __init__(self, client: ObsRequestClient) -> None:
        self.client = client

    async def needs_sources(self, scene_name: str) -> bool:
        # Always re-queried; OBS state may have changed under us.
        sources = await self.client.list_scene_sources(scene_name)
        logger.debug("[PROVISION] Scene %r holds %d source(s)", scene_name, len(sources))
        return len(sources) == 0
