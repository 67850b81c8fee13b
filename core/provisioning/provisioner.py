"""
core.provisioning.provisioner

Ensures a game's scene and capture sources exist in OBS.

Flow for `provision(game)`:

1) create the scene named after the game ("already exists" is fine)
2) ask the inventory checker whether the scene still needs sources
3) if so, create the audio capture, then the video capture
4) report whether anything was created

Nothing is cached between passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.obs.client import RESOURCE_ALREADY_EXISTS, ObsRequestClient
from exceptions.exceptions import ProvisioningError, TransportError

from .inventory import AnySourceInventory, InventoryChecker
from .sources import CaptureKind, SourceCatalog, scene_name_for, source_name_for


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    game: str
    scene: str
    created: bool


class SceneProvisioner:
    """Creates the per-game scene and its audio/video captures.

    Parameters
    ----------
    client:
        OBS request client.
    catalog:
        Source descriptor catalog; defaults to the host platform's kinds.
    inventory:
        Decides whether sources are needed; defaults to AnySourceInventory.
    """

    def __init__(
        self,
        client: ObsRequestClient,
        catalog: Optional[SourceCatalog] = None,
        inventory: Optional[InventoryChecker] = None,
    ) -> None:
        self.client = client
        self.catalog = catalog or SourceCatalog()
        self.inventory = inventory or AnySourceInventory(client)

    async def provision(self, game: str) -> ProvisionResult:
        scene = scene_name_for(game)
        try:
            await self._ensure_scene(scene)

            if not await self.inventory.needs_sources(scene):
                logger.info("[PROVISION] Scene %r already has sources; nothing to create", scene)
                return ProvisionResult(game=game, scene=scene, created=False)

            logger.info("[PROVISION] Creating input sources for %r", game)
            for kind in (CaptureKind.AUDIO, CaptureKind.VIDEO):
                descriptor = self.catalog.descriptor(kind)
                await self.client.create_input(
                    scene,
                    source_name_for(game, kind),
                    descriptor.input_kind,
                    dict(descriptor.input_settings),
                )
        except TransportError as e:
            raise ProvisioningError(game, str(e)) from e
        except ValueError as e:
            # No input kind known for this platform
            raise ProvisioningError(game, str(e)) from e

        return ProvisionResult(game=game, scene=scene, created=True)

    async def _ensure_scene(self, scene: str) -> None:
        try:
            await self.client.create_scene(scene)
        except TransportError as e:
            if e.code == RESOURCE_ALREADY_EXISTS:
                logger.debug("[PROVISION] Scene %r already exists", scene)
                return
            raise
        logger.info("[PROVISION] Created scene %r", scene)
