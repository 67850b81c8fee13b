"""
Shared fixtures for the test suite.

Centralizes the fakes standing in for OBS and the coordinator server so the
individual test files don't repeat them. Nothing here opens a socket.
"""

import asyncio
import os
from typing import Dict, List, Optional, Set, Tuple

# Must be set before configs.settings is imported anywhere.
os.environ.setdefault("OBS_AUTOCONNECT", "false")
os.environ.setdefault("CLIPPER_SETTLE_DELAY", "0")

import pytest

from core.notify.notifier import CoordinatorNotifier
from core.obs.client import RESOURCE_ALREADY_EXISTS
from core.provisioning.provisioner import SceneProvisioner
from core.provisioning.sources import SourceCatalog
from exceptions.exceptions import NotificationError, TransportError
from runtime.agents.session_dispatcher import SessionEventDispatcher
from runtime.store.artifact_log import ArtifactLog
from runtime.store.game_context_store import GameContextStore
from runtime.store.session_store import SessionStore


# ---------------------------------------------------------------------------
# Fake OBS request client
# ---------------------------------------------------------------------------


class FakeObsClient:
    """In-memory stand-in for ObsWebsocketClient.

    `scenes` maps scene name -> list of source names. Method names listed in
    `failing` raise a connection-level TransportError.
    """

    def __init__(self, scenes: Optional[Dict[str, List[str]]] = None) -> None:
        self.scenes: Dict[str, List[str]] = {k: list(v) for k, v in (scenes or {}).items()}
        self.calls: List[Tuple] = []
        self.failing: Set[str] = set()

    def _check(self, method: str) -> None:
        if method in self.failing:
            raise TransportError(f"{method}: connection reset")

    async def create_scene(self, scene_name: str) -> None:
        self.calls.append(("create_scene", scene_name))
        self._check("create_scene")
        if scene_name in self.scenes:
            raise TransportError("scene exists", code=RESOURCE_ALREADY_EXISTS)
        self.scenes[scene_name] = []

    async def create_input(self, scene_name, input_name, input_kind, input_settings) -> None:
        self.calls.append(("create_input", scene_name, input_name, input_kind))
        self._check("create_input")
        self.scenes.setdefault(scene_name, []).append(input_name)

    async def list_scene_sources(self, scene_name: str) -> List[str]:
        self.calls.append(("list_scene_sources", scene_name))
        self._check("list_scene_sources")
        return list(self.scenes.get(scene_name, []))

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


# ---------------------------------------------------------------------------
# Fake coordinator transport
# ---------------------------------------------------------------------------


class FakeTransport:
    """Records GET paths; raises NotificationError when `fail` is set."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.paths: List[str] = []

    async def get(self, path: str) -> None:
        self.paths.append(path)
        if self.fail:
            raise NotificationError(f"http://coordinator{path}", details="connection refused")


# ---------------------------------------------------------------------------
# Manual clock for the settle delay
# ---------------------------------------------------------------------------


class ManualClock:
    """`sleep` replacement that only returns once `advance()` is called."""

    def __init__(self) -> None:
        self.delays: List[float] = []
        self._released = asyncio.Event()

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        await self._released.wait()

    def advance(self) -> None:
        self._released.set()


class CountingProvisioner(SceneProvisioner):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.passes = 0

    async def provision(self, game):
        self.passes += 1
        return await super().provision(game)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_obs() -> FakeObsClient:
    return FakeObsClient()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def catalog() -> SourceCatalog:
    return SourceCatalog(system="Windows")


@pytest.fixture
def provisioner(fake_obs, catalog) -> CountingProvisioner:
    return CountingProvisioner(fake_obs, catalog=catalog)


@pytest.fixture
def dispatcher_parts(provisioner, fake_transport, clock):
    """Dispatcher plus the collaborators tests want to inspect."""
    session_store = SessionStore()
    game_context = GameContextStore(default_game="KOF XIII")
    artifact_log = ArtifactLog()
    notifier = CoordinatorNotifier(transport=fake_transport)
    terminated: List[bool] = []

    dispatcher = SessionEventDispatcher(
        provisioner=provisioner,
        notifier=notifier,
        session_store=session_store,
        game_context=game_context,
        artifact_log=artifact_log,
        settle_delay=1.0,
        sleep=clock.sleep,
        terminator=lambda: terminated.append(True),
    )
    return {
        "dispatcher": dispatcher,
        "notifier": notifier,
        "session_store": session_store,
        "game_context": game_context,
        "artifact_log": artifact_log,
        "terminated": terminated,
    }
