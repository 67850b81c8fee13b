"""
FastAPI application entry point for the Game Clipper runtime.

Responsibilities:
- create the FastAPI app
- construct shared singletons (stores, OBS client, provisioner, notifier,
  dispatcher, helper bridge, UI channel)
- connect to OBS on startup and forward its events to the dispatcher
- map orchestrator errors to HTTP responses
- include the runtime routes

Start with:

    uvicorn runtime.api.server:app
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from configs.logging_config import setup_logging
from configs.settings import settings
from core.notify.notifier import CoordinatorNotifier
from core.obs.client import ObsWebsocketClient
from core.obs.listener import ObsEventListener
from core.provisioning.provisioner import SceneProvisioner
from core.provisioning.sources import SourceCatalog
from exceptions.exceptions import MissingContextError, SpawnError, TransportError
from runtime.agents.helper_bridge import HelperProcessBridge
from runtime.agents.message_channel import MessageChannel
from runtime.agents.session_dispatcher import SessionEventDispatcher
from runtime.store.artifact_log import ArtifactLog
from runtime.store.game_context_store import GameContextStore
from runtime.store.session_store import SessionStore
from . import game_gate, session_routes


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

session_store = SessionStore()
game_context = GameContextStore(default_game=settings.default_game)
artifact_log = ArtifactLog()
channel = MessageChannel()

# Not connected until startup (or never, with OBS_AUTOCONNECT=false).
obs_client = ObsWebsocketClient()
provisioner = SceneProvisioner(obs_client, catalog=SourceCatalog.from_settings(settings))
notifier = CoordinatorNotifier()

dispatcher = SessionEventDispatcher(
    provisioner=provisioner,
    notifier=notifier,
    session_store=session_store,
    game_context=game_context,
    artifact_log=artifact_log,
)
event_listener = ObsEventListener(dispatcher.dispatch)
helper_bridge = HelperProcessBridge(channel, game_context=game_context)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)

    if settings.obs_autoconnect:
        try:
            await asyncio.to_thread(obs_client.connect)
            await event_listener.start()
        except TransportError as e:
            # The HTTP side stays up; POST /session/provision can retry later.
            logger.error("[OBS] %s", e)
    else:
        logger.info("[OBS] Autoconnect disabled")

    yield

    await event_listener.stop()
    obs_client.disconnect()
    await notifier.drain()


# ---------------------------------------------------------------------------
# FastAPI app + route registration
# ---------------------------------------------------------------------------

app = FastAPI(title="Game Clipper Runtime", lifespan=lifespan)

app.add_exception_handler(MissingContextError, game_gate.missing_context_handler)


@app.exception_handler(SpawnError)
async def spawn_error_handler(request: Request, exc: SpawnError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": str(exc)})


# Initialize the route modules with our shared objects, then include them.
game_gate.init_gate(game_context)
session_routes.init_routes(
    dispatcher=dispatcher,
    game_context=game_context,
    helper_bridge=helper_bridge,
    notifier=notifier,
    channel=channel,
    artifact_log=artifact_log,
)
app.include_router(session_routes.router)
