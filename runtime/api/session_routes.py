"""HTTP routes for interacting with the Game Clipper runtime.

Exposes endpoints like:

- GET  /session            -> dispatcher state + current OBS session
- POST /session/provision  -> re-run provisioning for the request's game
- GET  /game               -> the request's game context (gated)
- POST /game/change        -> select another game and tell the coordinator
- POST /helper/run         -> start the helper executable
- GET  /artifacts          -> finished recordings / saved replays
- WS   /ui/channel         -> helper output / error / close messages
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from typing import Optional

from configs.settings import settings
from core.notify.notifier import CoordinatorNotifier
from core.obs.events import Identified
from exceptions.exceptions import SpawnError

from ..agents.helper_bridge import HelperProcessBridge
from ..agents.message_channel import MessageChannel
from ..agents.session_dispatcher import SessionEventDispatcher
from ..models.api_models import (
    ArtifactListResponse,
    ChangeGameRequest,
    GameResponse,
    HelperRunRequest,
    HelperRunResponse,
    MessageResponse,
    SessionResponse,
)
from ..store.artifact_log import ArtifactLog
from ..store.game_context_store import GameContext, GameContextStore
from .game_gate import require_game


logger = logging.getLogger(__name__)

# Router for all runtime endpoints
router = APIRouter()


# Module-level references, to be initialized by the server.
_DISPATCHER: Optional[SessionEventDispatcher] = None
_GAME_CONTEXT: Optional[GameContextStore] = None
_HELPER_BRIDGE: Optional[HelperProcessBridge] = None
_NOTIFIER: Optional[CoordinatorNotifier] = None
_CHANNEL: Optional[MessageChannel] = None
_ARTIFACT_LOG: Optional[ArtifactLog] = None


def init_routes(
    dispatcher: SessionEventDispatcher,
    game_context: GameContextStore,
    helper_bridge: HelperProcessBridge,
    notifier: CoordinatorNotifier,
    channel: MessageChannel,
    artifact_log: ArtifactLog,
) -> None:
    """Initialize module-level references used by the route handlers."""
    global _DISPATCHER, _GAME_CONTEXT, _HELPER_BRIDGE, _NOTIFIER, _CHANNEL, _ARTIFACT_LOG
    _DISPATCHER = dispatcher
    _GAME_CONTEXT = game_context
    _HELPER_BRIDGE = helper_bridge
    _NOTIFIER = notifier
    _CHANNEL = channel
    _ARTIFACT_LOG = artifact_log


def _require(value, name: str):
    if value is None:
        raise HTTPException(
            status_code=500,
            detail=f"{name} is not configured on the server.",
        )
    return value


# --------------------------------------------------------
# OBS session
# --------------------------------------------------------
@router.get("/session", response_model=SessionResponse)
async def get_session() -> SessionResponse:
    dispatcher: SessionEventDispatcher = _require(_DISPATCHER, "SessionEventDispatcher")
    return SessionResponse(
        state=dispatcher.state,
        provisioning_in_flight=dispatcher.provisioning_in_flight,
        session=dispatcher.session,
    )


@router.post("/session/provision", response_model=MessageResponse, status_code=202)
async def trigger_provisioning(ctx: GameContext = Depends(require_game)) -> MessageResponse:
    """Manually start a provisioning pass for the request's game.

    Goes through the same path as an OBS `Identified` event, so it is
    skipped while another pass is in flight.
    """
    dispatcher: SessionEventDispatcher = _require(_DISPATCHER, "SessionEventDispatcher")
    if dispatcher.provisioning_in_flight:
        return MessageResponse(message="Provisioning already in progress.")

    await dispatcher.dispatch(Identified())
    return MessageResponse(message=f"Provisioning scheduled for {ctx.game}.")


# --------------------------------------------------------
# Game selection
# --------------------------------------------------------
@router.get("/game", response_model=GameResponse)
async def current_game(ctx: GameContext = Depends(require_game)) -> GameResponse:
    game_context: GameContextStore = _require(_GAME_CONTEXT, "GameContextStore")
    return GameResponse(game=ctx.game, selected_game=game_context.selected)


@router.post("/game/change", response_model=GameResponse)
async def change_game(request: ChangeGameRequest) -> GameResponse:
    """Select a game from the UI and fire the change-game signal.

    The coordinator call is best-effort; a failure is only logged.
    """
    game_context: GameContextStore = _require(_GAME_CONTEXT, "GameContextStore")
    notifier: CoordinatorNotifier = _require(_NOTIFIER, "CoordinatorNotifier")

    game_context.select(request.game)
    notifier.notify_game_changed(request.game)
    return GameResponse(game=request.game, selected_game=game_context.selected)


# --------------------------------------------------------
# Helper process
# --------------------------------------------------------
@router.post("/helper/run", response_model=HelperRunResponse)
async def run_helper(request: HelperRunRequest) -> HelperRunResponse:
    """Start the helper; its output is streamed on /ui/channel."""
    bridge: HelperProcessBridge = _require(_HELPER_BRIDGE, "HelperProcessBridge")
    executable = request.executable or str(settings.helper_executable)

    try:
        session = await bridge.spawn(executable, env=request.env, args=request.args)
    except SpawnError as e:
        logger.warning("[HELPER] Spawn failed for executable=%r reason=%r", e.executable, e.details)
        raise

    return HelperRunResponse(
        session_id=session.session_id,
        pid=session.pid,
        executable=session.executable,
    )


@router.websocket("/ui/channel")
async def ui_channel(websocket: WebSocket) -> None:
    channel: Optional[MessageChannel] = _CHANNEL
    if channel is None:
        await websocket.close(code=1011)
        return

    await websocket.accept()
    async with channel.subscription() as queue:
        # Watch the socket while waiting on the queue so a closed client is
        # unsubscribed right away, not on the next publish.
        closed = asyncio.create_task(_wait_until_closed(websocket))
        getter: Optional[asyncio.Task] = None
        try:
            while True:
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait(
                    {getter, closed}, return_when=asyncio.FIRST_COMPLETED
                )
                if closed in done:
                    break
                await websocket.send_json(getter.result().model_dump())
        except WebSocketDisconnect:
            pass
        finally:
            closed.cancel()
            if getter is not None:
                getter.cancel()
    logger.debug("UI channel client disconnected")


async def _wait_until_closed(websocket: WebSocket) -> None:
    # The UI never sends anything meaningful; incoming frames are ignored.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


# --------------------------------------------------------
# Artifacts
# --------------------------------------------------------
@router.get("/artifacts", response_model=ArtifactListResponse)
async def list_artifacts(kind: Optional[str] = None) -> ArtifactListResponse:
    artifact_log: ArtifactLog = _require(_ARTIFACT_LOG, "ArtifactLog")
    return ArtifactListResponse(artifacts=artifact_log.entries(kind))


# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}
