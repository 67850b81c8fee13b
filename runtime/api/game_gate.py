"""Game-context gate for HTTP routes that act on a specific game.

Usage:

    @router.get("/game")
    async def current_game(ctx: GameContext = Depends(require_game)): ...

Requests without a `game` header are rejected with 404
`{"message": "Invalid game parameter."}` (see `missing_context_handler`).
Requests with one update the process-wide selected game (last write wins)
and hand the handler a GameContext bound to that request.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from exceptions.exceptions import MissingContextError

from ..store.game_context_store import GameContext, GameContextStore


logger = logging.getLogger(__name__)

GAME_HEADER = "game"

_GAME_CONTEXT: Optional[GameContextStore] = None


def init_gate(game_context: GameContextStore) -> None:
    """Initialize the module-level store used by `require_game`."""
    global _GAME_CONTEXT
    _GAME_CONTEXT = game_context


def require_game(request: Request) -> GameContext:
    if _GAME_CONTEXT is None:
        raise HTTPException(
            status_code=500,
            detail="GameContextStore is not configured on the server.",
        )

    game = request.headers.get(GAME_HEADER)
    if not game:
        logger.info("[GATE] Invalid game header on %s %s", request.method, request.url.path)
        raise MissingContextError(GAME_HEADER)

    if _GAME_CONTEXT.select(game):
        logger.info("[GATE] Selected game is now %r", game)
    return GameContext(game=game)


async def missing_context_handler(request: Request, exc: MissingContextError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": exc.message})
