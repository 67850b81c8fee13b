#!/usr/bin/env python3
"""
Game Clipper CLI

Small operator tool around the runtime pieces.

Commands:

1) serve
   - Start the runtime HTTP server (OBS listener, dispatcher, helper bridge):
       uvicorn runtime.api.server:app

2) provision <game>
   - Connect to OBS once and make sure the game's scene and its audio /
     video capture sources exist. Prints whether anything was created.

3) run-helper [path]
   - Start the helper executable and print its output / errors / exit code
     as they arrive. Exits with the helper's exit code.

4) notify ready | change-game
   - Send a signal to the local coordinator server by hand.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configs.logging_config import setup_logging
from configs.settings import settings
from exceptions.exceptions import (
    NotificationError,
    ProvisioningError,
    SpawnError,
    TransportError,
)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


def cmd_serve(host: str, port: int, reload: bool) -> None:
    import uvicorn

    print(f"[Clipper] Starting runtime server on http://{host}:{port}")
    uvicorn.run("runtime.api.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# provision
# ---------------------------------------------------------------------------


async def _provision(game: str) -> int:
    from core.obs.client import ObsWebsocketClient
    from core.provisioning.provisioner import SceneProvisioner
    from core.provisioning.sources import SourceCatalog

    client = ObsWebsocketClient()
    try:
        await asyncio.to_thread(client.connect)
        provisioner = SceneProvisioner(client, catalog=SourceCatalog.from_settings(settings))
        result = await provisioner.provision(game)
    except (TransportError, ProvisioningError) as e:
        print(f"[Clipper] ✗ {e}", file=sys.stderr)
        return 1
    finally:
        client.disconnect()

    if result.created:
        print(f"[Clipper] ✓ Scene {result.scene!r} ready, audio + video captures created")
    else:
        print(f"[Clipper] ✓ Scene {result.scene!r} ready, existing sources kept")
    return 0


def cmd_provision(game: str) -> int:
    print(f"[Clipper] Provisioning OBS for game={game}")
    return asyncio.run(_provision(game))


# ---------------------------------------------------------------------------
# run-helper
# ---------------------------------------------------------------------------


async def _run_helper(executable: str, args: List[str], game: Optional[str]) -> int:
    from runtime.agents.helper_bridge import HelperProcessBridge
    from runtime.agents.message_channel import MessageChannel
    from runtime.store.game_context_store import GameContextStore

    channel = MessageChannel()
    game_context = GameContextStore()
    if game:
        game_context.select(game)
    bridge = HelperProcessBridge(channel, game_context=game_context)

    async with channel.subscription() as queue:
        try:
            await bridge.spawn(executable, args=args)
        except SpawnError as e:
            print(f"[Clipper] ✗ {e}", file=sys.stderr)
            return 1

        while True:
            message = await queue.get()
            if message.event == "output":
                sys.stdout.write(message.text or "")
                sys.stdout.flush()
            elif message.event == "error":
                sys.stderr.write(message.text or "")
                sys.stderr.flush()
            else:
                print(f"\n[Clipper] Helper exited with code {message.code}")
                return message.code if message.code is not None else 1


def cmd_run_helper(executable: str, args: List[str], game: Optional[str]) -> int:
    print(f"[Clipper] Running helper: {executable}")
    return asyncio.run(_run_helper(executable, args, game))


# ---------------------------------------------------------------------------
# notify
# ---------------------------------------------------------------------------


async def _notify(signal_name: str, game: Optional[str]) -> int:
    from core.notify.notifier import CoordinatorNotifier

    notifier = CoordinatorNotifier()
    try:
        if signal_name == "ready":
            await notifier.send_ready()
        else:
            await notifier.send_game_changed(game or settings.default_game)
    except NotificationError as e:
        print(f"[Clipper] ✗ {e}", file=sys.stderr)
        return 1
    print(f"[Clipper] ✓ {signal_name} signal sent to {settings.coordinator_url}")
    return 0


def cmd_notify(signal_name: str, game: Optional[str]) -> int:
    return asyncio.run(_notify(signal_name, game))


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Game Clipper CLI")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: CLIPPER_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start the runtime HTTP server")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    # provision
    p_provision = subparsers.add_parser(
        "provision", help="Create the scene and capture sources for a game"
    )
    p_provision.add_argument(
        "game",
        nargs="?",
        default=settings.default_game,
        help="Game name (default: CLIPPER_DEFAULT_GAME)",
    )

    # run-helper
    p_helper = subparsers.add_parser(
        "run-helper", help="Run the helper executable and stream its output"
    )
    p_helper.add_argument(
        "path",
        nargs="?",
        default=str(settings.helper_executable),
        help="Helper executable (default: CLIPPER_HELPER_EXECUTABLE)",
    )
    p_helper.add_argument("--game", help="Exported to the helper as CURRENT_GAME")
    p_helper.add_argument(
        "helper_args", nargs="*", help="Arguments for the helper (put them after --)"
    )

    # notify
    p_notify = subparsers.add_parser("notify", help="Send a signal to the coordinator")
    p_notify.add_argument("signal", choices=["ready", "change-game"])
    p_notify.add_argument("--game", help="Game name for change-game")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    command: str = args.command

    if command == "serve":
        cmd_serve(host=args.host, port=args.port, reload=args.reload)
        return 0
    elif command == "provision":
        return cmd_provision(game=args.game)
    elif command == "run-helper":
        return cmd_run_helper(executable=args.path, args=args.helper_args, game=args.game)
    elif command == "notify":
        return cmd_notify(signal_name=args.signal, game=args.game)
    else:
        parser.error(f"Unknown command: {command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
