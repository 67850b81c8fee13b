"""HelperProcessBridge implementation.

Runs the helper executable (the compiled capture script) and relays what it
prints to the UI through the MessageChannel:

- every stdout chunk  -> ChannelMessage.output(text)
- every stderr chunk  -> ChannelMessage.error(text)
- process exit        -> ChannelMessage.close(code), exactly once, after
                         both streams reached EOF

Chunks are forwarded as they are read, in order within a stream. stdout and
stderr are read concurrently, so there is no ordering between them.
stderr is forwarded verbatim whatever it contains.
"""

import asyncio
import codecs
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence
from uuid import uuid4

from exceptions.exceptions import SpawnError

from ..models.channel_models import ChannelMessage
from ..store.game_context_store import GameContextStore
from .message_channel import MessageChannel


logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


@dataclass
class HelperProcessSession:
    session_id: str
    executable: str
    process: asyncio.subprocess.Process
    exit_code: Optional[int] = None
    stdout_open: bool = True
    stderr_open: bool = True
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid

    @property
    def finished(self) -> bool:
        return self.exit_code is not None and not self.stdout_open and not self.stderr_open

    async def wait(self) -> Optional[int]:
        """Wait until the close event has been published; return the exit code."""
        if self.task is not None:
            await self.task
        return self.exit_code


class HelperProcessBridge:
    """Spawns helper processes and streams their output to a MessageChannel.

    Parameters
    ----------
    channel:
        Where output / error / close messages are published.
    game_context:
        Optional; when a game is selected it is exported to the helper as
        CURRENT_GAME.
    encoding:
        Used to decode stdout / stderr (undecodable bytes are replaced).
    """

    def __init__(
        self,
        channel: MessageChannel,
        game_context: Optional[GameContextStore] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.channel = channel
        self.game_context = game_context
        self.encoding = encoding
        self._sessions: Dict[str, HelperProcessSession] = {}

    def get_session(self, session_id: str) -> Optional[HelperProcessSession]:
        return self._sessions.get(session_id)

    def build_env(self, overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ)
        if self.game_context is not None and self.game_context.selected:
            env["CURRENT_GAME"] = self.game_context.selected
        env.update(overrides or {})
        return env

    async def spawn(
        self,
        executable_path: str,
        env: Optional[Dict[str, str]] = None,
        args: Sequence[str] = (),
    ) -> HelperProcessSession:
        """Start the helper and begin relaying its output.

        Raises
        ------
        SpawnError
            If the executable cannot be started. No session is created and
            nothing is published on the channel.
        """
        executable = str(executable_path)
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(env),
            )
        except OSError as e:
            logger.error("[HELPER] Could not start %s: %s", executable, e)
            raise SpawnError(executable, str(e)) from e

        session = HelperProcessSession(
            session_id=str(uuid4()),
            executable=executable,
            process=process,
        )
        self._sessions[session.session_id] = session
        session.task = asyncio.create_task(self._relay(session))
        logger.info("[HELPER] Started %s (pid=%s, session_id=%s)", executable, process.pid, session.session_id)
        return session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _relay(self, session: HelperProcessSession) -> None:
        process = session.process
        try:
            await asyncio.gather(
                self._forward(session, process.stdout, "output"),
                self._forward(session, process.stderr, "error"),
            )
            code = await process.wait()
        finally:
            self._sessions.pop(session.session_id, None)

        session.exit_code = code
        logger.info("[HELPER] Child process exited with code %s", code)
        self.channel.publish(ChannelMessage.close(session.session_id, code))

    async def _forward(
        self,
        session: HelperProcessSession,
        stream: Optional[asyncio.StreamReader],
        event: str,
    ) -> None:
        if stream is None:
            self._mark_closed(session, event)
            return

        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            final = not chunk
            text = decoder.decode(chunk, final=final)
            if text:
                self._publish(session, event, text)
            if final:
                break

        self._mark_closed(session, event)

    def _publish(self, session: HelperProcessSession, event: str, text: str) -> None:
        if event == "output":
            logger.debug("[HELPER] stdout: %s", text.rstrip())
            self.channel.publish(ChannelMessage.output(session.session_id, text))
        else:
            logger.debug("[HELPER] stderr: %s", text.rstrip())
            self.channel.publish(ChannelMessage.error(session.session_id, text))

    @staticmethod
    def _mark_closed(session: HelperProcessSession, event: str) -> None:
        if event == "output":
            session.stdout_open = False
        else:
            session.stderr_open = False
