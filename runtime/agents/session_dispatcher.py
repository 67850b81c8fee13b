"""SessionEventDispatcher implementation.

Responsible for:
- tracking the lifecycle of the OBS session
  (DISCONNECTED -> IDENTIFIED -> PROVISIONING -> READY -> RECORDING)
- provisioning the selected game's scene once OBS has identified
- telling the coordinator when OBS is ready
- shutting the host process down when OBS exits

Current behavior:
- `Identified` starts a settle timer; when it fires the provisioner runs.
  Only one timer/provisioning pass can be in flight; extra `Identified`
  events while one is pending are skipped.
- `Identified` while RECORDING is skipped: OBS is still recording, so the
  session must not be walked back through PROVISIONING to READY.
- a failed pass is logged and leaves the session IDENTIFIED. There is no
  automatic retry: a new `Identified` event starts a new pass.
- `ExitStarted` cancels any pending timer, closes the session and calls the
  terminator.
- `RecordStateChanged`, `ReplayBufferSaved` and `InputCreated` are logged;
  finished recordings and saved replays are appended to the artifact log.
"""

import asyncio
import logging
import signal
from typing import Awaitable, Callable, Dict, Optional

from configs.settings import settings
from core.notify.notifier import CoordinatorNotifier
from core.obs.events import (
    ExitStarted,
    Identified,
    InputCreated,
    ObsEvent,
    RecordStateChanged,
    ReplayBufferSaved,
)
from core.provisioning.provisioner import ProvisionResult, SceneProvisioner
from exceptions.exceptions import ProvisioningError, TransportError

from ..models.session_models import Session, SessionState
from ..store.artifact_log import ArtifactLog
from ..store.game_context_store import GameContextStore
from ..store.session_store import SessionStore


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def terminate_host_process() -> None:
    """Ask the hosting process to stop the same way Ctrl+C / a service stop would."""
    signal.raise_signal(signal.SIGTERM)


class SessionEventDispatcher:
    """State machine bound to OBS lifecycle events.

    Parameters
    ----------
    provisioner:
        Creates the per-game scene and capture sources.
    notifier:
        Sends the readiness signal to the coordinator (fire-and-forget).
    session_store:
        Holds the current Session.
    game_context:
        Supplies the game to provision (selected game or default).
    artifact_log:
        Receives finished recordings / saved replays. Optional.
    settle_delay:
        Seconds to wait after `Identified` before provisioning.
    sleep:
        Awaitable used for the settle delay; tests swap in a manual clock.
    terminator:
        Called on `ExitStarted` to stop the host process.
    """

    def __init__(
        self,
        provisioner: SceneProvisioner,
        notifier: CoordinatorNotifier,
        session_store: SessionStore,
        game_context: GameContextStore,
        artifact_log: Optional[ArtifactLog] = None,
        *,
        settle_delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        terminator: Callable[[], None] = terminate_host_process,
    ) -> None:
        self.provisioner = provisioner
        self.notifier = notifier
        self.session_store = session_store
        self.game_context = game_context
        self.artifact_log = artifact_log
        self.settle_delay = settings.settle_delay if settle_delay is None else settle_delay
        self._sleep = sleep
        self._terminator = terminator

        self._state = SessionState.DISCONNECTED
        self._in_flight = False
        self._settle_task: Optional[asyncio.Task] = None
        self.last_result: Optional[ProvisionResult] = None

        self._handlers: Dict[str, Callable[[ObsEvent], Awaitable[None]]] = {
            "Identified": self._on_identified,
            "ExitStarted": self._on_exit_started,
            "RecordStateChanged": self._on_record_state_changed,
            "ReplayBufferSaved": self._on_replay_buffer_saved,
            "InputCreated": self._on_input_created,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def provisioning_in_flight(self) -> bool:
        return self._in_flight

    @property
    def session(self) -> Optional[Session]:
        return self.session_store.current

    async def dispatch(self, event: ObsEvent) -> None:
        """Handle a single event. Never blocks on provisioning."""
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.warning("[DISPATCH] No handler for event %s", event.type)
            return
        await handler(event)

    async def wait_idle(self) -> None:
        """Wait until the pending settle timer / provisioning pass (if any) is done."""
        task = self._settle_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def _on_identified(self, event: Identified) -> None:
        if self._in_flight:
            logger.info("[DISPATCH] Identified received while provisioning is in flight; skipping")
            return
        if self._state == SessionState.RECORDING:
            logger.info("[DISPATCH] Identified received while recording; skipping")
            return

        session = self.session_store.current
        if session is None:
            session = self.session_store.create_session()
            logger.info("[DISPATCH] Connected to OBS WebSocket (session_id=%s)", session.session_id)

        self._set_state(SessionState.IDENTIFIED)
        self._in_flight = True
        self._settle_task = asyncio.create_task(self._settle_then_provision(session))

    async def _on_exit_started(self, event: ExitStarted) -> None:
        logger.info("[DISPATCH] OBS is exiting; shutting down")

        task = self._settle_task
        if task is not None and not task.done():
            task.cancel()
        self._settle_task = None
        self._in_flight = False

        session = self.session_store.current
        if session is not None:
            self.session_store.close_session(session.session_id)
        self._state = SessionState.DISCONNECTED

        try:
            self._terminator()
        except Exception:
            logger.exception("[DISPATCH] Failed to terminate the host process")

    async def _on_record_state_changed(self, event: RecordStateChanged) -> None:
        if event.is_completed_artifact:
            logger.info(
                "[DISPATCH] Recording finished: state=%s path=%s",
                event.output_state,
                event.output_path,
            )
            if self.artifact_log is not None:
                self.artifact_log.record("recording", event.output_path, self._session_id())
            return

        if event.output_active and self._state == SessionState.READY:
            self._set_state(SessionState.RECORDING)
        logger.debug(
            "[DISPATCH] Record state changed: active=%s state=%s",
            event.output_active,
            event.output_state,
        )

    async def _on_replay_buffer_saved(self, event: ReplayBufferSaved) -> None:
        logger.info("[DISPATCH] Replay buffer saved: %s", event.saved_replay_path)
        if self.artifact_log is not None and event.saved_replay_path:
            self.artifact_log.record("replay", event.saved_replay_path, self._session_id())

    async def _on_input_created(self, event: InputCreated) -> None:
        logger.info("[DISPATCH] Input created: %s (%s)", event.input_name, event.input_kind)

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    async def _settle_then_provision(self, session: Session) -> None:
        try:
            await self._sleep(self.settle_delay)
            await self._provision(session)
        except asyncio.CancelledError:
            logger.info("[DISPATCH] Pending provisioning cancelled")
            raise
        finally:
            if self._settle_task is asyncio.current_task():
                self._in_flight = False
                self._settle_task = None

    async def _provision(self, session: Session) -> None:
        game = self.game_context.resolve()
        if not game:
            logger.error("[DISPATCH] No game selected and no default configured; not provisioning")
            return

        session.game = game
        self._set_state(SessionState.PROVISIONING)
        try:
            result = await self.provisioner.provision(game)
        except (ProvisioningError, TransportError) as e:
            logger.error("[DISPATCH] Provisioning failed for %r: %s", game, e)
            self._set_state(SessionState.IDENTIFIED)
            return

        self.last_result = result
        session.provisioned_scene = result.scene
        session.sources_created = result.created
        self._set_state(SessionState.READY)
        logger.info("[DISPATCH] Scene %r ready (sources created=%s)", result.scene, result.created)

        self.notifier.notify_ready()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        session = self.session_store.current
        if session is not None:
            session.state = state
            self.session_store.save_session(session)

    def _session_id(self) -> Optional[str]:
        session = self.session_store.current
        return session.session_id if session is not None else None
