from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Central configuration for the Game Clipper orchestrator.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # OBS websocket connection
        self._obs_host = os.getenv("OBS_HOST", "localhost")
        self._obs_port = int(os.getenv("OBS_PORT", "4455"))
        self._obs_password = os.getenv("OBS_PASSWORD") or None
        self._obs_timeout = float(os.getenv("OBS_TIMEOUT", "5"))
        self._obs_autoconnect = _env_bool("OBS_AUTOCONNECT", True)

        # Local coordinator (the Express server waiting for /obs-ready)
        self._coordinator_url = os.getenv(
            "CLIPPER_COORDINATOR_URL", "http://localhost:4609"
        ).rstrip("/")
        self._notify_timeout = float(os.getenv("CLIPPER_NOTIFY_TIMEOUT", "5"))

        # Provisioning
        self._settle_delay = float(os.getenv("CLIPPER_SETTLE_DELAY", "1.0"))
        self._default_game = os.getenv("CLIPPER_DEFAULT_GAME", "KOF XIII")
        self._audio_input_kind = os.getenv("CLIPPER_AUDIO_INPUT_KIND") or None
        self._video_input_kind = os.getenv("CLIPPER_VIDEO_INPUT_KIND") or None

        # Helper process
        self._helper_executable = Path(
            os.getenv(
                "CLIPPER_HELPER_EXECUTABLE",
                os.path.join("compiled-scripts", "py-script.exe"),
            )
        )

        self._log_level = os.getenv("CLIPPER_LOG_LEVEL", "INFO").upper()

    # ------------------------------------------------------------------
    # OBS settings
    # ------------------------------------------------------------------

    @property
    def obs_host(self) -> str:
        return self._obs_host

    @property
    def obs_port(self) -> int:
        return self._obs_port

    @property
    def obs_password(self) -> Optional[str]:
        return self._obs_password

    @property
    def obs_timeout(self) -> float:
        return self._obs_timeout

    @property
    def obs_autoconnect(self) -> bool:
        return self._obs_autoconnect

    # ------------------------------------------------------------------
    # Coordinator
    # ------------------------------------------------------------------

    @property
    def coordinator_url(self) -> str:
        return self._coordinator_url

    @property
    def notify_timeout(self) -> float:
        return self._notify_timeout

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    @property
    def settle_delay(self) -> float:
        return self._settle_delay

    @property
    def default_game(self) -> str:
        return self._default_game

    @property
    def audio_input_kind(self) -> Optional[str]:
        return self._audio_input_kind

    @property
    def video_input_kind(self) -> Optional[str]:
        return self._video_input_kind

    # ------------------------------------------------------------------
    # Helper process / logging
    # ------------------------------------------------------------------

    @property
    def helper_executable(self) -> Path:
        return self._helper_executable

    @property
    def log_level(self) -> str:
        return self._log_level


settings = Settings()
