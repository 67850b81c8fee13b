"""
Session-related models for the Game Clipper runtime.

These describe:
- SessionState enum (DISCONNECTED, IDENTIFIED, PROVISIONING, READY, RECORDING)
- a minimal Session object (one connected lifecycle with OBS)
- ArtifactRecord entries (finished recordings / saved replays)
"""

from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    IDENTIFIED = "IDENTIFIED"
    PROVISIONING = "PROVISIONING"
    READY = "READY"
    RECORDING = "RECORDING"


class Session(BaseModel):
    session_id: str
    game: Optional[str] = None
    state: SessionState = SessionState.IDENTIFIED
    created_at: str = Field(default_factory=_now)
    closed_at: Optional[str] = None
    provisioned_scene: Optional[str] = None
    sources_created: Optional[bool] = None


class ArtifactRecord(BaseModel):
    kind: str          # "recording" or "replay"
    path: str
    session_id: Optional[str] = None
    recorded_at: str = Field(default_factory=_now)
