"""
HTTP request/response models for the Game Clipper runtime API.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from .session_models import ArtifactRecord, Session, SessionState


class MessageResponse(BaseModel):
    message: str


class GameResponse(BaseModel):
    game: str
    selected_game: Optional[str] = None


class ChangeGameRequest(BaseModel):
    game: str = Field(min_length=1)


class SessionResponse(BaseModel):
    state: SessionState
    provisioning_in_flight: bool
    session: Optional[Session] = None


class HelperRunRequest(BaseModel):
    """
    executable:
        Path to the helper; defaults to CLIPPER_HELPER_EXECUTABLE.
    env:
        Extra environment variables layered over the server's environment.
    args:
        Extra command-line arguments.
    """
    executable: Optional[str] = None
    env: Dict[str, str] = Field(default_factory=dict)
    args: List[str] = Field(default_factory=list)


class HelperRunResponse(BaseModel):
    session_id: str
    pid: Optional[int] = None
    executable: str


class ArtifactListResponse(BaseModel):
    artifacts: List[ArtifactRecord]
