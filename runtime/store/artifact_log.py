"""
ArtifactLog: append-only record of files OBS reports as finished.

Two kinds are recorded:
- "recording": RecordStateChanged with the output stopped and a path set
- "replay":    ReplayBufferSaved

The orchestrator only records them; converting or deleting the files is
left to downstream consumers reading this log (GET /artifacts).
"""

from collections import deque
from typing import Deque, List, Optional

from ..models.session_models import ArtifactRecord


class ArtifactLog:
    """Bounded in-memory artifact history (oldest entries dropped first)."""

    def __init__(self, max_entries: int = 200) -> None:
        self._entries: Deque[ArtifactRecord] = deque(maxlen=max_entries)

    def record(self, kind: str, path: str, session_id: Optional[str] = None) -> ArtifactRecord:
        entry = ArtifactRecord(kind=kind, path=path, session_id=session_id)
        self._entries.append(entry)
        return entry

    def entries(self, kind: Optional[str] = None) -> List[ArtifactRecord]:
        if kind is None:
            return list(self._entries)
        return [e for e in self._entries if e.kind == kind]

    def __len__(self) -> int:
        return len(self._entries)
