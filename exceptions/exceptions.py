"""
Custom exceptions for the Game Clipper orchestrator.

These exceptions are intentionally simple and descriptive.
They are used across:

  - core/obs/
  - core/provisioning/
  - core/notify/
  - runtime/agents/ and runtime/api/

Placing them at the project root (exceptions/) avoids circular imports
and keeps exception types consistent across modules.
"""

from typing import Optional


class ClipperError(Exception):
    """Base class for every error raised by the orchestrator."""


class TransportError(ClipperError):
    """
    Raised when a request to (or an event from) OBS cannot be completed.

    `code` carries the obs-websocket request status code when OBS answered
    with a failure status (e.g. 601 = resource already exists), and is None
    for connection-level failures.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)


class ProvisioningError(ClipperError):
    """
    Raised when the scene or capture sources for a game cannot be created.

    The underlying TransportError is available as `__cause__`.
    """

    def __init__(self, game: str, details: str):
        self.game = game
        self.details = details
        super().__init__(f"Provisioning failed for game={game!r}: {details}")


class SpawnError(ClipperError):
    """
    Raised when the helper executable cannot be launched
    (missing file, permission denied, ...). No helper session exists.
    """

    def __init__(self, executable: str, details: str):
        self.executable = executable
        self.details = details
        super().__init__(f"Could not start helper {executable}: {details}")


class MissingContextError(ClipperError):
    """
    Raised by the game gate when a request carries no game header.

    The user-facing message is fixed; the API layer turns it into a 404.
    """

    message = "Invalid game parameter."

    def __init__(self, header: str = "game"):
        self.header = header
        super().__init__(self.message)


class NotificationError(ClipperError):
    """
    Raised when a readiness / game-change GET to the coordinator fails,
    either at the network level (status_code is None) or with a non-2xx answer.
    """

    def __init__(self, url: str, status_code: Optional[int] = None, details: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.details = details or (
            f"HTTP {status_code}" if status_code is not None else "request failed"
        )
        super().__init__(f"Notification to {url} failed: {self.details}")
