"""
GameContextStore: the game currently selected in the UI.

This is one process-wide value with last-write-wins semantics: two requests
carrying different `game` headers race on it, and whichever lands last is
what the next provisioning pass uses. Request handlers that need the game of
*their* request should use the GameContext returned by the gate instead.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GameContext:
    """Game bound to a single request."""
    game: str


class GameContextStore:
    def __init__(self, default_game: Optional[str] = None) -> None:
        self._default_game = default_game
        self._selected: Optional[str] = None

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def select(self, game: str) -> bool:
        """Set the selected game. Returns True if the value changed."""
        if self._selected == game:
            return False
        self._selected = game
        return True

    def resolve(self) -> Optional[str]:
        """Selected game, or the configured default when nothing was selected."""
        return self._selected if self._selected is not None else self._default_game
