"""
Storage abstractions for the Game Clipper runtime.

Includes:
- SessionStore: in-memory OBS session bookkeeping
- GameContextStore: the process-wide selected game
- ArtifactLog: recordings / replays reported by OBS, for downstream consumers
"""
