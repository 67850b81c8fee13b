"""
Runtime package for the Game Clipper orchestrator.

This package contains:
- API layer (FastAPI server + routes + game gate)
- Agents (OBS session dispatcher, helper process bridge, UI message channel)
- Stores (sessions, selected game, recorded artifacts)
- Models (Pydantic / dataclasses for sessions, channel messages and HTTP schemas)
"""
