"""
Pydantic / datamodels used by the Game Clipper runtime.

Split into:
- session_models: Session + SessionState + ArtifactRecord
- channel_models: ChannelMessage relayed to the UI
- api_models: HTTP request/response schemas
"""
