"""
core.obs.events

Typed OBS lifecycle events consumed by the session dispatcher.

Each event kind the orchestrator reacts to is a small pydantic model with a
literal `type` tag, so the union below is closed: anything else coming from
the websocket is rejected at the boundary by `parse_event`.

Field names are snake_case; the camelCase names used on the wire
(`outputActive`, `savedReplayPath`, ...) are accepted as aliases.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from exceptions.exceptions import TransportError


class _ObsEvent(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Identified(_ObsEvent):
    """The websocket session is authenticated and ready for requests."""

    type: Literal["Identified"] = "Identified"
    negotiated_rpc_version: Optional[int] = None


class ExitStarted(_ObsEvent):
    """OBS has begun shutting down."""

    type: Literal["ExitStarted"] = "ExitStarted"


class RecordStateChanged(_ObsEvent):
    type: Literal["RecordStateChanged"] = "RecordStateChanged"
    output_active: bool
    output_state: Optional[str] = None
    output_path: Optional[str] = None

    @property
    def is_completed_artifact(self) -> bool:
        """True once a recording has stopped and its file is known."""
        return not self.output_active and self.output_path is not None


class ReplayBufferSaved(_ObsEvent):
    type: Literal["ReplayBufferSaved"] = "ReplayBufferSaved"
    saved_replay_path: Optional[str] = None


class InputCreated(_ObsEvent):
    type: Literal["InputCreated"] = "InputCreated"
    input_name: Optional[str] = None
    input_kind: Optional[str] = None


ObsEvent = Annotated[
    Union[Identified, ExitStarted, RecordStateChanged, ReplayBufferSaved, InputCreated],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(ObsEvent)

EVENT_TYPES = ("Identified", "ExitStarted", "RecordStateChanged", "ReplayBufferSaved", "InputCreated")


def parse_event(event_type: str, payload: Optional[Dict[str, Any]] = None) -> ObsEvent:
    """Validate a raw event name + payload into one of the event models.

    Raises
    ------
    TransportError
        If the event type is not one the orchestrator handles, or the
        payload does not match the expected shape.
    """
    if event_type not in EVENT_TYPES:
        raise TransportError(f"Unsupported OBS event: {event_type}")

    data = dict(payload or {})
    data["type"] = event_type
    try:
        return _EVENT_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise TransportError(f"Malformed {event_type} payload: {e}") from e
