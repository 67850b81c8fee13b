"""
Tests for OBS event validation and the threaded listener bridge.
"""

import asyncio
from types import SimpleNamespace
from typing import List
from unittest.mock import MagicMock

import pytest

from core.obs.events import (
    ExitStarted,
    Identified,
    RecordStateChanged,
    ReplayBufferSaved,
    parse_event,
)
from core.obs.listener import ObsEventListener
from exceptions.exceptions import TransportError


class TestParseEvent:
    def test_camel_case_wire_payload(self) -> None:
        event = parse_event(
            "RecordStateChanged",
            {"outputActive": False, "outputState": "OBS_WEBSOCKET_OUTPUT_STOPPED", "outputPath": "/tmp/a.mkv"},
        )

        assert isinstance(event, RecordStateChanged)
        assert event.output_path == "/tmp/a.mkv"
        assert event.is_completed_artifact is True

    def test_snake_case_payload(self) -> None:
        event = parse_event("ReplayBufferSaved", {"saved_replay_path": "/tmp/r.mkv"})

        assert isinstance(event, ReplayBufferSaved)
        assert event.saved_replay_path == "/tmp/r.mkv"

    def test_payloadless_events(self) -> None:
        assert isinstance(parse_event("ExitStarted"), ExitStarted)
        assert isinstance(parse_event("Identified", {"negotiatedRpcVersion": 1}), Identified)

    def test_active_recording_is_not_an_artifact(self) -> None:
        event = parse_event("RecordStateChanged", {"outputActive": True, "outputPath": "/tmp/a.mkv"})

        assert event.is_completed_artifact is False

    def test_unknown_event_is_rejected(self) -> None:
        with pytest.raises(TransportError):
            parse_event("SceneRemoved", {"sceneName": "x"})

    def test_malformed_payload_is_rejected(self) -> None:
        with pytest.raises(TransportError):
            parse_event("RecordStateChanged", {"outputActive": "definitely"})


class TestObsEventListener:
    @pytest.mark.asyncio
    async def test_events_reach_handler_in_order(self) -> None:
        received: List[str] = []
        done = asyncio.Event()

        async def handler(event) -> None:
            received.append(event.type)
            if event.type == "ExitStarted":
                done.set()

        fake_client = MagicMock()
        listener = ObsEventListener(handler, event_client_factory=lambda: fake_client)
        await listener.start()

        registered = fake_client.callback.register.call_args.args[0]
        assert {fn.__name__ for fn in registered} == {
            "on_exit_started",
            "on_record_state_changed",
            "on_replay_buffer_saved",
            "on_input_created",
        }

        # obsws-python calls back from its own thread with snake_case attrs.
        await asyncio.to_thread(
            listener.on_record_state_changed,
            SimpleNamespace(output_active=True, output_state="STARTED", output_path=None),
        )
        await asyncio.to_thread(listener.on_exit_started, None)
        await asyncio.wait_for(done.wait(), timeout=5)
        await listener.stop()

        assert received == ["Identified", "RecordStateChanged", "ExitStarted"]
        fake_client.disconnect.assert_called_once()

    @pytest.mark.asyncio
    async def test_malformed_event_is_dropped(self) -> None:
        handler_calls: List[str] = []

        async def handler(event) -> None:
            handler_calls.append(event.type)

        listener = ObsEventListener(handler, event_client_factory=MagicMock)
        await listener.start()
        listener.submit("RecordStateChanged", {"outputActive": "nope"})
        await asyncio.sleep(0.05)
        await listener.stop()

        assert handler_calls == ["Identified"]

    @pytest.mark.asyncio
    async def test_connection_failure_raises_transport_error(self) -> None:
        async def handler(event) -> None:
            pass

        def _refuse():
            raise ConnectionRefusedError("OBS not running")

        listener = ObsEventListener(handler, event_client_factory=_refuse)

        with pytest.raises(TransportError):
            await listener.start()
