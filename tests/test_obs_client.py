"""
Tests for ObsWebsocketClient over a mocked obsws-python ReqClient.

The mock stands in for an already-connected ReqClient, so these exercise the
real request mapping and error translation, including the "scene already
exists" status the provisioner relies on.
"""

from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import MagicMock

import pytest
from obsws_python.error import OBSSDKError, OBSSDKRequestError

from core.obs.client import RESOURCE_ALREADY_EXISTS, ObsWebsocketClient
from core.provisioning.provisioner import SceneProvisioner
from core.provisioning.sources import CaptureKind, source_name_for
from exceptions.exceptions import ProvisioningError, TransportError


def _req_client(source_names: Optional[List[str]] = None) -> MagicMock:
    req = MagicMock()
    req.get_scene_item_list.return_value = SimpleNamespace(
        scene_items=[{"sourceName": name, "sceneItemId": i} for i, name in enumerate(source_names or [])]
    )
    return req


def _scene_exists() -> OBSSDKRequestError:
    return OBSSDKRequestError("CreateScene", RESOURCE_ALREADY_EXISTS, "A source already exists by that scene name.")


class TestObsWebsocketClient:
    @pytest.mark.asyncio
    async def test_list_scene_sources_returns_source_names(self) -> None:
        req = _req_client(["KOF XIII Audio Capture", "KOF XIII Video Capture"])
        client = ObsWebsocketClient(req_client=req)

        names = await client.list_scene_sources("KOF XIII")

        assert names == ["KOF XIII Audio Capture", "KOF XIII Video Capture"]
        req.get_scene_item_list.assert_called_once_with("KOF XIII")

    @pytest.mark.asyncio
    async def test_request_error_keeps_status_code(self) -> None:
        req = _req_client()
        req.create_scene.side_effect = _scene_exists()
        client = ObsWebsocketClient(req_client=req)

        with pytest.raises(TransportError) as exc_info:
            await client.create_scene("KOF XIII")

        assert exc_info.value.code == RESOURCE_ALREADY_EXISTS
        assert isinstance(exc_info.value.__cause__, OBSSDKRequestError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [OBSSDKError("socket closed"), ConnectionResetError("reset by peer")],
    )
    async def test_connection_failures_have_no_code(self, error) -> None:
        req = _req_client()
        req.get_scene_item_list.side_effect = error
        client = ObsWebsocketClient(req_client=req)

        with pytest.raises(TransportError) as exc_info:
            await client.list_scene_sources("KOF XIII")

        assert exc_info.value.code is None

    @pytest.mark.asyncio
    async def test_request_before_connect_fails(self) -> None:
        client = ObsWebsocketClient()

        with pytest.raises(TransportError):
            await client.create_scene("KOF XIII")

    @pytest.mark.asyncio
    async def test_create_input_is_enabled_in_scene(self) -> None:
        req = _req_client()
        client = ObsWebsocketClient(req_client=req)

        await client.create_input("KOF XIII", "KOF XIII Audio Capture", "wasapi_output_capture", {})

        req.create_input.assert_called_once_with(
            "KOF XIII", "KOF XIII Audio Capture", "wasapi_output_capture", {}, True
        )


class TestProvisionOverWebsocket:
    @pytest.mark.asyncio
    async def test_existing_scene_with_sources_creates_nothing(self, catalog) -> None:
        req = _req_client([source_name_for("KOF XIII", CaptureKind.AUDIO)])
        req.create_scene.side_effect = _scene_exists()
        provisioner = SceneProvisioner(ObsWebsocketClient(req_client=req), catalog=catalog)

        result = await provisioner.provision("KOF XIII")

        assert result.created is False
        req.create_input.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_empty_scene_gets_audio_then_video(self, catalog) -> None:
        req = _req_client()
        req.create_scene.side_effect = _scene_exists()
        provisioner = SceneProvisioner(ObsWebsocketClient(req_client=req), catalog=catalog)

        result = await provisioner.provision("KOF XIII")

        assert result.created is True
        assert [c.args[2] for c in req.create_input.call_args_list] == [
            "wasapi_output_capture",
            "game_capture",
        ]

    @pytest.mark.asyncio
    async def test_other_request_errors_fail_the_pass(self, catalog) -> None:
        req = _req_client()
        req.create_scene.side_effect = OBSSDKRequestError("CreateScene", 203, "Request timed out")
        provisioner = SceneProvisioner(ObsWebsocketClient(req_client=req), catalog=catalog)

        with pytest.raises(ProvisioningError):
            await provisioner.provision("KOF XIII")

        assert req.get_scene_item_list.call_args_list == []
