"""
Tests for the argparse CLI (cli.main). External calls are patched.
"""

from unittest.mock import AsyncMock, patch

import pytest

from cli import main as cli
from core.provisioning.provisioner import ProvisionResult
from exceptions.exceptions import NotificationError


class TestParser:
    def test_provision_defaults_to_configured_game(self) -> None:
        args = cli.build_parser().parse_args(["provision"])

        assert args.command == "provision"
        assert args.game == "KOF XIII"

    def test_notify_rejects_unknown_signal(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["notify", "shutdown"])


class TestCommands:
    def test_notify_ready_success(self, capsys) -> None:
        with patch(
            "core.notify.notifier.CoordinatorNotifier.send_ready", new=AsyncMock()
        ) as send_ready:
            code = cli.main(["notify", "ready"])

        assert code == 0
        send_ready.assert_awaited_once()
        assert "ready signal sent" in capsys.readouterr().out

    def test_notify_failure_exits_1(self, capsys) -> None:
        failing = AsyncMock(side_effect=NotificationError("http://localhost:4609/change-game", 500))
        with patch("core.notify.notifier.CoordinatorNotifier.send_game_changed", new=failing):
            code = cli.main(["notify", "change-game", "--game", "Tekken 8"])

        assert code == 1
        failing.assert_awaited_once_with("Tekken 8")
        assert "HTTP 500" in capsys.readouterr().err

    def test_provision_reports_result(self, capsys) -> None:
        result = ProvisionResult(game="KOF XIII", scene="KOF XIII", created=True)
        with patch("core.obs.client.ObsWebsocketClient.connect"), patch(
            "core.obs.client.ObsWebsocketClient.disconnect"
        ), patch(
            "core.provisioning.provisioner.SceneProvisioner.provision",
            new=AsyncMock(return_value=result),
        ):
            code = cli.main(["provision", "KOF XIII"])

        assert code == 0
        assert "audio + video captures created" in capsys.readouterr().out
