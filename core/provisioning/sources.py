"""
core.provisioning.sources

Naming rules and per-platform input kinds for the capture sources created
for each game.

    scene  = "<game>"
    audio  = "<game> Audio Capture"
    video  = "<game> Video Capture"

The OBS input kind used for each capture depends on the host platform
(WASAPI / game capture on Windows, ScreenCaptureKit on macOS, PulseAudio /
XSHM on Linux). The defaults can be overridden from configuration without
touching the provisioning logic.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CaptureKind(str, Enum):
    AUDIO = "Audio"
    VIDEO = "Video"


@dataclass(frozen=True)
class SourceDescriptor:
    input_kind: str
    input_settings: Dict[str, Any] = field(default_factory=dict)


# (platform.system(), kind) -> descriptor
DEFAULT_DESCRIPTORS: Dict[Tuple[str, CaptureKind], SourceDescriptor] = {
    ("Windows", CaptureKind.AUDIO): SourceDescriptor("wasapi_output_capture"),
    ("Windows", CaptureKind.VIDEO): SourceDescriptor(
        "game_capture", {"capture_mode": "any_fullscreen", "capture_cursor": False}
    ),
    ("Darwin", CaptureKind.AUDIO): SourceDescriptor("sck_audio_capture"),
    ("Darwin", CaptureKind.VIDEO): SourceDescriptor("screen_capture"),
    ("Linux", CaptureKind.AUDIO): SourceDescriptor("pulse_output_capture"),
    ("Linux", CaptureKind.VIDEO): SourceDescriptor("xshm_input"),
}


def scene_name_for(game: str) -> str:
    return game


def source_name_for(game: str, kind: CaptureKind) -> str:
    return f"{game} {kind.value} Capture"


class SourceCatalog:
    """Resolves the descriptor used to create each capture kind.

    Parameters
    ----------
    system:
        Platform name as returned by `platform.system()`. Defaults to the
        current host.
    overrides:
        Optional kind -> input kind string, e.g. from
        CLIPPER_AUDIO_INPUT_KIND / CLIPPER_VIDEO_INPUT_KIND.
    """

    def __init__(
        self,
        system: Optional[str] = None,
        overrides: Optional[Dict[CaptureKind, str]] = None,
    ) -> None:
        self.system = system or platform.system()
        self._overrides = {k: v for k, v in (overrides or {}).items() if v}

    @classmethod
    def from_settings(cls, settings_obj: Any) -> "SourceCatalog":
        return cls(
            overrides={
                CaptureKind.AUDIO: settings_obj.audio_input_kind,
                CaptureKind.VIDEO: settings_obj.video_input_kind,
            }
        )

    def descriptor(self, kind: CaptureKind) -> SourceDescriptor:
        override = self._overrides.get(kind)
        if override:
            return SourceDescriptor(override)

        descriptor = DEFAULT_DESCRIPTORS.get((self.system, kind))
        if descriptor is None:
            raise ValueError(
                f"No {kind.value.lower()} capture input kind known for platform "
                f"{self.system!r}; set CLIPPER_{kind.name}_INPUT_KIND"
            )
        return descriptor
