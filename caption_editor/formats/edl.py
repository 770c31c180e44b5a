"""CMX3600-style Edit Decision List (.edl) exporter.

WHY: Some finishing tools only accept an EDL to place caption markers on
a timeline. Each caption becomes one event with its text as a comment.

HOW: Times are converted to SMPTE timecode (HH:MM:SS:FF) at 30 fps
non-drop. Record in/out equal source in/out; reel is "AX", track "V",
transition "C" (cut).

RULES:
- Export only (can_parse is False)
- Frames are floor(ms * 30 / 1000) within the second
- Negative times are clamped to 00:00:00:00
- Multi-line caption text is joined with spaces in the comment
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List, Sequence

from caption_editor.core.ir import Caption
from caption_editor.formats.base import BaseCodec

EDL_FPS = 30


def format_timecode(ms: int, fps: int = EDL_FPS) -> str:
    ms = max(0, ms)
    total_seconds, rem_ms = divmod(ms, 1000)
    frames = rem_ms * fps // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return "{:02d}:{:02d}:{:02d}:{:02d}".format(hours, minutes, seconds, frames)


class EDLCodec(BaseCodec):
    """Exporter for CMX3600 edit decision lists."""

    extension = ".edl"
    media_type = "text/plain"
    can_parse = False

    @property
    def name(self) -> str:
        return "Edit Decision List"

    def format(self, captions: Sequence[Caption]) -> str:
        lines: List[str] = ["TITLE: Caption EDL", "FCM: NON-DROP FRAME", ""]
        for i, caption in enumerate(captions, start=1):
            tc_in = format_timecode(caption.start_ms)
            tc_out = format_timecode(caption.end_ms)
            lines.append(
                "{:03d}  AX       V     C        {} {} {} {}".format(i, tc_in, tc_out, tc_in, tc_out)
            )
            lines.append("* CAPTION: {}".format(" ".join(caption.text.split())))
            lines.append("")
        return "\n".join(lines) + "\n"
