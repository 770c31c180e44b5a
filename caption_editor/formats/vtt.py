"""WebVTT (.vtt) codec.

WHY: Browsers and most web players only accept WebVTT. It is close to SRT
but has a file header, optional cue identifiers, cue settings after the
end time, and non-cue blocks (NOTE, STYLE, REGION) that must be skipped.

HOW: Reuses the SRT block splitter. In each block the first line that
contains '-->' is the timing line; lines after it are the cue text. The
cue settings after the end timestamp are discarded on import.

RULES:
- Output always starts with "WEBVTT" followed by a blank line
- Timestamps use a dot before the milliseconds; MM:SS.mmm is accepted on import
- Blocks without a timing line (header, NOTE, STYLE, REGION) are skipped
- Media type: "text/vtt"
"""

from __future__ import annotations

from typing import List, Sequence

from caption_editor.core.ir import Caption
from caption_editor.core.timestamps import format_vtt_timestamp, parse_vtt_timestamp
from caption_editor.formats.base import BaseCodec, provisional_id
from caption_editor.formats.srt import block_text, split_blocks

_NON_CUE_PREFIXES = ("WEBVTT", "NOTE", "STYLE", "REGION")


class VTTCodec(BaseCodec):
    """Codec for WebVTT subtitle files."""

    extension = ".vtt"
    media_type = "text/vtt"

    @property
    def name(self) -> str:
        return "WebVTT"

    def parse(self, text: str) -> List[Caption]:
        captions: List[Caption] = []
        for lines in split_blocks(text.lstrip("\ufeff")):
            if lines[0].startswith(_NON_CUE_PREFIXES):
                continue

            timing_index = next((i for i, line in enumerate(lines) if "-->" in line), None)
            if timing_index is None:
                continue

            start_text, _, rest = lines[timing_index].partition("-->")
            end_fields = rest.split()
            if not end_fields:
                continue

            captions.append(
                Caption(
                    id=provisional_id(len(captions)),
                    start_ms=parse_vtt_timestamp(start_text),
                    end_ms=parse_vtt_timestamp(end_fields[0]),
                    text="\n".join(lines[timing_index + 1:]),
                )
            )
        return captions

    def format(self, captions: Sequence[Caption]) -> str:
        output = ["WEBVTT\n\n"]
        for caption in captions:
            output.append(
                "{} --> {}\n{}\n\n".format(
                    format_vtt_timestamp(caption.start_ms),
                    format_vtt_timestamp(caption.end_ms),
                    block_text(caption.text),
                )
            )
        return "".join(output)
