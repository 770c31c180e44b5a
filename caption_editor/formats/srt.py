"""SubRip (.srt) codec — the reference timestamp-block format.

WHY: SRT is the lingua franca of subtitle files and the format every
round-trip guarantee is defined against: timing and text must survive
format → parse → format unchanged.

HOW: Blocks are separated by a blank line. The first line of a block is
the sequence number (ignored on import), the second holds
``start --> end`` in ``HH:MM:SS,mmm`` notation, and any remaining lines are
the caption text joined with newlines.

RULES:
- Windows and old Mac line endings are normalised to '\\n' before splitting
- Blocks with fewer than 2 lines, or without a single ' --> ' pair, are skipped
- Only newlines are trimmed from block edges; spaces in caption text survive
- Empty lines inside caption text are dropped on export (the format cannot
  carry them), so "\\nword" comes back as "word"
- A malformed timestamp is a hard ParseFailure (no partial results)
- Sequence numbers are written 1-based in collection order
- Media type: "application/x-subrip"
"""

from __future__ import annotations

from typing import List, Sequence

from caption_editor.core.ir import Caption
from caption_editor.core.timestamps import format_srt_timestamp, parse_timestamp
from caption_editor.formats.base import BaseCodec, provisional_id

ARROW = " --> "


def split_blocks(content: str) -> List[List[str]]:
    """Split subtitle text into blocks of lines on blank-line boundaries."""
    content = content.replace("\r\n", "\n").replace("\r", "\n").strip("\n")
    blocks: List[List[str]] = []
    for block in content.split("\n\n"):
        block = block.strip("\n")
        if not block:
            continue
        blocks.append(block.split("\n"))
    return blocks


def block_text(text: str) -> str:
    """Drop empty lines from caption text so it cannot end its block early.

    A blank line is the block separator, so an empty line inside the text
    would cut the caption short on re-import. Spaces are kept as written.
    """
    return "\n".join(line for line in text.split("\n") if line)


class SRTCodec(BaseCodec):
    """Codec for SubRip subtitle files."""

    extension = ".srt"
    media_type = "application/x-subrip"

    @property
    def name(self) -> str:
        return "SubRip"

    def parse(self, text: str) -> List[Caption]:
        captions: List[Caption] = []
        for lines in split_blocks(text):
            if len(lines) < 2:
                continue
            parts = lines[1].split(ARROW)
            if len(parts) != 2:
                continue

            start_ms = parse_timestamp(parts[0])
            end_ms = parse_timestamp(parts[1])
            captions.append(
                Caption(
                    id=provisional_id(len(captions)),
                    start_ms=start_ms,
                    end_ms=end_ms,
                    text="\n".join(lines[2:]),
                )
            )
        return captions

    def format(self, captions: Sequence[Caption]) -> str:
        chunks: List[str] = []
        for i, caption in enumerate(captions, start=1):
            chunks.append(
                "{}\n{}{}{}\n{}\n\n".format(
                    i,
                    format_srt_timestamp(caption.start_ms),
                    ARROW,
                    format_srt_timestamp(caption.end_ms),
                    block_text(caption.text),
                )
            )
        return "".join(chunks)
