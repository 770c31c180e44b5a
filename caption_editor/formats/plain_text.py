"""Plain text transcript exporter.

WHY: Reviewers and translators often want just the words, without
timestamps, to read or paste into a document.

HOW: One line per caption. Multi-line caption text is joined with single
spaces; a speaker label, when present, prefixes the line as
"Speaker: text".

RULES:
- Export only (can_parse is False)
- Empty captions produce empty lines so line N is still caption N
- Output ends with a single newline (empty string for no captions)
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import Sequence

from caption_editor.core.ir import Caption
from caption_editor.formats.base import BaseCodec


class PlainTextCodec(BaseCodec):
    """Exporter for plain text transcripts."""

    extension = ".txt"
    media_type = "text/plain"
    can_parse = False

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, captions: Sequence[Caption]) -> str:
        lines = []
        for caption in captions:
            text = " ".join(caption.text.split())
            if caption.speaker:
                text = "{}: {}".format(caption.speaker, text)
            lines.append(text)
        if not lines:
            return ""
        return "\n".join(lines) + "\n"
