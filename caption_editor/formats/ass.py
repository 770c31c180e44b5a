"""Advanced SubStation Alpha (.ass) codec.

WHY: ASS is the format of choice when captions carry styling (fonts,
outlines, placement) into players like mpv or into burn-in tools. It is
also the only text format here that has a slot for the speaker name.

HOW: Export writes a fixed [Script Info] header, one "Default" style built
from the default CaptionStyle, and one Dialogue line per caption. Import
reads the [Events] section's Format line to locate the Start, End, Name,
and Text fields, so files with reordered columns still parse.

RULES:
- Times are H:MM:SS.cc (centiseconds); export truncates milliseconds
- Newlines in caption text become "\\N"; on import "\\N" and "\\n" become
  newlines and "\\h" a space
- Override blocks like "{\\i1}" are stripped on import
- Speaker goes to the Name field; empty Name imports as no speaker
- Non-bottom positions export an {\\anN} override tag (8 top, 5 middle)
  and custom positions a {\\pos(x,y)} tag
- Media type: "text/x-ssa"
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from caption_editor.core.errors import ParseFailure
from caption_editor.core.ir import Caption, CaptionStyle, Position, TextAlign
from caption_editor.core.timestamps import format_ass_timestamp, parse_ass_timestamp
from caption_editor.formats.base import BaseCodec, provisional_id

_OVERRIDE_RE = re.compile(r"\{[^}]*\}")
_DEFAULT_FIELDS = [
    "Layer", "Start", "End", "Style", "Name",
    "MarginL", "MarginR", "MarginV", "Effect", "Text",
]
# Numpad-style alignment for bottom row; top and middle rows add 6 and 3.
_ALIGN_BOTTOM = {TextAlign.LEFT: 1, TextAlign.CENTER: 2, TextAlign.RIGHT: 3}


def _ass_color(css_color: Optional[str]) -> str:
    """Convert #RRGGBB[AA] to ASS &HAABBGGRR (ASS alpha is inverted)."""
    if not css_color:
        return "&H00000000"
    value = css_color.lstrip("#")
    r, g, b = value[0:2], value[2:4], value[4:6]
    alpha = 255 - int(value[6:8], 16) if len(value) >= 8 else 0
    return "&H{:02X}{}{}{}".format(alpha, b, g, r).upper()


def _style_line(style: CaptionStyle) -> str:
    return (
        "Style: Default,{font},{size},{primary},&H000000FF,{outline},{back},"
        "{bold},{italic},{underline},0,100,100,{spacing},0,1,{outline_w},{shadow},"
        "{align},20,20,20,1"
    ).format(
        font=style.font_family,
        size=style.font_size,
        primary=_ass_color(style.color),
        outline=_ass_color(style.outline_color),
        back=_ass_color(style.background),
        bold=-1 if style.bold else 0,
        italic=-1 if style.italic else 0,
        underline=-1 if style.underline else 0,
        spacing=style.letter_spacing,
        outline_w=style.outline_width,
        shadow=max(abs(style.shadow_offset_x), abs(style.shadow_offset_y)),
        align=_ALIGN_BOTTOM[style.alignment],
    )


def _position_tag(style: CaptionStyle) -> str:
    base = _ALIGN_BOTTOM[style.alignment]
    if style.position == Position.TOP:
        return "{\\an%d}" % (base + 6)
    if style.position == Position.MIDDLE:
        return "{\\an%d}" % (base + 3)
    if style.position == Position.CUSTOM:
        return "{\\pos(%d,%d)}" % (style.offset_x, style.offset_y)
    return ""


def _decode_text(raw: str) -> str:
    text = _OVERRIDE_RE.sub("", raw)
    return text.replace("\\N", "\n").replace("\\n", "\n").replace("\\h", " ")


class ASSCodec(BaseCodec):
    """Codec for Advanced SubStation Alpha subtitle files."""

    extension = ".ass"
    media_type = "text/x-ssa"

    @property
    def name(self) -> str:
        return "Advanced SubStation Alpha"

    def parse(self, text: str) -> List[Caption]:
        captions: List[Caption] = []
        section = ""
        fields = list(_DEFAULT_FIELDS)

        for raw_line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
            line = raw_line.strip()
            if line.startswith("[") and line.endswith("]"):
                section = line.lower()
                continue
            if section != "[events]":
                continue

            key, sep, value = line.partition(":")
            if not sep:
                continue
            key = key.strip()
            if key == "Format":
                fields = [f.strip() for f in value.split(",")]
                continue
            if key != "Dialogue":
                continue

            values = value.lstrip().split(",", len(fields) - 1)
            if len(values) != len(fields):
                raise ParseFailure("Malformed Dialogue line: '{}'".format(line))
            record: Dict[str, str] = dict(zip(fields, values))
            if "Start" not in record or "End" not in record:
                raise ParseFailure("Events Format line lacks Start/End fields")

            speaker = record.get("Name", "").strip() or None
            captions.append(
                Caption(
                    id=provisional_id(len(captions)),
                    start_ms=parse_ass_timestamp(record["Start"]),
                    end_ms=parse_ass_timestamp(record["End"]),
                    text=_decode_text(record.get("Text", "")),
                    speaker=speaker,
                )
            )
        return captions

    def format(self, captions: Sequence[Caption]) -> str:
        lines = [
            "[Script Info]",
            "ScriptType: v4.00+",
            "PlayResX: 1920",
            "PlayResY: 1080",
            "WrapStyle: 0",
            "ScaledBorderAndShadow: yes",
            "",
            "[V4+ Styles]",
            "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, "
            "BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, "
            "BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding",
            _style_line(CaptionStyle()),
            "",
            "[Events]",
            "Format: " + ", ".join(_DEFAULT_FIELDS),
        ]
        for caption in captions:
            text = _position_tag(caption.style) + caption.text.replace("\n", "\\N")
            lines.append(
                "Dialogue: 0,{},{},Default,{},0,0,0,,{}".format(
                    format_ass_timestamp(caption.start_ms),
                    format_ass_timestamp(caption.end_ms),
                    caption.speaker or "",
                    text,
                )
            )
        return "\n".join(lines) + "\n"
