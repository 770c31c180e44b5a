"""Timestamp codec: millisecond integers to and from subtitle notations.

WHY: Every text subtitle format encodes cue times differently — SubRip
uses a comma before the milliseconds, WebVTT a dot (and allows dropping
the hours), ASS uses single-digit hours and centiseconds. Keeping the
conversions in one stateless module lets each codec pick the notation it
needs and keeps the arithmetic testable in isolation.

HOW: parse_timestamp() handles the HH:MM:SS[,.]fff family and reports the
exact field that failed. Formatters render from total milliseconds with
integer division/modulo by 3600000/60000/1000.

RULES:
- Exactly three ':'-separated fields for SRT-style timestamps
- The fractional part is right-padded with zeros to 3 digits, then truncated to 3
- Non-digit fields raise ParseFailure naming the field
- Negative values format as '-' followed by the absolute time
"""

from __future__ import annotations

import re
from typing import Tuple

from caption_editor.core.errors import ParseFailure

_DIGITS_RE = re.compile(r"[0-9]+")


def _parse_field(value: str, name: str, original: str) -> int:
    if not _DIGITS_RE.fullmatch(value):
        raise ParseFailure(
            "Invalid {} in timestamp '{}'".format(name, original), field=name
        )
    return int(value)


def _split_sign(text: str) -> Tuple[int, str]:
    if text.startswith("-"):
        return -1, text[1:]
    return 1, text


def parse_timestamp(timestamp: str) -> int:
    """Parse an ``HH:MM:SS,mmm`` (or ``HH:MM:SS.mmm``) timestamp to milliseconds.

    Args:
        timestamp: Timestamp text, surrounding whitespace allowed.

    Returns:
        Total milliseconds.

    Raises:
        ParseFailure: If the field count is wrong or any field is not numeric.
    """
    sign, body = _split_sign(timestamp.strip())
    parts = body.replace(",", ".").split(":")
    if len(parts) != 3:
        raise ParseFailure("Invalid timestamp format: '{}'".format(timestamp))

    hours = _parse_field(parts[0], "hours", timestamp)
    minutes = _parse_field(parts[1], "minutes", timestamp)

    seconds_parts = parts[2].split(".", 1)
    seconds = _parse_field(seconds_parts[0], "seconds", timestamp)
    milliseconds = 0
    if len(seconds_parts) > 1:
        padded = seconds_parts[1].ljust(3, "0")[:3]
        milliseconds = _parse_field(padded, "milliseconds", timestamp)

    return sign * (hours * 3_600_000 + minutes * 60_000 + seconds * 1000 + milliseconds)


def format_timestamp(ms: int, separator: str = ",") -> str:
    """Render milliseconds as zero-padded ``HH:MM:SS<sep>mmm``."""
    sign = "-" if ms < 0 else ""
    ms = abs(ms)
    hours = ms // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    seconds = (ms % 60_000) // 1000
    millis = ms % 1000
    return "{}{:02d}:{:02d}:{:02d}{}{:03d}".format(
        sign, hours, minutes, seconds, separator, millis
    )


def format_srt_timestamp(ms: int) -> str:
    """SubRip notation, e.g. ``01:02:03,450``."""
    return format_timestamp(ms, ",")


def format_vtt_timestamp(ms: int) -> str:
    """WebVTT notation, e.g. ``01:02:03.450``."""
    return format_timestamp(ms, ".")


def parse_vtt_timestamp(timestamp: str) -> int:
    """Parse a WebVTT timestamp, accepting the short ``MM:SS.mmm`` form.

    WebVTT allows the hours field to be omitted when zero.
    """
    text = timestamp.strip()
    sign, body = _split_sign(text)
    if body.count(":") == 1:
        text = "{}00:{}".format("-" if sign < 0 else "", body)
    return parse_timestamp(text)


def format_ass_timestamp(ms: int) -> str:
    """ASS notation ``H:MM:SS.cc`` — milliseconds are truncated to centiseconds."""
    sign = "-" if ms < 0 else ""
    cs = abs(ms) // 10
    hours = cs // 360_000
    minutes = (cs % 360_000) // 6_000
    seconds = (cs % 6_000) // 100
    return "{}{:d}:{:02d}:{:02d}.{:02d}".format(sign, hours, minutes, seconds, cs % 100)


def parse_ass_timestamp(timestamp: str) -> int:
    """Parse an ASS ``H:MM:SS.cc`` timestamp to milliseconds.

    The fractional part is read with the same pad/truncate rule as SRT,
    so ``.45`` becomes 450 ms.
    """
    return parse_timestamp(timestamp)
