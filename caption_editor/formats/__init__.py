"""Caption codec registry — closed, enum-keyed format hub.

WHY: The store, CLI, and API layers need a single lookup to find the right
codec for a format identifier. Keying the registry by the CaptionFormat
enum makes the set of formats closed: an unknown key is rejected before
any codec runs, and a format without a codec fails the registry test.

HOW: CODECS maps CaptionFormat members to codec *classes* (not instances).
get_codec() resolves a string or enum key and instantiates the codec.

RULES:
- Every CaptionFormat member has exactly one entry in CODECS
- Values are BaseCodec subclasses (not instances)
- Every codec listed here must be importable without side effects
"""

from __future__ import annotations

from typing import Dict, Type, Union

from caption_editor.formats.ass import ASSCodec
from caption_editor.formats.base import BaseCodec, CaptionFormat
from caption_editor.formats.edl import EDLCodec
from caption_editor.formats.fcpxml import FCPXMLCodec
from caption_editor.formats.json_captions import JSONCodec
from caption_editor.formats.plain_text import PlainTextCodec
from caption_editor.formats.srt import SRTCodec
from caption_editor.formats.vtt import VTTCodec

CODECS: Dict[CaptionFormat, Type[BaseCodec]] = {
    CaptionFormat.SRT: SRTCodec,
    CaptionFormat.VTT: VTTCodec,
    CaptionFormat.ASS: ASSCodec,
    CaptionFormat.JSON: JSONCodec,
    CaptionFormat.TXT: PlainTextCodec,
    CaptionFormat.FCPXML: FCPXMLCodec,
    CaptionFormat.EDL: EDLCodec,
}


def get_codec(fmt: Union[str, CaptionFormat]) -> BaseCodec:
    """Return a codec instance for a format key.

    Raises:
        UnsupportedFormat: If the key is not a known CaptionFormat.
    """
    return CODECS[CaptionFormat.parse_key(fmt)]()


__all__ = ["BaseCodec", "CaptionFormat", "CODECS", "get_codec"]
