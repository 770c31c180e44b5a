"""Final Cut Pro XML (.fcpxml) exporter.

WHY: Editors cutting in Final Cut Pro import captions as title clips on a
connected storyline. Only export is supported; FCPXML import would need a
full timeline model that this engine does not have.

HOW: Builds an FCPXML 1.9 document with xml.etree.ElementTree: one format,
one project/sequence, and a <spine> with a <gap> that holds one <title>
per caption. Offsets and durations are rational seconds over 1000
("1500/1000s"), so millisecond timing is exact.

RULES:
- Export only (can_parse is False)
- Sequence duration is the latest caption end (0s when empty)
- Negative start times are clamped to 0 and durations to at least 0
- Media type: "application/xml"
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Sequence

from caption_editor.core.ir import Caption
from caption_editor.formats.base import BaseCodec


def _rational(ms: int) -> str:
    return "{}/1000s".format(max(0, ms))


class FCPXMLCodec(BaseCodec):
    """Exporter for Final Cut Pro XML title clips."""

    extension = ".fcpxml"
    media_type = "application/xml"
    can_parse = False

    @property
    def name(self) -> str:
        return "Final Cut Pro XML"

    def format(self, captions: Sequence[Caption]) -> str:
        total_ms = max((c.end_ms for c in captions), default=0)

        root = ET.Element("fcpxml", version="1.9")
        resources = ET.SubElement(root, "resources")
        ET.SubElement(
            resources, "format", id="r1", name="FFVideoFormat1080p30",
            frameDuration="100/3000s", width="1920", height="1080",
        )
        ET.SubElement(
            resources, "effect", id="r2", name="Basic Title",
            uid=".../Titles.localized/Bumper:Opener.localized/Basic Title.localized/Basic Title.moti",
        )

        library = ET.SubElement(root, "library")
        event = ET.SubElement(library, "event", name="Captions")
        project = ET.SubElement(event, "project", name="Captions")
        sequence = ET.SubElement(project, "sequence", format="r1", duration=_rational(total_ms))
        spine = ET.SubElement(sequence, "spine")
        gap = ET.SubElement(spine, "gap", name="Gap", offset="0s", duration=_rational(total_ms))

        for i, caption in enumerate(captions, start=1):
            title = ET.SubElement(
                gap, "title", ref="r2", lane="1",
                name=caption.text.split("\n", 1)[0][:64] or caption.id,
                offset=_rational(caption.start_ms),
                duration=_rational(caption.end_ms - max(0, caption.start_ms)),
            )
            text = ET.SubElement(title, "text")
            styled = ET.SubElement(text, "text-style", ref="ts{}".format(i))
            styled.text = caption.text
            style_def = ET.SubElement(title, "text-style-def", id="ts{}".format(i))
            ET.SubElement(
                style_def, "text-style",
                font=caption.style.font_family,
                fontSize=str(caption.style.font_size),
                alignment=caption.style.alignment.value,
            )

        ET.indent(root)
        body = ET.tostring(root, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n<!DOCTYPE fcpxml>\n' + body + "\n"
