"""Intermediate representation dataclasses for timed captions.

WHY: The store, every format codec, the analysis helpers, and the HTTP
boundary all pass captions around. A single, well-typed representation
decouples editing from file formats: codecs only translate between text
and this IR, and the store only ever mutates the IR.

HOW: Four types form the model:
  Position     — where the caption sits on screen (custom uses offsets)
  TextAlign    — horizontal alignment of the caption lines
  CaptionStyle — pure presentation metadata, carried through edits unchanged
  Caption      — one timed text unit with id, timing, text, and style

RULES:
- All times are integer milliseconds on the absolute media timeline
- end_ms >= start_ms is expected; zero duration is allowed for new captions
- confidence is 1.0 for user-authored and imported text
- Style has no relationship to timing and is only replaced wholesale
- to_dict()/from_dict() round-trip through JSON-compatible dicts
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional


class Position(str, Enum):
    """Vertical placement of a caption on the video frame."""

    BOTTOM = "bottom"
    TOP = "top"
    MIDDLE = "middle"
    CUSTOM = "custom"


class TextAlign(str, Enum):
    """Horizontal alignment of caption lines."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class CaptionStyle:
    """Visual presentation of a caption.

    WHY: Captions carry their own look (font, colors, outline, animation)
    so exports like ASS can reproduce it, but no editing operation ever
    inspects style — it is opaque metadata to the store.

    RULES:
    - position CUSTOM places the caption at (offset_x, offset_y) pixels;
      other positions ignore the offsets
    - Colors are CSS-style hex strings (#RRGGBB or #RRGGBBAA)
    - animation_type is one of "fade", "slide", "bounce", "typewriter", or None
    - animation_duration is in seconds
    """

    position: Position = Position.BOTTOM
    offset_x: int = 0
    offset_y: int = 0
    font_size: int = 16
    color: str = "#FFFFFF"
    background: str = "#000000CC"
    font_family: str = "Arial"
    bold: bool = False
    italic: bool = False
    underline: bool = False
    alignment: TextAlign = TextAlign.CENTER
    outline_color: Optional[str] = None
    outline_width: int = 0
    shadow_color: Optional[str] = None
    shadow_offset_x: int = 0
    shadow_offset_y: int = 0
    shadow_blur: float = 0.0
    border_radius: float = 0.0
    letter_spacing: float = 0.0
    animation_type: Optional[str] = None
    animation_duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["position"] = self.position.value
        data["alignment"] = self.alignment.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaptionStyle":
        """Build a style from a dict, ignoring unknown keys.

        Missing keys fall back to the default style.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "position" in kwargs:
            kwargs["position"] = Position(kwargs["position"])
        if "alignment" in kwargs:
            kwargs["alignment"] = TextAlign(kwargs["alignment"])
        return cls(**kwargs)


@dataclass
class Caption:
    """A single timed caption.

    RULES:
    - id: assigned by the store, stable across edits, never reused
    - start_ms / end_ms: integer milliseconds
    - text: arbitrary UTF-8, may contain newlines
    - speaker: optional label, no uniqueness constraint
    - confidence: float in [0, 1], only stored and echoed by the engine
    """

    id: str
    start_ms: int
    end_ms: int
    text: str = ""
    speaker: Optional[str] = None
    confidence: float = 1.0
    style: CaptionStyle = field(default_factory=CaptionStyle)

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "text": self.text,
            "speaker": self.speaker,
            "confidence": self.confidence,
            "style": self.style.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Caption":
        style = data.get("style")
        return cls(
            id=str(data.get("id", "")),
            start_ms=int(data["start_ms"]),
            end_ms=int(data["end_ms"]),
            text=data.get("text", ""),
            speaker=data.get("speaker"),
            confidence=float(data.get("confidence", 1.0)),
            style=CaptionStyle.from_dict(style) if style else CaptionStyle(),
        )
