"""Pydantic request/response models for the HTTP API.

WHY: The host UI talks to the editor over HTTP, so id lists, style
records, and gesture parameters cross the boundary as JSON. Pydantic
models validate those records at runtime and generate the JSON Schema
that appears in the /docs UI.

HOW: Each endpoint has its own request model where it takes a body, and
responses share a few small models. StyleModel mirrors
core.ir.CaptionStyle field for field and converts with to_style().

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Enum values match the core enums exactly (format keys, positions)
- Colors are validated as #RRGGBB or #RRGGBBAA
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from caption_editor.core.ir import Caption, CaptionStyle, Position, TextAlign

_COLOR_PATTERN = r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$"


# ---------------------------------------------------------------------------
# Shared records
# ---------------------------------------------------------------------------


class StyleModel(BaseModel):
    """Caption presentation record (see core.ir.CaptionStyle)."""

    position: Position = Field(default=Position.BOTTOM, description="Vertical placement.")
    offset_x: int = Field(default=0, description="X offset in pixels for custom position.")
    offset_y: int = Field(default=0, description="Y offset in pixels for custom position.")
    font_size: int = Field(default=16, ge=1, description="Font size in pixels.")
    color: str = Field(default="#FFFFFF", pattern=_COLOR_PATTERN, description="Text color.")
    background: str = Field(default="#000000CC", pattern=_COLOR_PATTERN, description="Box color.")
    font_family: str = Field(default="Arial", description="Font family name.")
    bold: bool = Field(default=False, description="Bold text.")
    italic: bool = Field(default=False, description="Italic text.")
    underline: bool = Field(default=False, description="Underlined text.")
    alignment: TextAlign = Field(default=TextAlign.CENTER, description="Horizontal alignment.")
    outline_color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN, description="Outline color.")
    outline_width: int = Field(default=0, ge=0, description="Outline width in pixels.")
    shadow_color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN, description="Shadow color.")
    shadow_offset_x: int = Field(default=0, description="Shadow X offset in pixels.")
    shadow_offset_y: int = Field(default=0, description="Shadow Y offset in pixels.")
    shadow_blur: float = Field(default=0.0, ge=0, description="Shadow blur radius.")
    border_radius: float = Field(default=0.0, ge=0, description="Background box corner radius.")
    letter_spacing: float = Field(default=0.0, description="Extra spacing between letters.")
    animation_type: Optional[str] = Field(
        default=None,
        pattern=r"^(fade|slide|bounce|typewriter)$",
        description="Entrance animation: fade, slide, bounce, or typewriter.",
    )
    animation_duration: float = Field(default=0.0, ge=0, description="Animation length in seconds.")

    def to_style(self) -> CaptionStyle:
        return CaptionStyle.from_dict(self.model_dump())

    @classmethod
    def from_style(cls, style: CaptionStyle) -> "StyleModel":
        return cls(**style.to_dict())


class CaptionModel(BaseModel):
    """A caption as seen by the host UI."""

    id: str = Field(description="Stable caption id assigned by the store.")
    start_ms: int = Field(description="Start time in milliseconds.")
    end_ms: int = Field(description="End time in milliseconds.")
    text: str = Field(description="Caption text, may contain newlines.")
    speaker: Optional[str] = Field(default=None, description="Optional speaker label.")
    confidence: float = Field(description="Confidence in [0, 1].")
    style: StyleModel = Field(description="Presentation style.")

    @classmethod
    def from_caption(cls, caption: Caption) -> "CaptionModel":
        return cls(
            id=caption.id,
            start_ms=caption.start_ms,
            end_ms=caption.end_ms,
            text=caption.text,
            speaker=caption.speaker,
            confidence=caption.confidence,
            style=StyleModel.from_style(caption.style),
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateCaptionRequest(BaseModel):
    start_ms: int = Field(description="Start time of the new empty caption.")


class TimedCaptionRequest(BaseModel):
    start_ms: int = Field(description="Start time in milliseconds.")
    end_ms: int = Field(description="End time in milliseconds.")
    text: str = Field(default="", description="Caption text.")


class TextUpdateRequest(BaseModel):
    text: str = Field(description="Replacement caption text.")


class TimingUpdateRequest(BaseModel):
    start_ms: int = Field(description="New start time in milliseconds.")
    end_ms: int = Field(description="New end time in milliseconds (>= start_ms).")


class DeleteRequest(BaseModel):
    ids: List[str] = Field(description="Caption ids to delete; unknown ids are ignored.")


class SplitRequest(BaseModel):
    at_ms: int = Field(description="Split time, strictly inside the caption.")


class SelectionRequest(BaseModel):
    positions: List[int] = Field(description="Positions (not ids) of the captions to select.")


class ShiftRequest(BaseModel):
    delta_ms: int = Field(description="Milliseconds added to every start and end.")


class StretchRequest(BaseModel):
    factor: float = Field(description="Multiplier applied to every start and end.")


class FindReplaceRequest(BaseModel):
    find: str = Field(min_length=1, description="Literal text to find.")
    replace: str = Field(default="", description="Literal replacement text.")
    case_sensitive: bool = Field(default=True, description="Match case exactly.")


class ProfanityFilterRequest(BaseModel):
    bleep: bool = Field(
        default=True,
        description="Replace with '[bleep]' when true, with asterisks when false.",
    )


class ImportRequest(BaseModel):
    content: str = Field(description="Full text of the subtitle file.")


class WaveformRequest(BaseModel):
    samples: List[float] = Field(description="Mono PCM samples in [-1, 1].")
    sample_rate: int = Field(gt=0, description="Sample rate of the buffer in Hz.")
    target_rate: Optional[int] = Field(
        default=None,
        gt=0,
        description="Resample to this rate before building the envelope. "
                    "Defaults to CAPTION_EDITOR_WAVEFORM_SAMPLE_RATE.",
    )


class TransformModel(BaseModel):
    scale: float = Field(default=1.0, gt=0, description="Zoom level (1.0 = whole media visible).")
    offset: float = Field(default=0.0, description="Horizontal pan in pixels.")


class ClickRequest(BaseModel):
    transform: TransformModel
    duration_ms: float = Field(description="Media duration in milliseconds.")
    width: float = Field(gt=0, description="Visible timeline width in pixels.")
    mouse_x: float = Field(description="Cursor x position in pixels.")


class WheelRequest(ClickRequest):
    delta_y: float = Field(description="Wheel delta; negative zooms in.")


class PanRequest(BaseModel):
    transform: TransformModel = Field(description="Transform when the drag started.")
    width: float = Field(gt=0, description="Visible timeline width in pixels.")
    start_mouse_x: float = Field(description="Cursor x when the drag started.")
    current_mouse_x: float = Field(description="Current cursor x.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class IdResponse(BaseModel):
    id: str = Field(description="Id of the created or resulting caption.")


class AppliedResponse(BaseModel):
    """Result of a by-id edit; applied is false when the id was not found."""

    applied: bool = Field(description="Whether the edit found its target and was recorded.")


class CountResponse(BaseModel):
    count: int = Field(description="Number of captions affected.")


class HistoryResponse(BaseModel):
    moved: bool = Field(description="Whether the history cursor moved.")
    can_undo: bool
    can_redo: bool


class ImportResponse(BaseModel):
    count: int = Field(description="Number of captions imported.")
    warnings: List[str] = Field(description="Reading-speed warnings after import.")
    conflicts: List[List[int]] = Field(description="Overlapping caption position pairs.")


class WarningsResponse(BaseModel):
    warnings: List[str]


class ConflictsResponse(BaseModel):
    conflicts: List[List[int]]


class WaveformResponse(BaseModel):
    envelope: List[float] = Field(description="Mean absolute amplitude per 100 samples.")


class PeaksResponse(BaseModel):
    peaks: List[int] = Field(description="Envelope indices of local maxima.")


class TimeResponse(BaseModel):
    time_ms: float


class FormatInfo(BaseModel):
    key: str = Field(description="Format identifier used in API paths.")
    name: str = Field(description="Human-readable format name.")
    extension: str = Field(description="File extension including the dot.")
    can_import: bool = Field(description="Whether the format can be imported.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
