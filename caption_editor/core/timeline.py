"""Coordinate math between timeline pixels and media time.

WHY: The timeline view supports zoom (mouse wheel) and pan (drag). Both
need to keep the time under the cursor stable and must never scroll past
either end of the media. Getting the clamps wrong produces a timeline
that drifts or shows empty space, so the math lives in one tested place.

HOW: A frozen TimelineTransform holds (scale, offset): scale 1.0 shows the
whole media across the visible width; offset is the horizontal pan in
pixels of the zoomed "world". Each gesture is a pure function returning
a new transform.

RULES:
- time = ((mouse_x + offset) / (width * scale)) * duration
- Wheel: delta_y < 0 zooms in, delta_y > 0 zooms out by ZOOM_FACTOR;
  delta_y == 0 keeps the scale and only re-clamps
- scale never drops below MIN_ZOOM_SCALE
- offset is always clamped to [0, width * scale - width]
- width must be positive
"""

from __future__ import annotations

from dataclasses import dataclass

from caption_editor.config import MIN_ZOOM_SCALE, ZOOM_FACTOR


@dataclass(frozen=True)
class TimelineTransform:
    """Zoom level and horizontal pan of the timeline view."""

    scale: float = 1.0
    offset: float = 0.0


def _check_width(width: float) -> None:
    if width <= 0:
        raise ValueError("Timeline width must be positive, got {}".format(width))


def _clamp_offset(offset: float, width: float, scale: float) -> float:
    max_offset = max(0.0, width * scale - width)
    return min(max(offset, 0.0), max_offset)


def time_from_click(
    transform: TimelineTransform,
    duration_ms: float,
    width: float,
    mouse_x: float,
) -> float:
    """Return the media time in ms under a pixel position of the visible timeline."""
    _check_width(width)
    world_fraction = (mouse_x + transform.offset) / (width * transform.scale)
    return world_fraction * duration_ms


def handle_wheel(
    transform: TimelineTransform,
    duration_ms: float,
    width: float,
    mouse_x: float,
    delta_y: float,
) -> TimelineTransform:
    """Zoom one wheel step around the cursor.

    The time fraction under ``mouse_x`` before the zoom stays under
    ``mouse_x`` afterwards, unless the offset clamp has to intervene.
    ``duration_ms`` does not affect the result; it is accepted so all
    gesture functions share one signature.
    """
    _check_width(width)
    fraction = (transform.offset + mouse_x) / (width * transform.scale)

    if delta_y < 0:
        new_scale = transform.scale * ZOOM_FACTOR
    elif delta_y > 0:
        new_scale = transform.scale / ZOOM_FACTOR
    else:
        new_scale = transform.scale
    new_scale = max(new_scale, MIN_ZOOM_SCALE)

    new_offset = fraction * (width * new_scale) - mouse_x
    return TimelineTransform(
        scale=new_scale,
        offset=_clamp_offset(new_offset, width, new_scale),
    )


def handle_pan(
    start_transform: TimelineTransform,
    width: float,
    start_mouse_x: float,
    current_mouse_x: float,
) -> TimelineTransform:
    """Pan relative to where the drag started; dragging right moves the view left."""
    _check_width(width)
    dx = current_mouse_x - start_mouse_x
    return TimelineTransform(
        scale=start_transform.scale,
        offset=_clamp_offset(start_transform.offset - dx, width, start_transform.scale),
    )
