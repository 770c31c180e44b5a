"""Typed failures raised by the caption editing engine.

WHY: Callers (CLI, HTTP API, tests) need to distinguish a bad split point
from a malformed subtitle file or an unknown format name without parsing
message strings. Each failure class maps to one row of the error taxonomy.

HOW: A single root, CaptionEditorError, with three branches:
  ValidationFailure — the request is well-formed but not allowed right now
  ParseFailure      — imported text (or a timestamp) could not be decoded
  UnsupportedFormat — the format identifier is unknown or not importable
ResampleError wraps failures from the DSP collaborator.

RULES:
- A raised CaptionEditorError means nothing was mutated and no history
  snapshot was recorded
- Missing caption ids are NOT errors: by-id mutations return False instead
- Every message is human-readable and names the offending value or field
"""

from __future__ import annotations

from typing import Optional


class CaptionEditorError(Exception):
    """Base class for every failure surfaced by the editor."""


class ValidationFailure(CaptionEditorError):
    """The operation was rejected because its inputs violate an invariant."""


class InvalidSplitPoint(ValidationFailure):
    """The split time does not fall strictly inside the caption."""

    def __init__(self, caption_id: str, at_ms: int, start_ms: int, end_ms: int) -> None:
        self.caption_id = caption_id
        self.at_ms = at_ms
        super().__init__(
            "Split time {} must be within caption '{}' duration ({} < t < {})".format(
                at_ms, caption_id, start_ms, end_ms
            )
        )


class InsufficientSelection(ValidationFailure):
    """Merge needs at least two selected captions."""

    def __init__(self, selected: int) -> None:
        self.selected = selected
        super().__init__(
            "Select at least 2 captions to merge ({} selected)".format(selected)
        )


class InvalidSelection(ValidationFailure):
    """A selected position does not exist in the current collection."""


class InvalidTimingRange(ValidationFailure):
    """The end time lies before the start time."""

    def __init__(self, start_ms: int, end_ms: int) -> None:
        self.start_ms = start_ms
        self.end_ms = end_ms
        super().__init__(
            "End time {} must not be before start time {}".format(end_ms, start_ms)
        )


class ParseFailure(CaptionEditorError):
    """Imported content could not be decoded.

    Attributes:
        field: Name of the offending field (e.g. ``"minutes"``) when the
               failure is local to one timestamp component, else None.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class UnsupportedFormat(CaptionEditorError):
    """The format identifier is unknown, or the format cannot be imported."""

    def __init__(self, fmt: str, reason: str = "Unsupported format") -> None:
        self.format = fmt
        super().__init__("{}: '{}'".format(reason, fmt))


class ResampleError(CaptionEditorError):
    """The resampling collaborator rejected the buffer or the rates."""
