"""Core editing engine: caption IR, store, history, and pure helpers.

WHY: The core package contains the stable heart of the editor — the
caption dataclasses, the store with its undo/redo history, and the pure
text, analysis, timestamp, and timeline helpers the store and UI use.

HOW: ir.py defines the data structures, store.py owns the collection and
routes every mutation through history.py. text_ops.py and analysis.py
are pure functions over captions; timestamps.py and timeline.py are pure
math used by codecs and the UI respectively.

RULES:
- IR dataclasses are the contract — change with care
- Only store.py mutates a caption collection
- No module here performs file or network I/O
"""

from caption_editor.core.errors import (
    CaptionEditorError,
    InsufficientSelection,
    InvalidSelection,
    InvalidSplitPoint,
    InvalidTimingRange,
    ParseFailure,
    ResampleError,
    UnsupportedFormat,
    ValidationFailure,
)
from caption_editor.core.ir import Caption, CaptionStyle, Position, TextAlign

__all__ = [
    "Caption",
    "CaptionEditorError",
    "CaptionStyle",
    "InsufficientSelection",
    "InvalidSelection",
    "InvalidSplitPoint",
    "InvalidTimingRange",
    "ParseFailure",
    "Position",
    "ResampleError",
    "TextAlign",
    "UnsupportedFormat",
    "ValidationFailure",
]
