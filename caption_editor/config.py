"""Configuration constants, format mappings, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Engine thresholds, supported file extensions, and
server defaults are plain data structures, not buried in logic, so the
store, codecs, CLI, and API all agree on the same numbers.

HOW: python-dotenv loads the .env file on import. Deployment knobs (log
level, host, port, default export format, waveform sample rate) are read
from the environment with defaults. Engine constants are module-level
values that golden tests depend on, so they are never read from the
environment.

RULES:
- HISTORY_CAPACITY is fixed at 100 snapshots
- Reading speed: > 20 cps is too fast, < 5 cps is too slow (only above 10 chars)
- Waveform envelopes use 100 samples per point
- Wheel zoom multiplies/divides the scale by 1.2 and never goes below 1.0
- EXTENSION_FORMATS maps lowercase file suffixes (with dot) to format keys
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

# Load .env from the project root (where the app is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Caption store
# ---------------------------------------------------------------------------

HISTORY_CAPACITY = 100
"""Maximum number of collection snapshots kept for undo/redo."""

CAPTION_ID_PREFIX = "caption_"
SPLIT_ID_SUFFIX = "_split"

# ---------------------------------------------------------------------------
# Reading speed analysis
# ---------------------------------------------------------------------------

MAX_READING_CPS = 20.0
MIN_READING_CPS = 5.0
SLOW_WARNING_MIN_CHARS = 10
"""Captions at or below this many characters never get a "too slow" warning."""

# ---------------------------------------------------------------------------
# Text transforms
# ---------------------------------------------------------------------------

PROFANITY_WORDS: Tuple[str, ...] = ("fuck", "shit", "damn", "hell", "ass")
BLEEP_TOKEN = "[bleep]"

# ---------------------------------------------------------------------------
# Waveform and timeline
# ---------------------------------------------------------------------------

WAVEFORM_DOWNSAMPLE_RATIO = 100
PEAK_SEARCH_RANGE = 50
"""Envelope points searched on each side when snapping to a peak or silence."""

ZOOM_FACTOR = 1.2
MIN_ZOOM_SCALE = 1.0

# ---------------------------------------------------------------------------
# File formats
# ---------------------------------------------------------------------------

EXTENSION_FORMATS: Dict[str, str] = {
    ".srt": "srt",
    ".vtt": "vtt",
    ".ass": "ass",
    ".ssa": "ass",
    ".json": "json",
    ".txt": "txt",
    ".fcpxml": "fcpxml",
    ".edl": "edl",
}


def format_for_path(path: str) -> Optional[str]:
    """Return the format key for a file path based on its extension, or None.

    RULES:
    - Extension matching is case-insensitive
    - Unknown extensions return None (callers decide the fallback)
    """
    _, ext = os.path.splitext(path)
    return EXTENSION_FORMATS.get(ext.lower())


# ---------------------------------------------------------------------------
# Runtime defaults (overridable via environment)
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("CAPTION_EDITOR_LOG_LEVEL", "INFO").upper()
API_HOST = os.getenv("CAPTION_EDITOR_HOST", "127.0.0.1")
API_PORT = int(os.getenv("CAPTION_EDITOR_PORT", "8000"))
DEFAULT_EXPORT_FORMAT = os.getenv("CAPTION_EDITOR_DEFAULT_FORMAT", "srt").lower()
WAVEFORM_SAMPLE_RATE = int(os.getenv("CAPTION_EDITOR_WAVEFORM_SAMPLE_RATE", "8000"))
