"""Shared test fixtures for the caption_editor test suite.

WHY: Several test modules need the same small, hand-checked caption sets
(an SRT file, a collection with one overlap, a speaker-labelled pair).
Centralizing them here avoids duplication and keeps golden values in one
place.

HOW: Plain module-level constants hold the raw file text; fixtures hand
out fresh Caption lists and stores so tests can mutate them freely.

RULES:
- SAMPLE_SRT timing and text are referenced by exact value in tests
- Fixtures return new objects on every call (no shared mutable state)
"""

from typing import List

import pytest

from caption_editor.core.ir import Caption
from caption_editor.core.store import CaptionStore


# ---------------------------------------------------------------------------
# Sample files
# ---------------------------------------------------------------------------

SAMPLE_SRT = (
    "1\n"
    "00:00:01,000 --> 00:00:03,500\n"
    "Hello there.\n"
    "\n"
    "2\n"
    "00:00:04,000 --> 00:00:06,250\n"
    "General Kenobi!\n"
    "You are a bold one.\n"
    "\n"
)

SAMPLE_VTT = (
    "WEBVTT\n"
    "\n"
    "NOTE produced by hand\n"
    "\n"
    "intro\n"
    "00:01.000 --> 00:03.500 align:start position:10%\n"
    "Hello there.\n"
    "\n"
    "00:00:04.000 --> 00:00:06.250\n"
    "General Kenobi!\n"
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_srt() -> str:
    return SAMPLE_SRT


@pytest.fixture
def sample_vtt() -> str:
    return SAMPLE_VTT


@pytest.fixture
def store() -> CaptionStore:
    """An empty store."""
    return CaptionStore()


@pytest.fixture
def loaded_store() -> CaptionStore:
    """A store holding the two SAMPLE_SRT captions (ids caption_0, caption_1)."""
    s = CaptionStore()
    s.import_captions("srt", SAMPLE_SRT)
    return s


@pytest.fixture
def speaker_captions() -> List[Caption]:
    return [
        Caption(id="a", start_ms=0, end_ms=1500, text="Welcome back.", speaker="Host"),
        Caption(id="b", start_ms=1500, end_ms=4000, text="Thanks for\nhaving me.", speaker="Guest"),
    ]
