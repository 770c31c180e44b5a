"""Caption Editor — in-memory editing engine for timed captions.

WHY: Caption editing UIs need an engine that keeps an ordered caption
list consistent through retiming, splitting, merging, bulk shifts, and
text cleanup, with reliable undo/redo and lossless exchange with the
standard subtitle formats (SRT, WebVTT, ASS, JSON, and more).

HOW: Three layers — the core store (captions + history), pluggable format
codecs, and host surfaces (CLI and HTTP API). The audio package turns raw
sample buffers into a waveform envelope for timeline scrubbing.

RULES:
- All codecs consume and produce the same Caption IR
- Adding a new format = one new codec module plus one registry line
- Every store mutation is undoable and records exactly one snapshot
"""

__version__ = "0.1.0"
