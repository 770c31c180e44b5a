"""Read-only quality checks over a caption collection.

WHY: Editors need to know which captions flash by too quickly to read,
which linger uselessly, and which overlap in time. Both checks run after
every import and on demand, and must never fail on odd data such as
zero-duration captions that were just created.

HOW: analyze_reading_speed() computes characters per second per caption
and returns human-readable warnings. detect_conflicts() does an O(n²)
pairwise scan with strict half-open interval overlap.

RULES:
- Warnings use 1-based caption numbers in collection order
- > MAX_READING_CPS is "too fast"; < MIN_READING_CPS is "too slow" only when
  the caption has more than SLOW_WARNING_MIN_CHARS characters
- Zero or negative duration with text is "too fast" (no display time);
  zero or negative duration without text is skipped
- Conflicts report every overlapping pair (i, j) with i < j, not only neighbours
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from caption_editor.config import MAX_READING_CPS, MIN_READING_CPS, SLOW_WARNING_MIN_CHARS
from caption_editor.core.ir import Caption


def reading_speed_cps(caption: Caption) -> float:
    """Characters per second, or ``inf`` when the caption has no display time."""
    chars = len(caption.text)
    if caption.duration_ms <= 0:
        return float("inf") if chars else 0.0
    return chars / (caption.duration_ms / 1000.0)


def analyze_reading_speed(captions: Sequence[Caption]) -> List[str]:
    """Return a warning message for each caption read too fast or too slow."""
    warnings: List[str] = []

    for i, caption in enumerate(captions):
        number = i + 1
        chars = len(caption.text)

        if caption.duration_ms <= 0:
            if chars:
                warnings.append(
                    "Caption {} too fast: no display time for {} chars".format(number, chars)
                )
            continue

        cps = reading_speed_cps(caption)
        if cps > MAX_READING_CPS:
            warnings.append("Caption {} too fast: {:.1f} chars/sec".format(number, cps))
        elif cps < MIN_READING_CPS and chars > SLOW_WARNING_MIN_CHARS:
            warnings.append("Caption {} too slow: {:.1f} chars/sec".format(number, cps))

    return warnings


def detect_conflicts(captions: Sequence[Caption]) -> List[Tuple[int, int]]:
    """Return every pair of positions whose time intervals overlap."""
    conflicts: List[Tuple[int, int]] = []
    for i in range(len(captions)):
        a = captions[i]
        for j in range(i + 1, len(captions)):
            b = captions[j]
            if a.end_ms > b.start_ms and a.start_ms < b.end_ms:
                conflicts.append((i, j))
    return conflicts
