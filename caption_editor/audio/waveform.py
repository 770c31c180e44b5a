"""Waveform envelope and peak detection for timeline scrubbing.

WHY: The timeline draws a low-resolution waveform under the captions and
lets users snap caption edges to loud onsets or to silence. Raw audio has
tens of thousands of samples per second; the UI needs a few hundred
points per second and a list of peaks.

HOW: process_buffer() splits the samples into consecutive chunks of
WAVEFORM_DOWNSAMPLE_RATIO samples and stores the mean absolute value of
each chunk (the envelope). get_peaks() scans the envelope for strict
local maxima above a threshold. The nearest-peak/silence helpers map a
timecode into envelope space, search a fixed window, and map back.

RULES:
- The final partial chunk is included, averaged over its own length
- A peak is an interior index i with env[i] > threshold and
  env[i] > env[i-1] and env[i] > env[i+1]; the first and last index never qualify
- Peak indices are returned in ascending order
- Only the last processed envelope is kept
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import numpy as np

from caption_editor.config import PEAK_SEARCH_RANGE, WAVEFORM_DOWNSAMPLE_RATIO

SampleBuffer = Union[Sequence[float], np.ndarray]


def compute_envelope(samples: SampleBuffer, ratio: int = WAVEFORM_DOWNSAMPLE_RATIO) -> np.ndarray:
    """Mean absolute amplitude per chunk of ``ratio`` samples."""
    if ratio < 1:
        raise ValueError("Downsample ratio must be at least 1, got {}".format(ratio))
    magnitudes = np.abs(np.asarray(samples, dtype=np.float64).ravel())
    if magnitudes.size == 0:
        return np.zeros(0, dtype=np.float64)

    full_chunks = magnitudes.size // ratio
    envelope = magnitudes[: full_chunks * ratio].reshape(full_chunks, ratio).mean(axis=1)
    remainder = magnitudes[full_chunks * ratio:]
    if remainder.size:
        envelope = np.append(envelope, remainder.mean())
    return envelope


def find_peaks(envelope: np.ndarray, threshold: float) -> List[int]:
    """Indices of strict interior local maxima above ``threshold``."""
    if envelope.size < 3:
        return []
    middle = envelope[1:-1]
    mask = (middle > threshold) & (middle > envelope[:-2]) & (middle > envelope[2:])
    return [int(i) + 1 for i in np.flatnonzero(mask)]


class WaveformAnalyzer:
    """Holds the last computed envelope and answers peak queries against it."""

    def __init__(self, ratio: int = WAVEFORM_DOWNSAMPLE_RATIO) -> None:
        self.ratio = ratio
        self._envelope = np.zeros(0, dtype=np.float64)

    def process_buffer(self, samples: SampleBuffer) -> List[float]:
        """Replace the stored envelope with one computed from ``samples``."""
        self._envelope = compute_envelope(samples, self.ratio)
        return self.waveform_data

    @property
    def waveform_data(self) -> List[float]:
        return self._envelope.tolist()

    def get_peaks(self, threshold: float) -> List[int]:
        return find_peaks(self._envelope, threshold)

    def _window(self, time_ms: float, duration_ms: float) -> range:
        size = self._envelope.size
        if size == 0 or duration_ms <= 0:
            return range(0)
        index = int(time_ms / duration_ms * size)
        start = max(0, index - PEAK_SEARCH_RANGE)
        end = min(size, index + PEAK_SEARCH_RANGE)
        return range(start, end)

    def _to_ms(self, index: int, duration_ms: float) -> int:
        return int(index / self._envelope.size * duration_ms)

    def find_nearest_peak(self, time_ms: float, duration_ms: float, threshold: float) -> Optional[int]:
        """Time in ms of the loudest point above ``threshold`` near ``time_ms``.

        Searches PEAK_SEARCH_RANGE envelope points either side; ties keep
        the earliest point. Returns None when nothing exceeds the threshold.
        """
        best_index = None
        best_value = threshold
        for i in self._window(time_ms, duration_ms):
            if self._envelope[i] > best_value:
                best_value = self._envelope[i]
                best_index = i
        return None if best_index is None else self._to_ms(best_index, duration_ms)

    def find_nearest_silence(self, time_ms: float, duration_ms: float, threshold: float) -> Optional[int]:
        """Time in ms of the first envelope point below ``threshold`` in the search window."""
        for i in self._window(time_ms, duration_ms):
            if self._envelope[i] < threshold:
                return self._to_ms(i, duration_ms)
        return None
