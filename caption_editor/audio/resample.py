"""Sample-rate conversion delegated to SciPy.

WHY: Decoded audio arrives at whatever rate the media uses (44.1 kHz,
48 kHz, ...). The waveform only needs a low, fixed rate, and resampling
first keeps envelope resolution consistent across media. Resampling
itself is DSP work this package does not reimplement.

HOW: resample_audio() reduces the rate ratio to lowest terms and calls
scipy.signal.resample_poly (polyphase FIR filtering). Failures from SciPy
are surfaced as ResampleError.

RULES:
- Equal rates return a copy of the input unchanged
- Rates must be positive integers
- Output is a 1-D float64 numpy array
"""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np
from scipy import signal

from caption_editor.core.errors import ResampleError


def resample_audio(
    samples: Union[Sequence[float], np.ndarray],
    original_rate: int,
    target_rate: int,
) -> np.ndarray:
    """Resample a mono buffer from ``original_rate`` to ``target_rate``.

    Raises:
        ResampleError: If a rate is not positive or SciPy rejects the input.
    """
    if original_rate <= 0 or target_rate <= 0:
        raise ResampleError(
            "Sample rates must be positive (got {} -> {})".format(original_rate, target_rate)
        )

    data = np.asarray(samples, dtype=np.float64).ravel()
    if original_rate == target_rate or data.size == 0:
        return data.copy()

    divisor = math.gcd(int(original_rate), int(target_rate))
    up = int(target_rate) // divisor
    down = int(original_rate) // divisor
    try:
        return signal.resample_poly(data, up, down)
    except (ValueError, MemoryError) as exc:
        raise ResampleError("Resampling failed: {}".format(exc)) from exc
