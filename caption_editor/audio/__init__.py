"""Audio helpers for the timeline: waveform envelope and resampling.

WHY: The timeline UI shows a waveform and snaps caption edges to peaks or
silence. These helpers are independent of the caption store and never
touch its history.

HOW: waveform.py builds a downsampled amplitude envelope with numpy and
scans it for peaks; resample.py delegates rate conversion to SciPy.
"""

from caption_editor.audio.resample import resample_audio
from caption_editor.audio.waveform import WaveformAnalyzer, compute_envelope, find_peaks

__all__ = ["WaveformAnalyzer", "compute_envelope", "find_peaks", "resample_audio"]
