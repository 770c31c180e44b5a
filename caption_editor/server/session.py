"""Process-wide editing session shared by every HTTP request.

WHY: The HTTP API serves one editor UI. FastAPI runs sync endpoints on a
thread pool, so two requests could otherwise interleave inside a single
store mutation and corrupt the caption list or its history.

HOW: EditorSession owns one CaptionStore and one WaveformAnalyzer and
hands them out through ``locked()``, a context manager holding a
threading.Lock for the duration of a request's work.

RULES:
- All store and analyzer access from the API goes through locked()
- reset() replaces both objects (used by tests and by DELETE /session)
- The lock is not re-entrant: never call locked() while holding it
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from caption_editor.audio.waveform import WaveformAnalyzer
from caption_editor.config import HISTORY_CAPACITY
from caption_editor.core.store import CaptionStore

logger = logging.getLogger(__name__)


class EditorSession:
    """Thread-safe holder for the store and waveform analyzer."""

    def __init__(
        self,
        store: Optional[CaptionStore] = None,
        analyzer: Optional[WaveformAnalyzer] = None,
        history_capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self._history_capacity = history_capacity
        self._lock = threading.Lock()
        self._store = store if store is not None else CaptionStore(history_capacity=history_capacity)
        self._analyzer = analyzer if analyzer is not None else WaveformAnalyzer()

    @contextmanager
    def locked(self) -> Iterator[Tuple[CaptionStore, WaveformAnalyzer]]:
        with self._lock:
            yield self._store, self._analyzer

    def reset(self) -> None:
        """Discard all captions, history, and waveform data."""
        with self._lock:
            self._store = CaptionStore(history_capacity=self._history_capacity)
            self._analyzer = WaveformAnalyzer()
        logger.info("Editor session reset")
