"""The caption store: ordered captions, id allocation, selection, and history.

WHY: The host UI issues edit commands one at a time and expects each to
be undoable. The store is the single owner of the caption collection so
that every mutation goes through the same discipline: validate, mutate,
record exactly one history snapshot.

HOW: CaptionStore keeps a plain list of Caption objects, a monotonic id
nonce, a set of selected positions (used only by merge), and a History.
Every public mutator ends with _commit(), which snapshots the live list.
Import and export route through the codec registry; analysis routes
through core.analysis.

RULES:
- A mutator either succeeds and records exactly one snapshot, or raises a
  CaptionEditorError and leaves captions, selection, and history untouched
- By-id updates on a missing id log a warning and return False (no snapshot)
- Ids are "caption_<n>" from a nonce that only import resets; undo and redo
  move the nonce past every numbered id they restore, so ids are never reused
- Styles are checked against the caption JSON schema before they are stored
- add_timed() and import re-sort by start time (stable); create() and
  in-place edits do not — call sort_by_start() to restore order
- Selection holds positions, not ids, and is cleared by every structural
  change (create, add, delete, split, merge, sort, import, undo, redo)
- Not thread-safe: callers serialise access (the HTTP layer uses a lock)
"""

from __future__ import annotations

import copy
import logging
import math
import re
from typing import Iterable, List, Optional, Set, Tuple, Union

from caption_editor.config import CAPTION_ID_PREFIX, HISTORY_CAPACITY, SPLIT_ID_SUFFIX
from caption_editor.core import analysis
from caption_editor.core.errors import (
    InsufficientSelection,
    InvalidSelection,
    InvalidSplitPoint,
    InvalidTimingRange,
    ValidationFailure,
)
from caption_editor.core.history import History
from caption_editor.core.ir import Caption, CaptionStyle
from caption_editor.core.text_ops import (
    auto_punctuate_text,
    find_replace_text,
    profanity_filter_text,
    split_words_at_ratio,
)
from caption_editor.formats import CaptionFormat, get_codec
from caption_editor.formats.json_captions import validate_style

logger = logging.getLogger(__name__)

_NUMBERED_ID_RE = re.compile(re.escape(CAPTION_ID_PREFIX) + r"([0-9]+)")


def _check_range(start_ms: int, end_ms: int) -> None:
    if end_ms < start_ms:
        raise InvalidTimingRange(start_ms, end_ms)


class CaptionStore:
    """In-memory caption collection with bounded undo/redo."""

    def __init__(self, history_capacity: int = HISTORY_CAPACITY) -> None:
        self._captions: List[Caption] = []
        self._selection: Set[int] = set()
        self._nonce = 0
        self._history = History([], capacity=history_capacity)
        self.last_import_warnings: List[str] = []
        self.last_import_conflicts: List[Tuple[int, int]] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._captions)

    @property
    def captions(self) -> List[Caption]:
        """A deep copy of the live collection, in order."""
        return copy.deepcopy(self._captions)

    def get_caption(self, caption_id: str) -> Optional[Caption]:
        index = self._index_of(caption_id)
        return None if index is None else copy.deepcopy(self._captions[index])

    @property
    def selection(self) -> List[int]:
        return sorted(self._selection)

    @property
    def history(self) -> History:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_id(self) -> str:
        caption_id = "{}{}".format(CAPTION_ID_PREFIX, self._nonce)
        self._nonce += 1
        return caption_id

    def _resync_nonce(self) -> None:
        # undo/redo can bring back ids allocated before an import reset the nonce
        for caption in self._captions:
            match = _NUMBERED_ID_RE.fullmatch(caption.id)
            if match:
                self._nonce = max(self._nonce, int(match.group(1)) + 1)

    def _index_of(self, caption_id: str) -> Optional[int]:
        for i, caption in enumerate(self._captions):
            if caption.id == caption_id:
                return i
        return None

    def _find_or_warn(self, caption_id: str, operation: str) -> Optional[Caption]:
        index = self._index_of(caption_id)
        if index is None:
            logger.warning("%s failed: could not find caption with ID '%s'", operation, caption_id)
            return None
        return self._captions[index]

    def _split_id_for(self, caption_id: str) -> str:
        candidate = caption_id + SPLIT_ID_SUFFIX
        n = 2
        existing = {c.id for c in self._captions}
        while candidate in existing:
            candidate = "{}{}{}".format(caption_id, SPLIT_ID_SUFFIX, n)
            n += 1
        return candidate

    def _sort(self) -> None:
        # list.sort is stable, so equal start times keep their relative order
        self._captions.sort(key=lambda c: c.start_ms)

    def _commit(self, structural: bool = False) -> None:
        if structural:
            self._selection.clear()
        self._history.record(self._captions)

    # ------------------------------------------------------------------
    # Creation and per-caption edits
    # ------------------------------------------------------------------

    def create(self, start_ms: int) -> str:
        """Append an empty, zero-duration caption at ``start_ms`` and return its id."""
        caption_id = self._next_id()
        self._captions.append(Caption(id=caption_id, start_ms=start_ms, end_ms=start_ms))
        self._commit(structural=True)
        logger.info("Caption created with ID '%s'", caption_id)
        return caption_id

    def add_timed(self, start_ms: int, end_ms: int, text: str) -> str:
        """Append a fully specified caption, then re-sort by start time."""
        _check_range(start_ms, end_ms)
        caption_id = self._next_id()
        self._captions.append(Caption(id=caption_id, start_ms=start_ms, end_ms=end_ms, text=text))
        self._sort()
        self._commit(structural=True)
        logger.info("Caption added with ID '%s' [%d, %d]", caption_id, start_ms, end_ms)
        return caption_id

    def update_text(self, caption_id: str, text: str) -> bool:
        logger.info("Updating text for caption '%s' to: %r", caption_id, text)
        caption = self._find_or_warn(caption_id, "update_text")
        if caption is None:
            return False
        caption.text = text
        self._commit()
        return True

    def update_timing(self, caption_id: str, start_ms: int, end_ms: int) -> bool:
        """Retime one caption in place (no re-sort).

        Raises:
            InvalidTimingRange: If ``end_ms < start_ms``.
        """
        logger.debug("Updating timing for caption '%s' to [%d, %d]", caption_id, start_ms, end_ms)
        _check_range(start_ms, end_ms)
        caption = self._find_or_warn(caption_id, "update_timing")
        if caption is None:
            return False
        caption.start_ms = start_ms
        caption.end_ms = end_ms
        self._commit()
        return True

    def update_style(self, caption_id: str, style: CaptionStyle) -> bool:
        """Replace one caption's style.

        Raises:
            ValidationFailure: If ``style`` has a malformed color or an
                out-of-range size.
        """
        validate_style(style)
        caption = self._find_or_warn(caption_id, "update_style")
        if caption is None:
            return False
        caption.style = copy.deepcopy(style)
        self._commit()
        return True

    def update_global_style(self, style: CaptionStyle) -> None:
        """Give every caption a copy of ``style``; records history even when empty."""
        validate_style(style)
        for caption in self._captions:
            caption.style = copy.deepcopy(style)
        self._commit()
        logger.info("Applied global style to %d captions", len(self._captions))

    def delete(self, caption_ids: Iterable[str]) -> int:
        """Remove every caption whose id is in ``caption_ids``; unknown ids are ignored.

        Returns:
            Number of captions removed.
        """
        doomed = set(caption_ids)
        before = len(self._captions)
        self._captions = [c for c in self._captions if c.id not in doomed]
        removed = before - len(self._captions)
        self._commit(structural=True)
        logger.info("Deleted %d captions", removed)
        return removed

    def sort_by_start(self) -> None:
        self._sort()
        self._commit(structural=True)

    # ------------------------------------------------------------------
    # Split and merge
    # ------------------------------------------------------------------

    def split(self, caption_id: str, at_ms: int) -> Optional[str]:
        """Split a caption in two at ``at_ms``, dividing its words by time ratio.

        The first half keeps the original id; the second half gets
        ``"<id>_split"`` and is inserted right after it.

        Returns:
            The id of the second half, or None if ``caption_id`` was not found.

        Raises:
            InvalidSplitPoint: Unless ``start_ms < at_ms < end_ms``.
        """
        index = self._index_of(caption_id)
        if index is None:
            logger.warning("split failed: could not find caption with ID '%s'", caption_id)
            return None

        original = self._captions[index]
        if not original.start_ms < at_ms < original.end_ms:
            raise InvalidSplitPoint(caption_id, at_ms, original.start_ms, original.end_ms)

        ratio = (at_ms - original.start_ms) / (original.end_ms - original.start_ms)
        first_text, second_text = split_words_at_ratio(original.text, ratio)

        second = copy.deepcopy(original)
        second.id = self._split_id_for(caption_id)
        second.start_ms = at_ms
        second.text = second_text

        original.end_ms = at_ms
        original.text = first_text

        self._captions.insert(index + 1, second)
        self._commit(structural=True)
        logger.info("Split caption '%s' at %d into '%s'", caption_id, at_ms, second.id)
        return second.id

    def select(self, positions: Iterable[int]) -> None:
        """Replace the selection with ``positions`` (not recorded in history).

        Raises:
            InvalidSelection: If any position is outside the collection.
        """
        chosen = set(positions)
        bad = sorted(p for p in chosen if not 0 <= p < len(self._captions))
        if bad:
            raise InvalidSelection(
                "Selected positions out of range: {} (collection has {} captions)".format(
                    bad, len(self._captions)
                )
            )
        self._selection = chosen

    def clear_selection(self) -> None:
        self._selection.clear()

    def merge_selected(self) -> str:
        """Merge the selected captions into the first one and return its id.

        Texts are space-joined in position order; the result ends where the
        last selected caption ends.

        Raises:
            InsufficientSelection: If fewer than 2 positions are selected.
        """
        if len(self._selection) < 2:
            raise InsufficientSelection(len(self._selection))

        positions = sorted(self._selection)
        first, last = positions[0], positions[-1]
        merged_text = " ".join(self._captions[i].text for i in positions)

        target = self._captions[first]
        target.text = merged_text
        target.end_ms = self._captions[last].end_ms

        for index in reversed(positions[1:]):
            del self._captions[index]

        self._commit(structural=True)
        logger.info("Merged %d captions into '%s'", len(positions), target.id)
        return target.id

    # ------------------------------------------------------------------
    # Bulk timing
    # ------------------------------------------------------------------

    def shift_all(self, delta_ms: int) -> None:
        """Move every caption by ``delta_ms``; results may go negative."""
        for caption in self._captions:
            caption.start_ms += delta_ms
            caption.end_ms += delta_ms
        self._commit()

    def stretch_all(self, factor: float) -> None:
        """Scale every start/end by ``factor``, truncating toward zero.

        Raises:
            ValidationFailure: If ``factor`` is NaN or infinite.
        """
        if not math.isfinite(factor):
            raise ValidationFailure("Stretch factor must be finite, got {}".format(factor))
        for caption in self._captions:
            caption.start_ms = int(caption.start_ms * factor)
            caption.end_ms = int(caption.end_ms * factor)
        self._commit()

    # ------------------------------------------------------------------
    # Text transforms
    # ------------------------------------------------------------------

    def auto_punctuate(self) -> None:
        for caption in self._captions:
            caption.text = auto_punctuate_text(caption.text)
        self._commit()

    def find_replace(self, find: str, replace: str, case_sensitive: bool = True) -> int:
        """Replace ``find`` with ``replace`` in every caption.

        Returns:
            Number of captions whose text changed.

        Raises:
            ValidationFailure: If ``find`` is empty.
        """
        if not find:
            raise ValidationFailure("Find text must not be empty")
        changed = 0
        for caption in self._captions:
            new_text = find_replace_text(caption.text, find, replace, case_sensitive)
            if new_text != caption.text:
                caption.text = new_text
                changed += 1
        self._commit()
        return changed

    def apply_profanity_filter(self, bleep: bool = True) -> None:
        for caption in self._captions:
            caption.text = profanity_filter_text(caption.text, bleep)
        self._commit()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_reading_speed(self) -> List[str]:
        return analysis.analyze_reading_speed(self._captions)

    def detect_conflicts(self) -> List[Tuple[int, int]]:
        return analysis.detect_conflicts(self._captions)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self._captions = snapshot
        self._selection.clear()
        self._resync_nonce()
        return True

    def redo(self) -> bool:
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._captions = snapshot
        self._selection.clear()
        self._resync_nonce()
        return True

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_captions(self, fmt: Union[str, CaptionFormat], content: str) -> int:
        """Replace the whole collection with captions parsed from ``content``.

        Parsing completes before anything is replaced, so a ParseFailure
        leaves the store as it was. Afterwards the reading-speed warnings
        and conflicts are available in ``last_import_warnings`` and
        ``last_import_conflicts``.

        Returns:
            Number of captions imported.

        Raises:
            UnsupportedFormat: If the format is unknown or export-only.
            ParseFailure: If the content is malformed.
        """
        codec = get_codec(fmt)
        parsed = codec.parse(content)

        self._nonce = 0
        for caption in parsed:
            caption.id = self._next_id()
        self._captions = parsed
        self._sort()
        self._commit(structural=True)

        self.last_import_warnings = self.analyze_reading_speed()
        self.last_import_conflicts = self.detect_conflicts()
        logger.info(
            "Imported %d captions from %s (%d reading-speed warnings, %d conflicts)",
            len(parsed), codec.name, len(self.last_import_warnings), len(self.last_import_conflicts),
        )
        return len(parsed)

    def export_captions(self, fmt: Union[str, CaptionFormat]) -> str:
        codec = get_codec(fmt)
        logger.info("Exporting %d captions as %s", len(self._captions), codec.name)
        return codec.format(self._captions)
