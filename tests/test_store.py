"""Unit tests for the caption store.

WHY: The store is the single owner of caption state. A mutation that
forgets to snapshot, snapshots twice, or half-applies before raising
would break undo in ways users notice immediately. These tests verify
every public operation and its history discipline.

HOW: Tests are organized by class, one per operation group:
  - TestCreateAndAdd: id allocation, ordering, range checks
  - TestByIdEdits: text/timing/style updates and missing ids
  - TestDelete: removal counts and snapshots
  - TestSplit: word division, id derivation, invalid split points
  - TestSelectionAndMerge: selection validation and merge results
  - TestBulkTiming: shift and stretch
  - TestBulkText: punctuation, find/replace, profanity
  - TestUndoRedo: history laws across mixed mutations
  - TestImportExport: import replaces state and reports analysis
  - TestFailureAtomicity: raised errors leave everything untouched

RULES:
- Each test creates its own CaptionStore (no shared mutable state)
- History depth is checked through store.history where it matters
"""

from __future__ import annotations

import logging

import pytest

from caption_editor.core.errors import (
    CaptionEditorError,
    InsufficientSelection,
    InvalidSelection,
    InvalidSplitPoint,
    InvalidTimingRange,
    ParseFailure,
    UnsupportedFormat,
    ValidationFailure,
)
from caption_editor.core.ir import CaptionStyle, Position
from caption_editor.core.store import CaptionStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_store(*specs, **kwargs) -> CaptionStore:
    """Create a store pre-filled with (start, end, text) captions via add_timed."""
    store = CaptionStore(**kwargs)
    for start, end, text in specs:
        store.add_timed(start, end, text)
    return store


def _texts(store):
    return [c.text for c in store.captions]


def _times(store):
    return [(c.start_ms, c.end_ms) for c in store.captions]


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreateAndAdd:

    def test_create_appends_empty_zero_duration_caption(self):
        store = _make_store()
        caption_id = store.create(1500)
        assert caption_id == "caption_0"
        caption = store.get_caption(caption_id)
        assert (caption.start_ms, caption.end_ms, caption.text) == (1500, 1500, "")
        assert caption.confidence == 1.0
        assert caption.style == CaptionStyle()

    def test_ids_are_sequential_and_never_reused(self):
        store = _make_store()
        first = store.create(0)
        store.delete([first])
        second = store.create(0)
        assert first == "caption_0"
        assert second == "caption_1"

    def test_create_does_not_sort(self):
        store = _make_store()
        store.create(5000)
        store.create(1000)
        assert _times(store) == [(5000, 5000), (1000, 1000)]

    def test_add_timed_sorts_by_start(self):
        store = _make_store((5000, 6000, "late"), (1000, 2000, "early"))
        assert _texts(store) == ["early", "late"]

    def test_add_timed_keeps_insertion_order_for_equal_starts(self):
        store = _make_store((1000, 2000, "first"), (1000, 3000, "second"))
        assert _texts(store) == ["first", "second"]

    def test_add_timed_rejects_inverted_range(self):
        store = _make_store()
        with pytest.raises(InvalidTimingRange):
            store.add_timed(2000, 1000, "bad")
        assert len(store) == 0
        assert len(store.history) == 1

    def test_each_creation_records_one_snapshot(self):
        store = _make_store()
        store.create(0)
        store.add_timed(0, 100, "x")
        assert len(store.history) == 3


# ---------------------------------------------------------------------------
# By-id edits
# ---------------------------------------------------------------------------


class TestByIdEdits:

    def test_update_text(self):
        store = _make_store((0, 1000, "old"))
        assert store.update_text("caption_0", "new") is True
        assert _texts(store) == ["new"]

    def test_update_timing_does_not_resort(self):
        store = _make_store((0, 1000, "a"), (2000, 3000, "b"))
        assert store.update_timing("caption_0", 5000, 6000) is True
        assert _times(store) == [(5000, 6000), (2000, 3000)]

    def test_update_timing_rejects_inverted_range(self):
        store = _make_store((0, 1000, "a"))
        with pytest.raises(InvalidTimingRange):
            store.update_timing("caption_0", 1000, 500)
        assert _times(store) == [(0, 1000)]

    def test_update_timing_allows_zero_duration(self):
        store = _make_store((0, 1000, "a"))
        assert store.update_timing("caption_0", 700, 700) is True

    def test_update_style(self):
        store = _make_store((0, 1000, "a"))
        style = CaptionStyle(position=Position.TOP, bold=True)
        assert store.update_style("caption_0", style) is True
        assert store.get_caption("caption_0").style == style

    def test_update_style_stores_a_copy(self):
        store = _make_store((0, 1000, "a"))
        style = CaptionStyle()
        store.update_style("caption_0", style)
        style.font_size = 99
        assert store.get_caption("caption_0").style.font_size == 16

    def test_global_style(self):
        store = _make_store((0, 1000, "a"), (1000, 2000, "b"))
        store.update_global_style(CaptionStyle(italic=True))
        assert all(c.style.italic for c in store.captions)

    def test_global_style_on_empty_store_still_records(self):
        store = _make_store()
        store.update_global_style(CaptionStyle(italic=True))
        assert len(store.history) == 2

    def test_update_style_rejects_malformed_color(self):
        store = _make_store((0, 1000, "a"))
        depth = len(store.history)
        with pytest.raises(ValidationFailure):
            store.update_style("caption_0", CaptionStyle(color="white"))
        assert store.get_caption("caption_0").style == CaptionStyle()
        assert len(store.history) == depth
        assert store.export_captions("json")

    def test_global_style_rejects_invalid_style(self):
        store = _make_store((0, 1000, "a"))
        depth = len(store.history)
        with pytest.raises(ValidationFailure):
            store.update_global_style(CaptionStyle(font_size=0))
        assert store.get_caption("caption_0").style.font_size == 16
        assert len(store.history) == depth

    @pytest.mark.parametrize("call", [
        lambda s: s.update_text("missing", "x"),
        lambda s: s.update_timing("missing", 0, 10),
        lambda s: s.update_style("missing", CaptionStyle()),
    ])
    def test_missing_id_returns_false_without_snapshot(self, call, caplog):
        store = _make_store((0, 1000, "a"))
        depth = len(store.history)
        with caplog.at_level(logging.WARNING, logger="caption_editor.core.store"):
            assert call(store) is False
        assert len(store.history) == depth
        assert "could not find caption with ID 'missing'" in caplog.text


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDelete:

    def test_delete_returns_count(self):
        store = _make_store((0, 1, "a"), (1, 2, "b"), (2, 3, "c"))
        assert store.delete(["caption_0", "caption_2", "nope"]) == 2
        assert _texts(store) == ["b"]

    def test_delete_nothing_still_records(self):
        store = _make_store((0, 1, "a"))
        depth = len(store.history)
        assert store.delete(["nope"]) == 0
        assert len(store.history) == depth + 1


# ---------------------------------------------------------------------------
# Split
# ---------------------------------------------------------------------------


class TestSplit:

    def test_split_divides_words_by_time_ratio(self):
        store = _make_store((0, 4000, "one two three four"))
        second_id = store.split("caption_0", 2000)
        assert second_id == "caption_0_split"
        captions = store.captions
        assert [(c.id, c.start_ms, c.end_ms, c.text) for c in captions] == [
            ("caption_0", 0, 2000, "one two"),
            ("caption_0_split", 2000, 4000, "three four"),
        ]

    def test_second_half_inherits_style(self):
        store = _make_store((0, 4000, "one two"))
        store.update_style("caption_0", CaptionStyle(bold=True))
        store.split("caption_0", 1000)
        assert store.get_caption("caption_0_split").style.bold is True

    def test_split_then_merge_restores_text(self):
        store = _make_store((0, 3000, "alpha beta gamma delta epsilon"))
        store.split("caption_0", 1234)
        store.select([0, 1])
        store.merge_selected()
        assert _texts(store) == ["alpha beta gamma delta epsilon"]
        assert _times(store) == [(0, 3000)]

    def test_repeated_split_gets_numbered_id(self):
        store = _make_store((0, 4000, "a b c d"))
        store.split("caption_0", 2000)
        assert store.split("caption_0", 1000) == "caption_0_split2"

    @pytest.mark.parametrize("at_ms", [0, 4000, -5, 9999])
    def test_split_point_must_be_strictly_inside(self, at_ms):
        store = _make_store((0, 4000, "a b"))
        with pytest.raises(InvalidSplitPoint):
            store.split("caption_0", at_ms)
        assert len(store) == 1
        assert len(store.history) == 2

    def test_split_missing_id(self):
        store = _make_store((0, 4000, "a b"))
        assert store.split("missing", 100) is None


# ---------------------------------------------------------------------------
# Selection and merge
# ---------------------------------------------------------------------------


class TestSelectionAndMerge:

    def test_merge_joins_text_and_extends_end(self):
        store = _make_store((0, 1000, "Hello"), (1000, 2500, "world"))
        store.select([0, 1])
        merged_id = store.merge_selected()
        assert merged_id == "caption_0"
        assert [(c.start_ms, c.end_ms, c.text) for c in store.captions] == [(0, 2500, "Hello world")]

    def test_merge_non_contiguous_selection(self):
        store = _make_store((0, 1, "a"), (1, 2, "b"), (2, 3, "c"))
        store.select([2, 0])
        store.merge_selected()
        assert _texts(store) == ["a c", "b"]
        assert _times(store) == [(0, 3), (1, 2)]

    def test_merge_requires_two(self):
        store = _make_store((0, 1, "a"), (1, 2, "b"))
        store.select([0])
        with pytest.raises(InsufficientSelection):
            store.merge_selected()
        assert len(store) == 2

    def test_select_out_of_range(self):
        store = _make_store((0, 1, "a"))
        with pytest.raises(InvalidSelection):
            store.select([0, 3])
        assert store.selection == []

    def test_select_is_not_recorded(self):
        store = _make_store((0, 1, "a"), (1, 2, "b"))
        depth = len(store.history)
        store.select([0, 1])
        assert store.selection == [0, 1]
        assert len(store.history) == depth

    @pytest.mark.parametrize("structural", [
        lambda s: s.create(10),
        lambda s: s.add_timed(0, 1, "x"),
        lambda s: s.delete([]),
        lambda s: s.split("caption_0", 500),
        lambda s: s.sort_by_start(),
        lambda s: s.undo(),
    ])
    def test_structural_changes_clear_selection(self, structural):
        store = _make_store((0, 1000, "a b"), (1000, 2000, "c"))
        store.select([0, 1])
        structural(store)
        assert store.selection == []

    def test_text_edit_keeps_selection(self):
        store = _make_store((0, 1000, "a"), (1000, 2000, "b"))
        store.select([0, 1])
        store.update_text("caption_0", "z")
        assert store.selection == [0, 1]

    def test_clear_selection(self):
        store = _make_store((0, 1, "a"), (1, 2, "b"))
        store.select([0, 1])
        depth = len(store.history)
        store.clear_selection()
        assert store.selection == []
        assert len(store.history) == depth
        with pytest.raises(InsufficientSelection):
            store.merge_selected()


# ---------------------------------------------------------------------------
# Bulk timing
# ---------------------------------------------------------------------------


class TestBulkTiming:

    def test_shift_all(self):
        store = _make_store((0, 1000, "a"), (2000, 3000, "b"))
        store.shift_all(-500)
        assert _times(store) == [(-500, 500), (1500, 2500)]

    def test_stretch_all_truncates(self):
        store = _make_store((1001, 2003, "a"))
        store.stretch_all(1.5)
        assert _times(store) == [(1501, 3004)]

    def test_stretch_rejects_non_finite(self):
        store = _make_store((0, 1000, "a"))
        with pytest.raises(ValidationFailure):
            store.stretch_all(float("nan"))
        assert _times(store) == [(0, 1000)]

    def test_sort_by_start_after_retime(self):
        store = _make_store((0, 1000, "a"), (2000, 3000, "b"))
        store.update_timing("caption_0", 4000, 5000)
        store.sort_by_start()
        assert _texts(store) == ["b", "a"]


# ---------------------------------------------------------------------------
# Bulk text
# ---------------------------------------------------------------------------


class TestBulkText:

    def test_auto_punctuate(self):
        store = _make_store((0, 1000, "hello , world"))
        store.auto_punctuate()
        assert _texts(store) == ["Hello, world."]

    def test_find_replace_counts_changed_captions(self):
        store = _make_store((0, 1, "cat"), (1, 2, "dog"), (2, 3, "Cat cat"))
        assert store.find_replace("cat", "bird", case_sensitive=False) == 2
        assert _texts(store) == ["bird", "dog", "bird bird"]

    def test_find_replace_rejects_empty_find(self):
        store = _make_store((0, 1, "cat"))
        with pytest.raises(ValidationFailure):
            store.find_replace("", "x")

    def test_profanity_filter(self):
        store = _make_store((0, 1, "damn it"), (1, 2, "oh hell"))
        store.apply_profanity_filter(bleep=False)
        assert _texts(store) == ["**** it", "oh ****"]


# ---------------------------------------------------------------------------
# Undo / redo
# ---------------------------------------------------------------------------


class TestUndoRedo:

    def test_n_mutations_then_n_undos_restores_initial_state(self):
        store = _make_store()
        initial = store.captions
        store.create(0)
        store.add_timed(100, 900, "one two")
        store.update_text("caption_0", "edited")
        store.split("caption_1", 500)
        store.shift_all(250)
        store.select([0, 1])
        store.merge_selected()
        store.find_replace("edited", "again")
        for _ in range(7):
            assert store.undo() is True
        assert store.captions == initial
        assert store.undo() is False

    def test_redo_after_undo(self):
        store = _make_store((0, 1000, "a"))
        store.update_text("caption_0", "b")
        store.undo()
        assert _texts(store) == ["a"]
        assert store.redo() is True
        assert _texts(store) == ["b"]

    def test_new_mutation_destroys_redo(self):
        store = _make_store((0, 1000, "a"))
        store.update_text("caption_0", "b")
        store.undo()
        store.update_text("caption_0", "c")
        assert store.can_redo is False
        assert store.redo() is False
        assert _texts(store) == ["c"]

    def test_history_bounded_at_capacity(self):
        store = _make_store()
        for i in range(150):
            store.create(i)
        assert len(store.history) == 100

    def test_undo_restores_ids_for_later_lookup(self):
        store = _make_store((0, 1000, "a"))
        store.delete(["caption_0"])
        store.undo()
        assert store.update_text("caption_0", "back") is True

    def test_ids_stay_unique_after_undoing_an_import(self):
        store = _make_store()
        for start in (0, 1000, 2000):
            store.create(start)
        store.import_captions("srt", "1\n00:00:00,000 --> 00:00:01,000\nnew\n")
        store.undo()
        assert store.create(5000) == "caption_3"
        ids = [c.id for c in store.captions]
        assert len(ids) == len(set(ids)) == 4

    def test_redo_never_moves_the_id_counter_back(self):
        store = _make_store()
        store.create(0)
        store.create(1000)
        store.import_captions("srt", "1\n00:00:00,000 --> 00:00:01,000\nnew\n")
        store.undo()
        store.redo()
        assert [c.id for c in store.captions] == ["caption_0"]
        assert store.create(5000) == "caption_2"


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


class TestImportExport:

    def test_import_replaces_and_renumbers(self, sample_srt):
        store = _make_store((0, 1, "old"), (1, 2, "older"))
        assert store.import_captions("srt", sample_srt) == 2
        assert [c.id for c in store.captions] == ["caption_0", "caption_1"]
        assert _texts(store) == ["Hello there.", "General Kenobi!\nYou are a bold one."]

    def test_import_sorts_by_start(self):
        content = (
            "1\n00:00:05,000 --> 00:00:06,000\nlate\n\n"
            "2\n00:00:01,000 --> 00:00:02,000\nearly\n"
        )
        store = _make_store()
        store.import_captions("srt", content)
        assert _texts(store) == ["early", "late"]

    def test_import_records_analysis(self):
        content = (
            "1\n00:00:00,000 --> 00:00:01,000\n" + "x" * 30 + "\n\n"
            "2\n00:00:00,500 --> 00:00:02,000\nok\n"
        )
        store = _make_store()
        store.import_captions("srt", content)
        assert store.last_import_warnings == ["Caption 1 too fast: 30.0 chars/sec"]
        assert store.last_import_conflicts == [(0, 1)]

    def test_import_is_undoable(self, sample_srt):
        store = _make_store((0, 1, "old"))
        store.import_captions("srt", sample_srt)
        store.undo()
        assert _texts(store) == ["old"]

    def test_parse_failure_leaves_store_untouched(self):
        store = _make_store((0, 1, "keep"))
        depth = len(store.history)
        with pytest.raises(ParseFailure):
            store.import_captions("srt", "1\n00:00:xx,000 --> 00:00:01,000\nbad\n")
        assert _texts(store) == ["keep"]
        assert len(store.history) == depth

    def test_import_export_only_format(self):
        store = _make_store()
        with pytest.raises(UnsupportedFormat):
            store.import_captions("txt", "hello")

    def test_export_unknown_format(self):
        store = _make_store()
        with pytest.raises(UnsupportedFormat):
            store.export_captions("docx")

    def test_export_is_pure(self, loaded_store):
        depth = len(loaded_store.history)
        loaded_store.export_captions("vtt")
        assert len(loaded_store.history) == depth


# ---------------------------------------------------------------------------
# Atomicity
# ---------------------------------------------------------------------------


class TestFailureAtomicity:

    def test_failed_operations_record_nothing(self):
        store = _make_store((0, 1000, "a b"))
        before = store.captions
        depth = len(store.history)
        for op in (
            lambda: store.add_timed(5, 1, "x"),
            lambda: store.update_timing("caption_0", 9, 1),
            lambda: store.split("caption_0", 1000),
            lambda: store.merge_selected(),
            lambda: store.stretch_all(float("inf")),
            lambda: store.find_replace("", "x"),
            lambda: store.import_captions("edl", ""),
        ):
            with pytest.raises(CaptionEditorError):
                op()
        assert store.captions == before
        assert len(store.history) == depth
