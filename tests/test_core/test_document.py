# tests/test_core/test_document.py
"""Unit tests for the row store in `toyedit.core.Document`.
============================================================

Covers:

1. Loading and exporting lines (`load_from_lines`, `to_lines`).
2. Structural edits (`insert_char`, `delete_char`, `split_row`,
   `join_with_previous`) and the tags they carry along.
3. Precondition checks on row indices, characters and overlays.
4. `Cursor.clamp`.

Every test that edits a document also checks that each row still has
exactly one tag per character.
"""

from __future__ import annotations

import pytest

from toyedit.core.Document import Cell, Cursor, Document, Row, Tag
from toyedit.core.exceptions import PreconditionViolation


def assert_aligned(document: Document) -> None:
    """Every row has one tag per character and the document is never empty."""
    assert len(document) >= 1
    for row in document:
        assert len(row.text) == len(row.tags)


class TestLoading:
    """`load_from_lines`, `from_lines` and `to_lines`."""

    def test_empty_input_gives_one_empty_row(self) -> None:
        doc = Document.from_lines([])
        assert doc.row_count == 1
        assert doc.row_text(0) == ""
        assert doc.row_tags(0) == ()

    def test_every_char_starts_as_body(self) -> None:
        doc = Document.from_lines(["ab", "c"])
        assert doc.row_tags(0) == (Tag.BODY, Tag.BODY)
        assert doc.row_tags(1) == (Tag.BODY,)

    def test_round_trip(self) -> None:
        lines = ["first", "", "  third # x"]
        assert Document.from_lines(lines).to_lines() == lines

    def test_trailing_line_breaks_are_stripped(self) -> None:
        doc = Document.from_lines(["one\n", "two\r\n", "three"])
        assert doc.to_lines() == ["one", "two", "three"]

    def test_reload_replaces_everything(self) -> None:
        doc = Document.from_lines(["a", "b", "c"])
        doc.load_from_lines(["z"])
        assert doc.to_lines() == ["z"]
        doc.load_from_lines([])
        assert doc.to_lines() == [""]

    def test_read_access(self) -> None:
        doc = Document.from_lines(["abc", "de"])
        assert len(doc) == 2
        assert isinstance(doc[1], Row)
        assert doc.row_length(0) == 3
        assert [row.text for row in doc] == ["abc", "de"]

    def test_getitem_rejects_bad_index(self) -> None:
        doc = Document.from_lines(["abc"])
        with pytest.raises(PreconditionViolation):
            doc[1]
        with pytest.raises(PreconditionViolation):
            doc.row_text(-1)


class TestInsertChar:
    """`insert_char` clamps the column and inherits the left tag."""

    def test_insert_into_empty_document(self) -> None:
        doc = Document()
        doc.insert_char(0, 0, "x")
        assert doc.row_text(0) == "x"
        assert doc.row_tags(0) == (Tag.BODY,)

    def test_inherits_left_neighbour_tag(self) -> None:
        doc = Document.from_lines(["ab"])
        doc.apply_row_tags(0, [Tag.VARIABLE, Tag.NUMBER])
        doc.insert_char(0, 2, "!")
        assert doc.row_text(0) == "ab!"
        assert doc.row_tags(0) == (Tag.VARIABLE, Tag.NUMBER, Tag.NUMBER)

    def test_column_zero_uses_body(self) -> None:
        doc = Document.from_lines(["ab"])
        doc.apply_row_tags(0, [Tag.COMMENT, Tag.COMMENT])
        doc.insert_char(0, 0, "x")
        assert doc.row_tags(0)[0] is Tag.BODY

    def test_column_is_clamped(self) -> None:
        doc = Document.from_lines(["ab"])
        doc.insert_char(0, 99, "c")
        doc.insert_char(0, -5, "_")
        assert doc.row_text(0) == "_abc"
        assert_aligned(doc)

    @pytest.mark.parametrize("row", [-1, 1, 5])
    def test_bad_row_raises(self, row: int) -> None:
        doc = Document.from_lines(["ab"])
        with pytest.raises(PreconditionViolation):
            doc.insert_char(row, 0, "x")
        assert doc.to_lines() == ["ab"]

    @pytest.mark.parametrize("ch", ["", "xy", "\n", "\r"])
    def test_bad_character_raises(self, ch: str) -> None:
        doc = Document.from_lines(["ab"])
        with pytest.raises(PreconditionViolation):
            doc.insert_char(0, 0, ch)
        assert doc.to_lines() == ["ab"]


class TestDeleteChar:
    """`delete_char` has backspace semantics."""

    def test_deletes_char_before_column(self) -> None:
        doc = Document.from_lines(["abc"])
        assert doc.delete_char(0, 2) == "b"
        assert doc.row_text(0) == "ac"
        assert_aligned(doc)

    def test_column_zero_is_silent_noop(self) -> None:
        doc = Document.from_lines(["abc"])
        assert doc.delete_char(0, 0) == ""
        assert doc.row_text(0) == "abc"

    def test_empty_document_noop(self) -> None:
        doc = Document()
        assert doc.delete_char(0, 0) == ""
        assert doc.to_lines() == [""]

    def test_column_past_end_is_clamped(self) -> None:
        doc = Document.from_lines(["abc"])
        assert doc.delete_char(0, 10) == "c"
        assert doc.row_text(0) == "ab"

    def test_column_past_end_on_empty_row_is_noop(self) -> None:
        doc = Document.from_lines([""])
        assert doc.delete_char(0, 5) == ""
        assert doc.to_lines() == [""]

    def test_removes_matching_tag(self) -> None:
        doc = Document.from_lines(["a1"])
        doc.apply_row_tags(0, [Tag.VARIABLE, Tag.NUMBER])
        doc.delete_char(0, 1)
        assert doc.row_tags(0) == (Tag.NUMBER,)

    def test_bad_row_raises(self) -> None:
        with pytest.raises(PreconditionViolation):
            Document.from_lines(["a"]).delete_char(3, 1)


class TestSplitAndJoin:
    """`split_row` and `join_with_previous`."""

    def test_split_moves_tail_to_next_row(self) -> None:
        doc = Document.from_lines(["hello world", "next"])
        assert doc.split_row(0, 5) == 1
        assert doc.to_lines() == ["hello", " world", "next"]
        assert_aligned(doc)

    def test_split_carries_tags(self) -> None:
        doc = Document.from_lines(["a1"])
        doc.apply_row_tags(0, [Tag.VARIABLE, Tag.NUMBER])
        doc.split_row(0, 1)
        assert doc.row_tags(0) == (Tag.VARIABLE,)
        assert doc.row_tags(1) == (Tag.NUMBER,)

    def test_split_at_ends(self) -> None:
        doc = Document.from_lines(["abc"])
        doc.split_row(0, 0)
        assert doc.to_lines() == ["", "abc"]
        doc.split_row(1, 3)
        assert doc.to_lines() == ["", "abc", ""]

    def test_join_returns_previous_length(self) -> None:
        doc = Document.from_lines(["ab", "cd", "ef"])
        assert doc.join_with_previous(1) == 2
        assert doc.to_lines() == ["abcd", "ef"]
        assert_aligned(doc)

    def test_join_inverts_split(self) -> None:
        doc = Document.from_lines(["x = 42 # answer"])
        for col in range(len("x = 42 # answer") + 1):
            new_row = doc.split_row(0, col)
            assert doc.join_with_previous(new_row) == col
            assert doc.to_lines() == ["x = 42 # answer"]

    @pytest.mark.parametrize("row", [0, 2, -1])
    def test_join_bad_row_raises(self, row: int) -> None:
        doc = Document.from_lines(["ab", "cd"])
        with pytest.raises(PreconditionViolation):
            doc.join_with_previous(row)
        assert doc.to_lines() == ["ab", "cd"]


class TestOverlay:
    """Tag replacement."""

    def test_apply_overlay(self) -> None:
        doc = Document.from_lines(["a", "1"])
        doc.apply_overlay([[Tag.VARIABLE], [Tag.NUMBER]])
        assert doc.row_tags(0) == (Tag.VARIABLE,)
        assert doc.row_tags(1) == (Tag.NUMBER,)

    def test_overlay_row_count_mismatch(self) -> None:
        doc = Document.from_lines(["a", "b"])
        with pytest.raises(PreconditionViolation):
            doc.apply_overlay([[Tag.BODY]])

    def test_row_tags_length_mismatch(self) -> None:
        doc = Document.from_lines(["abc"])
        with pytest.raises(PreconditionViolation):
            doc.apply_row_tags(0, [Tag.BODY])
        assert doc.row_tags(0) == (Tag.BODY,) * 3

    def test_row_cells_are_copies(self) -> None:
        row = Row.from_text("ab")
        cells = row.cells()
        cells.append(Cell("c", Tag.BODY))
        assert row.text == "ab"


class TestCursor:
    """`Cursor.clamp` keeps the caret inside the document."""

    def test_clamps_row_and_column(self) -> None:
        doc = Document.from_lines(["abc", "d"])
        cursor = Cursor(row=5, col=9)
        cursor.clamp(doc)
        assert (cursor.row, cursor.col) == (1, 1)

    def test_clamps_negative(self) -> None:
        doc = Document.from_lines(["abc"])
        cursor = Cursor(row=-2, col=-1)
        cursor.clamp(doc)
        assert (cursor.row, cursor.col) == (0, 0)
