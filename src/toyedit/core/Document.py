# toyedit/core/Document.py
"""toyedit.core.Document
=======================

Row-oriented text store with a per-character syntax overlay.

Each `Row` owns a single list of `Cell(char, tag)` pairs. The text and the
tag sequence of a row are two views over that one list, so a structural edit
(insert, delete, split, join) can never leave them with different lengths.

The `Document` is the ordered collection of rows. It is never empty: loading
an empty sequence of lines produces one empty row, and the only operation
that removes a row (`join_with_previous`) needs a row before it.

Row indices passed to mutators are validated and rejected with
`PreconditionViolation`; column arguments are clamped into range instead.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple, Sequence

from toyedit.core.exceptions import PreconditionViolation

logger = logging.getLogger("toyedit")


class Tag(enum.Enum):
    """Syntax class of a single character.

    BODY, COMMENT, NUMBER, VARIABLE and OPERATOR are produced by the
    highlighter. KEYWORD, STRING and ERROR are reserved: they have colours
    but nothing assigns them yet.
    """

    BODY = "body"
    COMMENT = "comment"
    NUMBER = "number"
    VARIABLE = "variable"
    OPERATOR = "operator"
    KEYWORD = "keyword"
    STRING = "string"
    ERROR = "error"


class Cell(NamedTuple):
    char: str
    tag: Tag


def _strip_line_break(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


## ==================== Row ====================
class Row:
    """One line of the document: characters paired with their tags."""

    __slots__ = ("_cells",)

    def __init__(self, cells: Iterable[Cell] = ()) -> None:
        self._cells: list[Cell] = list(cells)

    @classmethod
    def from_text(cls, text: str, tag: Tag = Tag.BODY) -> "Row":
        return cls(Cell(ch, tag) for ch in text)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __repr__(self) -> str:
        return f"Row({self.text!r})"

    @property
    def text(self) -> str:
        return "".join(cell.char for cell in self._cells)

    @property
    def tags(self) -> tuple[Tag, ...]:
        return tuple(cell.tag for cell in self._cells)

    def cells(self, start: int = 0, stop: int | None = None) -> list[Cell]:
        """Return a copy of the cells in ``[start, stop)``."""
        return self._cells[start:stop]

    def clamp(self, col: int) -> int:
        return max(0, min(col, len(self._cells)))

    def insert(self, col: int, char: str) -> None:
        # Placeholder tag: inherit from the left neighbour until the next
        # highlighter pass replaces it.
        tag = self._cells[col - 1].tag if col > 0 else Tag.BODY
        self._cells.insert(col, Cell(char, tag))

    def delete(self, col: int) -> Cell:
        return self._cells.pop(col)

    def split(self, col: int) -> "Row":
        """Cut the row at `col`, keep ``[0, col)`` and return the remainder."""
        tail = Row(self._cells[col:])
        del self._cells[col:]
        return tail

    def extend(self, other: "Row") -> None:
        self._cells.extend(other._cells)

    def retag(self, tags: Sequence[Tag]) -> None:
        if len(tags) != len(self._cells):
            raise PreconditionViolation(
                f"Overlay length {len(tags)} does not match row length {len(self._cells)}"
            )
        self._cells = [Cell(cell.char, tag) for cell, tag in zip(self._cells, tags)]


## ==================== Document ====================
class Document:
    """Ordered, never-empty collection of `Row` objects.

    Attributes:
        rows (list[Row]): The rows, addressed by zero-based contiguous index.

    Methods:
        load_from_lines(lines): Replace the whole document.
        to_lines(): Return the row texts for persistence.
        insert_char(row, col, ch): Insert one character.
        delete_char(row, col): Delete the character before `col` (backspace).
        split_row(row, col): Break a row in two at `col`.
        join_with_previous(row): Merge a row onto the one above it.
        apply_overlay(overlay) / apply_row_tags(row, tags): Replace tags.
    """

    def __init__(self, lines: Iterable[str] = ()) -> None:
        self.rows: list[Row] = []
        self.load_from_lines(lines)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "Document":
        return cls(lines)

    # --- read access ---
    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> Row:
        return self.rows[self._check_row(index)]

    def __repr__(self) -> str:
        return f"Document(rows={len(self.rows)})"

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def row_text(self, row: int) -> str:
        return self[row].text

    def row_tags(self, row: int) -> tuple[Tag, ...]:
        return self[row].tags

    def row_length(self, row: int) -> int:
        return len(self[row])

    def _check_row(self, row: int) -> int:
        if not isinstance(row, int) or not 0 <= row < len(self.rows):
            raise PreconditionViolation(
                f"Row index {row!r} out of range (row count {len(self.rows)})"
            )
        return row

    # --- whole-document operations ---
    def load_from_lines(self, lines: Iterable[str]) -> None:
        """Replace the document with `lines`, every character tagged BODY."""
        self.rows = [Row.from_text(_strip_line_break(line)) for line in lines]
        if not self.rows:
            self.rows.append(Row())
        logger.debug("Document loaded with %d rows.", len(self.rows))

    def to_lines(self) -> list[str]:
        return [row.text for row in self.rows]

    # --- structural edits ---
    def insert_char(self, row: int, col: int, ch: str) -> None:
        target = self[row]
        if not isinstance(ch, str) or len(ch) != 1 or ch in "\r\n":
            raise PreconditionViolation(
                f"insert_char expects one non-line-break character, got {ch!r}"
            )
        target.insert(target.clamp(col), ch)

    def delete_char(self, row: int, col: int) -> str:
        """Backspace at (row, col). Returns the removed character or ''.

        `col` is clamped like every column argument: past the end of the row
        it deletes the row's last character rather than doing nothing.
        """
        target = self[row]
        col = target.clamp(col)
        if col <= 0:
            return ""
        return target.delete(col - 1).char

    def split_row(self, row: int, col: int) -> int:
        """Split `row` at `col`; the right part becomes row + 1, whose index is returned."""
        target = self[row]
        tail = target.split(target.clamp(col))
        self.rows.insert(row + 1, tail)
        return row + 1

    def join_with_previous(self, row: int) -> int:
        """Append `row` onto `row - 1` and remove it. Returns the join column."""
        self._check_row(row)
        if row == 0:
            raise PreconditionViolation("Row 0 has no previous row to join with")
        previous = self.rows[row - 1]
        join_col = len(previous)
        previous.extend(self.rows.pop(row))
        return join_col

    # --- overlay ---
    def apply_row_tags(self, row: int, tags: Sequence[Tag]) -> None:
        self[row].retag(tags)

    def apply_overlay(self, overlay: Sequence[Sequence[Tag]]) -> None:
        if len(overlay) != len(self.rows):
            raise PreconditionViolation(
                f"Overlay has {len(overlay)} rows, document has {len(self.rows)}"
            )
        for row, tags in zip(self.rows, overlay):
            row.retag(tags)


@dataclass
class Cursor:
    """Caret position. `col` is kept inside ``[0, len(row)]`` by `clamp`."""

    row: int = 0
    col: int = 0

    def clamp(self, document: Document) -> None:
        self.row = max(0, min(self.row, len(document) - 1))
        self.col = document[self.row].clamp(self.col)
