# toyedit/core/Highlighter.py
"""toyedit.core.Highlighter
==========================

Single-pass character classifier for the toyedit overlay.

Every row is classified on its own, left to right, with the first matching
rule winning:

1. ``#`` starts a comment: it and every remaining character are COMMENT,
   and the scan of that row stops.
2. Whitespace is BODY.
3. A decimal digit is NUMBER.
4. A letter or ``_`` is VARIABLE.
5. Anything else is OPERATOR.

There are no multi-character tokens: ``count123`` is VARIABLE for the
letters and NUMBER for the digits, and the ``.`` in ``3.14`` is OPERATOR.
Rows carry no state across line boundaries, so the overlay of a row depends
on that row's text only.
"""

import logging
from typing import Iterable, Optional

from toyedit.core.Document import Document, Tag

logger = logging.getLogger("toyedit")

COMMENT_INTRODUCER = "#"
HIGHLIGHT_SCOPES = ("full", "rows")


def classify_char(ch: str) -> Tag:
    """Classify one character that is not a comment introducer."""
    if ch.isspace():
        return Tag.BODY
    if ch.isdecimal():
        return Tag.NUMBER
    if ch.isalpha() or ch == "_":
        return Tag.VARIABLE
    return Tag.OPERATOR


def classify_line(text: str) -> list[Tag]:
    """Return the tag of every character of `text`."""
    tags: list[Tag] = []
    for ch in text:
        if ch == COMMENT_INTRODUCER:
            tags.extend([Tag.COMMENT] * (len(text) - len(tags)))
            break
        tags.append(classify_char(ch))
    return tags


def compute_overlay(document: Document) -> list[list[Tag]]:
    """Pure function: the replacement overlay for every row of `document`."""
    return [classify_line(row.text) for row in document]


class Highlighter:
    """Applies the classifier to a document.

    `scope` selects what `refresh()` recomputes after an edit: ``"full"``
    rescans the whole document, ``"rows"`` only the rows an edit touched.
    """

    def __init__(self, scope: str = "full") -> None:
        if scope not in HIGHLIGHT_SCOPES:
            logger.warning(
                "Unknown highlight scope %r, falling back to 'full'.", scope
            )
            scope = "full"
        self.scope = scope

    def highlight(self, document: Document, rows: Optional[Iterable[int]] = None) -> None:
        """Replace the tags of `rows` (all rows when None) with fresh ones."""
        if rows is None:
            document.apply_overlay(compute_overlay(document))
            return
        for index in sorted(set(rows)):
            if 0 <= index < len(document):
                document.apply_row_tags(index, classify_line(document[index].text))

    def refresh(self, document: Document, touched_rows: Iterable[int]) -> None:
        """Rehighlight after an edit according to the configured scope."""
        if self.scope == "full":
            self.highlight(document)
        else:
            self.highlight(document, touched_rows)
