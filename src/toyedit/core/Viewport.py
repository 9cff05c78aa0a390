# toyedit/core/Viewport.py
"""toyedit.core.Viewport
=======================

Scroll anchor and visible-window projection.

`Viewport.scroll_to` moves the top-left anchor by the smallest amount that
keeps the cursor inside a window of `visible_rows` x `visible_cols`; when the
cursor is already visible the anchor does not move. `produce_frame` then cuts
the matching slice out of the document, one `FrameRow` per screen row, ready
to be painted by the renderer.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from toyedit.core.Document import Document, Tag

logger = logging.getLogger("toyedit")


class FrameRow(NamedTuple):
    """One screen row of a frame: clipped text and its tags."""

    text: str
    tags: tuple[Tag, ...]

    def runs(self) -> list[tuple[str, Tag]]:
        """Group consecutive characters sharing a tag into (text, tag) runs."""
        runs: list[tuple[str, Tag]] = []
        for ch, tag in zip(self.text, self.tags):
            if runs and runs[-1][1] is tag:
                runs[-1] = (runs[-1][0] + ch, tag)
            else:
                runs.append((ch, tag))
        return runs


BLANK_ROW = FrameRow("", ())


def _scroll_axis(position: int, anchor: int, extent: int) -> int:
    if position < anchor:
        return position
    if position >= anchor + extent:
        return position - extent + 1
    return anchor


@dataclass
class Viewport:
    """Top-left anchor of the visible window into a document."""

    scroll_line: int = 0
    scroll_col: int = 0

    def reset(self) -> None:
        self.scroll_line = 0
        self.scroll_col = 0

    def scroll_to(self, cy: int, cx: int, visible_rows: int, visible_cols: int) -> bool:
        """Bring (cy, cx) into view. Returns True if the anchor moved."""
        visible_rows = max(1, visible_rows)
        visible_cols = max(1, visible_cols)
        old = (self.scroll_line, self.scroll_col)

        self.scroll_line = max(0, _scroll_axis(cy, self.scroll_line, visible_rows))
        self.scroll_col = max(0, _scroll_axis(cx, self.scroll_col, visible_cols))

        moved = old != (self.scroll_line, self.scroll_col)
        if moved:
            logger.debug(
                "Viewport scrolled (%d,%d) -> (%d,%d) for cursor (%d,%d)",
                old[0], old[1], self.scroll_line, self.scroll_col, cy, cx,
            )
        return moved

    def produce_frame(
        self, document: Document, visible_rows: int, visible_cols: int
    ) -> list[FrameRow]:
        """Project the visible slice of `document` into `visible_rows` frame rows."""
        visible_cols = max(0, visible_cols)
        stop = self.scroll_col + visible_cols
        frame: list[FrameRow] = []
        for screen_row in range(max(0, visible_rows)):
            index = self.scroll_line + screen_row
            if index >= len(document):
                frame.append(BLANK_ROW)
                continue
            cells = document[index].cells(self.scroll_col, stop)
            frame.append(
                FrameRow(
                    "".join(cell.char for cell in cells),
                    tuple(cell.tag for cell in cells),
                )
            )
        return frame

    def screen_position(self, cy: int, cx: int) -> tuple[int, int]:
        """Cursor position relative to the top-left of the body window."""
        return cy - self.scroll_line, cx - self.scroll_col
