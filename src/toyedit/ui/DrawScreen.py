# toyedit/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen paints a prepared frame onto the curses screen.

Screen layout, top to bottom:

- row 0: header bar (file name),
- rows 1 .. height-3: the body, one `FrameRow` per screen row, coloured per tag,
- row height-2: a horizontal separator line,
- row height-1: footer bar (status message or key help).

DrawScreen owns no editor state. It is handed a frame, a header and a footer
string on every call, so it can be driven (and tested) without a Toyedit
instance. All curses errors raised while painting are caught and logged.
"""

import curses
import logging
from typing import TYPE_CHECKING, Sequence

from wcwidth import wcwidth

if TYPE_CHECKING:
    from toyedit.core.Document import Tag
    from toyedit.core.Viewport import FrameRow

logger = logging.getLogger("toyedit")

# header, separator and footer
CHROME_ROWS = 3


## ================= class DrawScreen ==============================
class DrawScreen:
    """Renders frames produced by the Viewport.

    Attributes:
        MIN_WINDOW_WIDTH (int): Narrowest terminal the layout is drawn in.
        MIN_WINDOW_HEIGHT (int): Lowest terminal the layout is drawn in
            (header, one body row, separator, footer).
        stdscr (curses.window): The main curses window.
        colors (dict[str, int]): Curses attributes keyed by tag value
            ("body", "comment", ...) and by UI element ("header", "footer",
            "separator", "status_error").
    """

    MIN_WINDOW_WIDTH = 20
    MIN_WINDOW_HEIGHT = CHROME_ROWS + 1

    def __init__(self, stdscr: "curses.window", colors: dict[str, int]) -> None:
        self.stdscr = stdscr
        self.colors = colors

    # --- geometry ---
    def get_view_size(self) -> tuple[int, int]:
        """Return (visible_rows, visible_cols) of the body area."""
        height, width = self.stdscr.getmaxyx()
        return max(0, height - CHROME_ROWS), max(0, width)

    # --- string helpers ---
    @staticmethod
    def char_width(ch: str) -> int:
        w = wcwidth(ch)
        return 1 if w < 0 else w

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`.

        Wide Unicode characters (e.g. CJK) are accounted for with
        :pyfunc:`wcwidth.wcwidth`; non-printable characters count as one cell.
        """
        result: list[str] = []
        consumed = 0

        for ch in s:
            w = self.char_width(ch)
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w

        return "".join(result)

    @staticmethod
    def _displayable(ch: str) -> str:
        # One screen cell per control character keeps columns aligned with the cursor.
        if ch == "\t":
            return " "
        if wcwidth(ch) < 0:
            return "?"
        return ch

    def _attr_for(self, tag: "Tag") -> int:
        return self.colors.get(tag.value, self.colors.get("body", curses.A_NORMAL))

    # --- painting ---
    def draw(self, frame: Sequence["FrameRow"], header_text: str, footer_text: str) -> None:
        """Paint a complete screen: header, body, separator and footer."""
        try:
            height, width = self.stdscr.getmaxyx()

            if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
                self._show_small_window_error(height, width)
                return

            self.stdscr.erase()
            self._draw_bar(0, header_text, self.colors.get("header", curses.A_REVERSE), width)

            body_rows = height - CHROME_ROWS
            for screen_row, frame_row in enumerate(frame[:body_rows]):
                self._draw_frame_row(1 + screen_row, frame_row, width)

            try:
                separator_attr = self.colors.get("separator", curses.A_DIM)
                self.stdscr.hline(height - 2, 0, curses.ACS_HLINE | separator_attr, width)
            except curses.error:
                pass

            footer_attr = self.colors.get("footer", curses.A_REVERSE)
            if footer_text.lower().startswith("error"):
                footer_attr = self.colors.get("status_error", footer_attr)
            self._draw_bar(height - 1, footer_text, footer_attr, width)

            self.stdscr.noutrefresh()

        except curses.error as e:
            logger.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)

    def _draw_bar(self, y: int, text: str, attr: int, width: int) -> None:
        """Fill row `y` with `text` padded to the full width."""
        # The bottom-right cell cannot be written without scrolling the window.
        line = self.truncate_string(text, width - 1)
        try:
            self.stdscr.addstr(y, 0, line, attr)
            self.stdscr.chgat(y, 0, -1, attr)
        except curses.error as e:
            logger.debug("Curses error drawing bar at row %d: %s", y, e)

    def _draw_frame_row(self, y: int, frame_row: "FrameRow", width: int) -> None:
        x = 0
        for text, tag in frame_row.runs():
            attr = self._attr_for(tag)
            chunk = "".join(self._displayable(ch) for ch in text)
            chunk = self.truncate_string(chunk, width - x)
            if not chunk:
                break
            try:
                self.stdscr.addstr(y, x, chunk, attr)
            except curses.error as e:
                logger.debug("addstr failed at (%d,%d): %s", y, x, e)
                break
            x += sum(self.char_width(ch) for ch in chunk)
            if x >= width:
                break

    def _show_small_window_error(self, height: int, width: int) -> None:
        """Displays a message that the window is too small."""
        msg = (
            f"Window too small ({width}x{height}). "
            f"Minimum is {self.MIN_WINDOW_WIDTH}x{self.MIN_WINDOW_HEIGHT}."
        )
        try:
            self.stdscr.clear()
            start_col = max(0, (width - len(msg)) // 2)
            self.stdscr.addstr(height // 2, start_col, self.truncate_string(msg, max(0, width - 1)))
            self.stdscr.noutrefresh()
        except curses.error:
            pass

    def position_cursor(self, y: int, x: int) -> None:
        """Place the hardware cursor at body position (y, x).

        `y` and `x` are relative to the top-left of the body area; they are
        clamped into it so a stale position can never land on the header.
        """
        height, width = self.stdscr.getmaxyx()
        if height < self.MIN_WINDOW_HEIGHT or width < self.MIN_WINDOW_WIDTH:
            return

        body_rows = height - CHROME_ROWS
        screen_y = 1 + max(0, min(y, body_rows - 1))
        screen_x = max(0, min(x, width - 1))
        try:
            logger.debug("Positioning cursor: screen_y=%d, screen_x=%d", screen_y, screen_x)
            self.stdscr.move(screen_y, screen_x)
        except curses.error as e:
            logger.warning(f"Curses error positioning cursor at ({screen_y}, {screen_x}): {e}")

    def update_display(self) -> None:
        """Flush all pending drawing to the terminal in one update."""
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logger.error(f"Curses doupdate error: {e}")
