# toyedit/core/Toyedit.py
"""toyedit.core.Toyedit
======================

The edit loop controller.

`Toyedit` owns one `EditorState` (document, cursor, viewport, file name and
status) and wires it to its collaborators: `FileStore` for persistence,
`Highlighter` for the syntax overlay, `DrawScreen` for painting and
`KeyBinder` for input. Each key press runs the same synchronous pipeline:

    key -> action -> Document edit -> Highlighter -> Viewport -> DrawScreen

Every action method returns True when the screen needs to be redrawn.
"""

import curses
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from toyedit.core.Document import Cursor, Document, Tag
from toyedit.core.exceptions import ResourceWriteFailure
from toyedit.core.FileStore import FileStore
from toyedit.core.Highlighter import Highlighter
from toyedit.core.Viewport import Viewport
from toyedit.ui.DrawScreen import DrawScreen
from toyedit.ui.KeyBinder import KeyBinder
from toyedit.utils.utils import DEFAULT_CONFIG, hex_to_xterm

logger = logging.getLogger("toyedit")


@dataclass
class EditorState:
    """Everything that changes while a file is being edited."""

    document: Document = field(default_factory=Document)
    cursor: Cursor = field(default_factory=Cursor)
    viewport: Viewport = field(default_factory=Viewport)
    filename: Optional[str] = None
    encoding: str = "utf-8"
    modified: bool = False
    status_message: str = ""


## ==================== class Toyedit ====================
class Toyedit:
    """Terminal editor controller.

    Attributes:
        stdscr (curses.window): The main curses window.
        config (dict[str, Any]): Merged application configuration.
        state (EditorState): The editing session.
        colors (dict[str, int]): Curses attributes keyed by tag value and
            UI element, shared with DrawScreen.
        running (bool): Main loop flag; cleared by `exit_editor`.
    """

    # name -> (hex fg, hex bg or None, 8-colour fg, 8-colour bg, extra attribute)
    COLOR_DEFINITIONS: dict[str, tuple[str, Optional[str], str, Optional[str], str]] = {
        "header": ("#FFFFFF", "#1F4E99", "COLOR_WHITE", "COLOR_BLUE", "A_BOLD"),
        "footer": ("#FFFFFF", "#1F4E99", "COLOR_WHITE", "COLOR_BLUE", "A_NORMAL"),
        "separator": ("#8B949E", None, "COLOR_WHITE", None, "A_DIM"),
        "status_error": ("#FFFFFF", "#B62324", "COLOR_WHITE", "COLOR_RED", "A_BOLD"),
        Tag.BODY.value: ("#7EE787", None, "COLOR_GREEN", None, "A_NORMAL"),
        Tag.COMMENT.value: ("#58A6FF", None, "COLOR_BLUE", None, "A_NORMAL"),
        Tag.KEYWORD.value: ("#F2CC60", None, "COLOR_YELLOW", None, "A_NORMAL"),
        Tag.STRING.value: ("#FFFFFF", None, "COLOR_WHITE", None, "A_NORMAL"),
        Tag.NUMBER.value: ("#D2A8FF", None, "COLOR_MAGENTA", None, "A_NORMAL"),
        Tag.OPERATOR.value: ("#FF7B72", None, "COLOR_RED", None, "A_NORMAL"),
        Tag.VARIABLE.value: ("#FFFFFF", None, "COLOR_WHITE", None, "A_NORMAL"),
        Tag.ERROR.value: ("#FFFFFF", "#B62324", "COLOR_WHITE", "COLOR_RED", "A_NORMAL"),
    }

    def __init__(
        self,
        stdscr: "curses.window",
        config: dict[str, Any],
        filename: Optional[str] = None,
    ) -> None:
        self.stdscr = stdscr
        self.config: dict[str, Any] = config
        editor_config = config.get("editor", {})

        self.state = EditorState(encoding=editor_config.get("default_encoding", "utf-8"))
        self.running: bool = False
        self._force_full_redraw: bool = False
        self.last_window_size: tuple[int, int] = (0, 0)

        self._initialize_components()
        self._setup_environment()
        self.handle_resize()

        if filename:
            self.open_file(filename)
        logger.info("Toyedit initialized (file: %s).", filename)

    def _initialize_components(self) -> None:
        editor_config = self.config.get("editor", {})
        self.colors: dict[str, int] = {}
        self.init_colors()

        self.file_store = FileStore(editor_config.get("default_encoding", "utf-8"))
        self.highlighter = Highlighter(editor_config.get("highlight_scope", "full"))
        self.drawer = DrawScreen(self.stdscr, self.colors)

        # KeyBinder binds to the action methods, so it comes last.
        self.keybinder = KeyBinder(self)
        self.handle_input = self.keybinder.handle_input

    def _setup_environment(self) -> None:
        """Raw mode so Ctrl-S and Ctrl-Q reach the editor instead of the tty."""
        self.stdscr.keypad(True)
        try:
            curses.curs_set(1)
        except curses.error:
            logger.debug("Terminal cannot change cursor visibility.")
        curses.raw()
        curses.noecho()

    # --- convenience accessors ---
    @property
    def document(self) -> Document:
        return self.state.document

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    # --- colours ---
    def init_colors(self) -> None:
        """Initializes curses color pairs with graceful degradation."""
        self.colors.clear()

        if not curses.has_colors() or curses.COLORS < 8:
            logger.warning("Terminal has no or limited color support (< 8). Using monochrome attributes.")
            for name in self.COLOR_DEFINITIONS:
                self.colors[name] = curses.A_NORMAL
            self.colors.update({
                "header": curses.A_REVERSE,
                "footer": curses.A_REVERSE,
                "separator": curses.A_DIM,
                "status_error": curses.A_REVERSE | curses.A_BOLD,
                Tag.COMMENT.value: curses.A_DIM,
                Tag.KEYWORD.value: curses.A_BOLD,
                Tag.ERROR.value: curses.A_REVERSE,
            })
            return

        curses.start_color()
        try:
            curses.use_default_colors()
        except curses.error:
            logger.debug("use_default_colors() not supported by this terminal.")

        user_colors = self.config.get("colors", {})
        can_use_256_colors = curses.COLORS >= 256
        pair_id_counter = 1

        for name, (fg_hex, bg_hex, fg_8, bg_8, attr_name) in self.COLOR_DEFINITIONS.items():
            attr = getattr(curses, attr_name)
            if pair_id_counter >= curses.COLOR_PAIRS:
                logger.warning(f"Ran out of color pairs. Cannot initialize '{name}'.")
                self.colors[name] = attr
                continue

            if can_use_256_colors:
                fg = hex_to_xterm(str(user_colors.get(name, fg_hex)))
                bg = hex_to_xterm(str(user_colors.get(f"{name}_bg", bg_hex))) if bg_hex else -1
            else:
                fg = getattr(curses, fg_8)
                bg = getattr(curses, bg_8) if bg_8 else -1

            try:
                curses.init_pair(pair_id_counter, fg, bg)
                self.colors[name] = curses.color_pair(pair_id_counter) | attr
                pair_id_counter += 1
            except curses.error as e:
                logger.error(f"Failed to initialize curses pair for '{name}': {e}")
                self.colors[name] = attr

    # --- status ---
    def _set_status_message(self, message: str) -> None:
        message = str(message)
        if self.state.status_message != message:
            self.state.status_message = message
            logger.debug(f"Status message set to: '{message}'")

    def _clear_transient_status(self) -> bool:
        if not self.state.status_message:
            return False
        self.state.status_message = ""
        return True

    def _display_name(self) -> str:
        return os.path.basename(self.state.filename) if self.state.filename else "[No Name]"

    # --- files ---
    def open_file(self, path: str) -> bool:
        """Load `path` into a fresh document. A missing file starts empty."""
        lines = self.file_store.load(path)
        state = self.state
        state.document = Document.from_lines(lines)
        state.cursor = Cursor()
        state.viewport.reset()
        state.filename = path
        state.encoding = self.file_store.encoding
        state.modified = False
        self.highlighter.highlight(state.document)
        self._force_full_redraw = True

        if lines or os.path.isfile(path):
            self._set_status_message(f"Opened {self._display_name()} ({len(lines)} lines)")
        else:
            self._set_status_message(f"New file: {self._display_name()}")
        return True

    def save_file(self) -> bool:
        """Write the document back to its file; failures are reported, not raised."""
        state = self.state
        if not state.filename:
            self._set_status_message("Error saving: no file name")
            return True

        try:
            count = self.file_store.save(state.filename, state.document.to_lines(), state.encoding)
        except ResourceWriteFailure as e:
            logger.error("Save of '%s' failed: %s", state.filename, e)
            self._set_status_message(f"Error saving {self._display_name()}: {e.reason}")
            return True

        state.modified = False
        self._set_status_message(f"Saved {count} lines to {self._display_name()}")
        logger.info("Saved %d lines to '%s'", count, state.filename)
        return True

    # --- editing ---
    def _after_edit(self, touched_rows: Iterable[int]) -> None:
        self.highlighter.refresh(self.document, touched_rows)
        self.state.modified = True

    def insert_text(self, text: str) -> bool:
        """Insert `text` at the cursor; a newline splits the row."""
        if not text:
            return False

        row, col = self.cursor.row, self.cursor.col
        touched = {row}
        for ch in text:
            if ch == "\r":
                continue
            if ch == "\n":
                row = self.document.split_row(row, col)
                col = 0
                touched.add(row)
            else:
                self.document.insert_char(row, col, ch)
                col += 1

        self.cursor.row, self.cursor.col = row, col
        self._after_edit(touched)
        return True

    def handle_enter(self) -> bool:
        row = self.cursor.row
        new_row = self.document.split_row(row, self.cursor.col)
        self.cursor.row, self.cursor.col = new_row, 0
        self._after_edit((row, new_row))
        return True

    def handle_backspace(self) -> bool:
        """Delete left of the cursor, joining with the previous row at column 0."""
        row, col = self.cursor.row, self.cursor.col
        if col > 0:
            self.document.delete_char(row, col)
            self.cursor.col = col - 1
            self._after_edit((row,))
            return True

        if row > 0:
            join_col = self.document.join_with_previous(row)
            self.cursor.row, self.cursor.col = row - 1, join_col
            self._after_edit((row - 1,))
            return True

        logger.debug("handle_backspace: At beginning of file. No action.")
        return False

    def handle_delete(self) -> bool:
        """Delete under the cursor, or pull the next row up at end of row."""
        row, col = self.cursor.row, self.cursor.col
        if col < self.document.row_length(row):
            self.document.delete_char(row, col + 1)
        elif row < len(self.document) - 1:
            self.document.join_with_previous(row + 1)
        else:
            logger.debug("handle_delete: At end of file. No action.")
            return False

        self._after_edit((row,))
        return True

    def handle_tab(self) -> bool:
        tab_size = self.config.get("editor", {}).get("tab_size", 4)
        try:
            tab_size = int(tab_size)
        except (TypeError, ValueError):
            tab_size = DEFAULT_CONFIG["editor"]["tab_size"]
        if tab_size <= 0:
            logger.warning("handle_tab: tab_size %r inserts nothing.", tab_size)
            return False
        return self.insert_text(" " * tab_size)

    # --- navigation ---
    def _move_cursor(self, row: int, col: int) -> bool:
        cursor = self.cursor
        old = (cursor.row, cursor.col)
        cursor.row, cursor.col = row, col
        cursor.clamp(self.document)
        changed = old != (cursor.row, cursor.col)
        if changed:
            logger.debug("cursor (%d,%d) -> (%d,%d)", old[0], old[1], cursor.row, cursor.col)
        return self._clear_transient_status() or changed

    def handle_up(self) -> bool:
        row, col = self.cursor.row, self.cursor.col
        if row > 0:
            row -= 1
            col = min(col, self.document.row_length(row))
        return self._move_cursor(row, col)

    def handle_down(self) -> bool:
        row, col = self.cursor.row, self.cursor.col
        if row < len(self.document) - 1:
            row += 1
            col = min(col, self.document.row_length(row))
        return self._move_cursor(row, col)

    def handle_left(self) -> bool:
        row, col = self.cursor.row, self.cursor.col
        if col > 0:
            col -= 1
        elif row > 0:
            row -= 1
            col = self.document.row_length(row)
        return self._move_cursor(row, col)

    def handle_right(self) -> bool:
        row, col = self.cursor.row, self.cursor.col
        if col < self.document.row_length(row):
            col += 1
        elif row < len(self.document) - 1:
            row, col = row + 1, 0
        return self._move_cursor(row, col)

    def handle_home(self) -> bool:
        return self._move_cursor(self.cursor.row, 0)

    def handle_end(self) -> bool:
        return self._move_cursor(self.cursor.row, self.document.row_length(self.cursor.row))

    # --- window / lifecycle ---
    def handle_resize(self) -> bool:
        """Force a full redraw at the new terminal size."""
        new_height, new_width = self.stdscr.getmaxyx()
        self.last_window_size = (new_height, new_width)
        self._force_full_redraw = True
        self.cursor.clamp(self.document)
        logger.debug(f"Window resized to {new_width}x{new_height}.")
        return True

    def exit_editor(self) -> bool:
        """Signal the main loop to stop."""
        if self.state.modified:
            logger.warning("Exiting with unsaved changes to '%s'.", self.state.filename)
        self.running = False
        logger.info("Main loop stop signaled.")
        return False

    # --- rendering ---
    def _build_header(self) -> str:
        template = self.config.get("ui", {}).get(
            "header_template", DEFAULT_CONFIG["ui"]["header_template"]
        )
        filename = self.state.filename or "[No Name]"
        try:
            header = str(template).format(filename=filename)
        except (KeyError, IndexError, ValueError):
            logger.warning("Invalid ui.header_template %r, using the default.", template)
            header = DEFAULT_CONFIG["ui"]["header_template"].format(filename=filename)
        return f"{header}*" if self.state.modified else header

    def _build_footer(self) -> str:
        if self.state.status_message:
            return self.state.status_message
        return self.config.get("ui", {}).get("footer_text", DEFAULT_CONFIG["ui"]["footer_text"])

    def _cells_before_cursor(self) -> int:
        """Screen cells between the left edge of the body and the cursor."""
        state = self.state
        row_text = state.document.row_text(state.cursor.row)
        return sum(self.drawer.char_width(ch) for ch in row_text[state.viewport.scroll_col:state.cursor.col])

    def render(self) -> None:
        """Scroll to the cursor, project the frame and paint it."""
        state = self.state
        visible_rows, visible_cols = self.drawer.get_view_size()
        state.viewport.scroll_to(state.cursor.row, state.cursor.col, visible_rows, visible_cols)
        # scroll_to counts characters; wide glyphs may still push the cursor past the edge
        while (
            state.viewport.scroll_col < state.cursor.col
            and self._cells_before_cursor() >= max(1, visible_cols)
        ):
            state.viewport.scroll_col += 1
        frame = state.viewport.produce_frame(state.document, visible_rows, visible_cols)

        self.drawer.draw(frame, self._build_header(), self._build_footer())

        y, _ = state.viewport.screen_position(state.cursor.row, state.cursor.col)
        self.drawer.position_cursor(y, self._cells_before_cursor())
        self.drawer.update_display()

    # --- main loop ---
    def run(self) -> None:
        """The main event loop: read one key, apply it, repaint."""
        logger.info("Editor main loop started.")
        self.running = True
        self._force_full_redraw = True

        while self.running:
            try:
                self._render_screen(False)
                redraw_needed = self._process_events_and_input()
                if self.running:
                    self._render_screen(redraw_needed)
            except KeyboardInterrupt:
                logger.info("Main loop interrupted by KeyboardInterrupt.")
                self.exit_editor()
                break
            except Exception as e:
                logger.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                self.exit_editor()
                break

        logger.info("Editor main loop finished.")

    def _process_events_and_input(self) -> bool:
        key_input = self.keybinder.get_key_input()
        if key_input == curses.ERR:
            return False
        if key_input == curses.KEY_RESIZE:
            return self.handle_resize()
        return self.handle_input(key_input)

    def _render_screen(self, redraw_needed: bool) -> None:
        if not redraw_needed and not self._force_full_redraw:
            return
        self.render()
        self._force_full_redraw = False
