# tests/ui/test_keybinder.py
"""Unit tests for the `KeyBinder` class.
========================================

Covers keystring decoding, config overrides, dispatch of key codes to
editor actions, printable insertion and ESC-sequence parsing.

KeyBinder reads only key-code constants from curses, so the real module is
used; the window is a `MagicMock` whose `getch` replays scripted keys.
"""

import curses
import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

from toyedit.core.Toyedit import Toyedit
from toyedit.ui.KeyBinder import KeyBinder


def make_editor_stub(keybindings: dict[str, Any] | None = None) -> MagicMock:
    """Minimal editor: a config, a window and a status message."""
    editor = MagicMock()
    editor.config = {"keybindings": keybindings or {}}
    editor.state.status_message = ""
    return editor


class TestDecodeKeystring:
    @pytest.mark.parametrize(
        ("spec", "expected"),
        [
            ("ctrl+s", 19),
            ("CTRL+Q", 17),
            ("ctrl+a", 1),
            ("tab", 9),
            ("home", curses.KEY_HOME),
            ("del", curses.KEY_DC),
            ("x", ord("x")),
            (" space ", ord(" ")),
            (262, 262),
        ],
    )
    def test_decodes(self, spec: Any, expected: int) -> None:
        binder = KeyBinder(make_editor_stub())
        assert binder._decode_keystring(spec) == expected

    @pytest.mark.parametrize("spec", ["", "ctrl+home", "alt+x", "hyper", True, None, 1.5])
    def test_rejects(self, spec: Any) -> None:
        binder = KeyBinder(make_editor_stub())
        with pytest.raises(ValueError):
            binder._decode_keystring(spec)


class TestBindings:
    def test_defaults(self) -> None:
        binder = KeyBinder(make_editor_stub())
        assert binder.lookup("ctrl+s") == "save_file"
        assert binder.lookup("ctrl+q") == "quit"
        assert binder.lookup(curses.KEY_UP) == "handle_up"
        assert binder.lookup("ctrl+z") is None
        assert binder.lookup("not a key") is None

    def test_config_overrides_default(self) -> None:
        binder = KeyBinder(make_editor_stub({"save_file": "ctrl+w|ctrl+o"}))
        assert binder.keybindings["save_file"] == [23, 15]
        assert binder.lookup("ctrl+s") is None
        assert binder.lookup("ctrl+o") == "save_file"

    def test_empty_binding_disables_action(self) -> None:
        binder = KeyBinder(make_editor_stub({"tab": []}))
        assert "tab" not in binder.keybindings
        # Tab then falls through to printable handling, which ignores it.
        assert 9 not in binder.action_map

    def test_bad_items_are_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        binder = KeyBinder(make_editor_stub({"quit": ["meta+q", "ctrl+x"]}))
        assert binder.keybindings["quit"] == [24]
        assert "meta+q" in caplog.text

    def test_backspace_codes_always_bound(self, real_editor: Toyedit) -> None:
        action_map = real_editor.keybinder.action_map
        for code in (8, 127, curses.KEY_BACKSPACE):
            assert action_map[code] == real_editor.handle_backspace
        for code in (10, 13, curses.KEY_ENTER):
            assert action_map[code] == real_editor.handle_enter


class TestHandleInput:
    def test_bound_key_calls_action(self) -> None:
        editor = make_editor_stub()
        editor.save_file.return_value = True
        binder = KeyBinder(editor)
        assert binder.handle_input(19) is True
        editor.save_file.assert_called_once_with()

    def test_printable_key_inserts(self) -> None:
        editor = make_editor_stub()
        binder = KeyBinder(editor)
        binder.handle_input(ord("é"))
        editor.insert_text.assert_called_once_with("é")

    def test_unprintable_key_is_ignored(self) -> None:
        editor = make_editor_stub()
        binder = KeyBinder(editor)
        assert binder.handle_input(0x07) is False
        assert binder.handle_input(curses.KEY_F1) is False
        editor.insert_text.assert_not_called()

    def test_status_change_requests_redraw(self, real_editor: Toyedit) -> None:
        real_editor._set_status_message("Opened x")
        # Left at (0, 0) does not move but clears the status.
        assert real_editor.keybinder.handle_input(curses.KEY_LEFT) is True
        assert real_editor.state.status_message == ""

    def test_typing_into_editor(self, real_editor: Toyedit) -> None:
        for key in (ord("a"), ord("="), ord("1"), 10, ord("b"), 127):
            real_editor.keybinder.handle_input(key)
        assert real_editor.state.document.to_lines() == ["a=1", ""]


class TestGetKeyInput:
    """Reading keys and ESC sequences from the window."""

    def _binder(self, *keys: int) -> KeyBinder:
        editor = make_editor_stub()
        editor.stdscr.getch.side_effect = list(keys)
        return KeyBinder(editor)

    def test_plain_key(self) -> None:
        assert self._binder(ord("a")).get_key_input() == ord("a")

    def test_timeout_returns_err(self) -> None:
        assert self._binder(curses.ERR).get_key_input() == curses.ERR

    @pytest.mark.parametrize(
        ("seq", "expected"),
        [
            ("[A", curses.KEY_UP),
            ("OB", curses.KEY_DOWN),
            ("[H", curses.KEY_HOME),
            ("[4~", KeyBinder.NAMED_KEYS["end"]),
            ("[3~", curses.KEY_DC),
        ],
    )
    def test_escape_sequences(self, seq: str, expected: int) -> None:
        binder = self._binder(27, *(ord(c) for c in seq), curses.ERR)
        assert binder.get_key_input() == expected
        binder.stdscr.nodelay.assert_any_call(True)
        binder.stdscr.nodelay.assert_called_with(False)

    @pytest.mark.parametrize("char", ["é", "漢", "😀"])
    def test_utf8_bytes_become_one_character(self, char: str) -> None:
        binder = self._binder(*char.encode("utf-8"))
        assert binder.get_key_input() == char

    def test_truncated_utf8_is_replaced(self) -> None:
        assert self._binder(0xC3, curses.ERR).get_key_input() == "�"

    def test_byte_after_broken_utf8_is_kept(self) -> None:
        """A lone Latin-1 byte must not swallow the key typed after it."""
        binder = self._binder(0xE9, ord("a"), ord("b"))
        assert binder.get_key_input() == "�"
        assert binder.get_key_input() == ord("a")
        assert binder.get_key_input() == ord("b")

    def test_escape_after_broken_utf8_is_kept(self) -> None:
        binder = self._binder(0xC3, 27, ord("["), ord("A"), curses.ERR)
        assert binder.get_key_input() == "�"
        assert binder.get_key_input() == curses.KEY_UP

    def test_broken_utf8_then_letter_reaches_editor(self, real_editor: Toyedit) -> None:
        real_editor.stdscr.getch.side_effect = [0xC3, ord("a")]
        keybinder = real_editor.keybinder
        keybinder.handle_input(keybinder.get_key_input())
        keybinder.handle_input(keybinder.get_key_input())
        assert real_editor.state.document.to_lines() == ["�a"]

    def test_lone_escape(self) -> None:
        assert self._binder(27, curses.ERR).get_key_input() == 27

    def test_unknown_sequence(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="toyedit"):
            assert self._binder(27, ord("["), ord("Z"), ord("Z"), curses.ERR).get_key_input() == 27
        assert "unknown escape sequence" in caplog.text

    def test_curses_error_returns_err(self) -> None:
        editor = make_editor_stub()
        editor.stdscr.getch.side_effect = curses.error("no input")
        assert KeyBinder(editor).get_key_input() == curses.ERR
