# tests/conftest.py
"""Pytest configuration with shared fixtures for the toyedit tests.

The `curses` module is replaced inside the modules that paint or set up the
terminal (`toyedit.core.Toyedit`, `toyedit.ui.DrawScreen`) so the editor can
be built and driven without a real terminal. `toyedit.ui.KeyBinder` keeps the
real module: it only reads key-code constants, which exist without `initscr()`.
"""

from __future__ import annotations

import copy
import curses as real_curses
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest

from toyedit.core.Document import Document
from toyedit.core.Toyedit import Toyedit
from toyedit.utils.utils import DEFAULT_CONFIG, deep_merge


class CursesError(Exception):
    """Minimal replacement for `curses.error` used in tests."""


def make_curses_mock() -> MagicMock:
    """Build a `curses` stand-in with real integer constants."""
    curses_mock = MagicMock()
    curses_mock.error = CursesError
    constants = {
        "A_NORMAL": 0,
        "A_BOLD": 1 << 1,
        "A_DIM": 1 << 2,
        "A_REVERSE": 1 << 3,
        "ACS_HLINE": ord("-"),
        "COLORS": 256,
        "COLOR_PAIRS": 256,
        "COLOR_BLACK": 0,
        "COLOR_RED": 1,
        "COLOR_GREEN": 2,
        "COLOR_YELLOW": 3,
        "COLOR_BLUE": 4,
        "COLOR_MAGENTA": 5,
        "COLOR_CYAN": 6,
        "COLOR_WHITE": 7,
        "ERR": -1,
        "KEY_RESIZE": real_curses.KEY_RESIZE,
    }
    for name, value in constants.items():
        setattr(curses_mock, name, value)
    curses_mock.has_colors.return_value = True
    # Identity pairs shifted past the attribute bits keep attributes distinguishable.
    curses_mock.color_pair.side_effect = lambda n: n << 8
    return curses_mock


# --- Automatic mocking of the curses module ---
@pytest.fixture(autouse=True)
def mock_curses() -> Generator[MagicMock, None, None]:
    """Patch `curses` where toyedit touches the terminal.

    Yields:
        MagicMock: The shared curses stand-in, for assertions on calls.
    """
    curses_mock = make_curses_mock()
    with (
        patch("toyedit.core.Toyedit.curses", curses_mock),
        patch("toyedit.ui.DrawScreen.curses", curses_mock),
    ):
        yield curses_mock


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Provide the default configuration with a couple of test overrides.

    Returns:
        dict[str, Any]: Editor configuration dictionary.
    """
    return deep_merge(copy.deepcopy(DEFAULT_CONFIG), {"editor": {"tab_size": 4}})


@pytest.fixture
def real_editor(mock_stdscr: MagicMock, mock_config: dict[str, Any]) -> Toyedit:
    """Create a real `Toyedit` with a mocked terminal and no file.

    Returns:
        Toyedit: The controller with an empty single-row document.
    """
    return Toyedit(mock_stdscr, mock_config)


@pytest.fixture
def sample_text() -> list[str]:
    """Provide a sample snippet as a list of lines.

    Returns:
        list[str]: Lines for use in tests.
    """
    return [
        "count = 10 # start",
        "while count > 0:",
        "    count -= 1",
        "",
    ]


@pytest.fixture
def editor_with_text(real_editor: Toyedit, sample_text: list[str]) -> Toyedit:
    """Provide a `Toyedit` preloaded with the sample text and highlighted.

    Returns:
        Toyedit: The editor with `sample_text` in its document.
    """
    real_editor.state.document = Document.from_lines(sample_text)
    real_editor.highlighter.highlight(real_editor.state.document)
    real_editor.state.filename = "sample.txt"
    return real_editor


@pytest.fixture
def sample_file(tmp_path: Path, sample_text: list[str]) -> Path:
    """Write the sample text to a file in a temporary directory.

    Returns:
        Path: Path to the created file.
    """
    path = tmp_path / "sample.txt"
    path.write_text("\n".join(sample_text) + "\n", encoding="utf-8")
    return path
