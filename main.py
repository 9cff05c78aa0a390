#!/usr/bin/env python3
# /toyedit/main.py
"""
Toyedit Main Entry Point
========================

This script is the primary entry point for launching the toyedit editor. It performs:
1) Environment Loading: reads ~/.config/toyedit/.env early (TOYEDIT_KEYTRACE and friends).
2) Argument Parsing: exactly one path is required; a missing path is a usage
   error (exit status 2) raised before any configuration or terminal setup.
3) Configuration & Logging: loads config and initializes logging.
4) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
5) Application Run: instantiates Toyedit on the given file and starts its main loop.
"""

from __future__ import annotations

import argparse
import curses
import locale
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
try:
    load_dotenv(dotenv_path=Path.home() / ".config" / "toyedit" / ".env")
except (OSError, RuntimeError):
    # No usable home directory; the environment stays as inherited.
    pass

# --- Step 1b: Set up the Python Path for source checkouts ---
project_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(project_root) and project_root not in sys.path:
    sys.path.insert(0, project_root)

logger = logging.getLogger("toyedit")


# --- Step 2: Command line ---
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toyedit",
        description="A tiny terminal text editor with character-class highlighting.",
    )
    parser.add_argument("filename", help="file to edit (created on first save if missing)")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse the command line. Exits with status 2 when the file name is missing."""
    return build_parser().parse_args(argv)


# --- Step 4: Curses Application Runner ---
def main_app_runner(stdscr: curses.window, config: dict[str, Any], file_to_open: str) -> None:
    """
    Target for `curses.wrapper`. Builds the editor and runs its main loop.

    Args:
        stdscr: Curses standard screen window provided by wrapper.
        config: Application configuration dict.
        file_to_open: CLI path (may or may not exist on disk).
    """
    # Keep a lone ESC from stalling input.
    try:
        curses.set_escdelay(25)
    except (AttributeError, curses.error):
        os.environ.setdefault("ESCDELAY", "25")

    # Imported late so logging is configured before the core modules log anything.
    from toyedit.core.Toyedit import Toyedit

    editor = Toyedit(stdscr, config=config, filename=file_to_open)

    # Ctrl+Z would suspend the full-screen editor mid-frame.
    if hasattr(signal, "SIGTSTP"):
        try:
            signal.signal(signal.SIGTSTP, signal.SIG_IGN)
        except (OSError, ValueError):
            pass

    editor.run()


def start(argv: Optional[Sequence[str]] = None) -> None:
    """
    Parses arguments, sets up config, logging and locale, and runs the
    curses application via wrapper.
    """
    args = parse_args(argv)

    # --- Step 3: Configuration and logging ---
    try:
        from toyedit.utils.logging_config import setup_logging
        from toyedit.utils.utils import load_config

        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Toyedit starting up on '%s'...", args.filename)

    # Locale is important for proper character width/encoding behavior in curses.
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    file_to_open = str(Path(args.filename).expanduser())

    try:
        curses.wrapper(main_app_runner, config, file_to_open)
        logger.info("Toyedit shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
