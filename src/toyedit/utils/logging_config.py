# toyedit/utils/logging_config.py
"""toyedit.utils.logging_config
==============================

Logging setup for the toyedit editor.

Features:
    - Rotating file logging for application events (``toyedit.log`` by default).
    - Optional console logging to stderr with configurable log level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the
      ``TOYEDIT_KEYTRACE`` environment variable.
    - Falls back to the system temp directory when the log directory cannot
      be created.
    - Safe reconfiguration: clears existing handlers on every call.

Globals:
    logger: Main application logger ("toyedit").
    KEY_LOGGER: Logger for raw key-press trace events ("toyedit.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("toyedit")
KEY_LOGGER = logging.getLogger("toyedit.keyevents")

KEYTRACE_ENV_VAR = "TOYEDIT_KEYTRACE"
KEYTRACE_FILENAME = "keytrace.log"
ERROR_LOG_FILENAME = "error.log"


def _ensure_log_dir(filename: str) -> str:
    """Create the parent directory of `filename`, or return a temp-dir path."""
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            filename = os.path.join(tempfile.gettempdir(), os.path.basename(filename) or "toyedit.log")
            print(f"Logging to temporary file: '{filename}'", file=sys.stderr)
    return filename


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler: rotating ``logging.file`` (default ``toyedit.log``)
       capturing everything from ``file_level`` (default DEBUG) upward.
    2. Console handler: optional stderr output at ``console_level``
       (default WARNING). Off by default, since curses owns the terminal.
    3. Error-file handler: optional rotating error.log with ERROR and
       CRITICAL events only.
    4. Key-event handler: rotating keytrace.log on the
       ``toyedit.keyevents`` logger, enabled when ``TOYEDIT_KEYTRACE`` is
       ``1/true/yes``.

    Existing handlers on the root logger are cleared first so repeated
    calls (e.g. in unit tests) do not duplicate records.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` section is consulted.

    Notes:
        Never raises; I/O or permission errors are reported to stderr and
        logging continues with a best-effort configuration.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_filename = _ensure_log_dir(logging_config.get("file", "toyedit.log") or "toyedit.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    )
    file_handler = None
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_filename, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)
    except Exception as e_fh:
        print(
            f"Error setting up file logger for '{log_filename}': {e_fh}. File logging may be impaired.",
            file=sys.stderr,
        )

    # Console Handler
    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s")
        )
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    # Optional Separate Error Log File
    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        try:
            error_file_handler = logging.handlers.RotatingFileHandler(
                _ensure_log_dir(ERROR_LOG_FILENAME),
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)
        except Exception as e_efh:
            print(
                f"Error setting up separate error log '{ERROR_LOG_FILENAME}': {e_efh}.",
                file=sys.stderr,
            )

    root_logger = logging.getLogger()
    root_logger.handlers = []

    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)

    root_logger.setLevel(log_file_level)

    # Key Event Logger
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []

    if os.environ.get(KEYTRACE_ENV_VAR, "").lower() in {"1", "true", "yes"}:
        try:
            key_trace_handler = logging.handlers.RotatingFileHandler(
                _ensure_log_dir(KEYTRACE_FILENAME),
                maxBytes=1 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(key_trace_handler)
            KEY_LOGGER.disabled = False
            logging.info("Key event tracing enabled, logging to '%s'.", KEYTRACE_FILENAME)
        except Exception as e_keytrace:
            logging.error(f"Failed to set up key trace logging: {e_keytrace}", exc_info=True)
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(
            f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}."
        )
    if console_handler:
        logging.info(
            f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}."
        )
    if error_file_handler:
        logging.info("Error logging to '%s' at level: ERROR.", ERROR_LOG_FILENAME)
