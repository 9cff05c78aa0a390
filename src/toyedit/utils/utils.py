# toyedit/utils/utils.py
"""
toyedit.utils.utils.py
======================

Configuration and colour helpers for the toyedit editor.

Key functionalities include:
- Automatic User Configuration: creates `~/.config/toyedit/config.toml` and a
  `.env` template on first run.
- Layered Configuration Loading: starts from the embedded `DEFAULT_CONFIG` and
  recursively merges the user's `config.toml` on top of it.
- Helper Utilities: deep-merging dictionaries and hex to xterm-256 colour
  conversion.

The editor can always start: a missing or broken user config only costs the
user their overrides.
"""

import copy
import logging
import shutil
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger("toyedit")

# --- Constants ---
WHITE_FG_IDX = 255

CONFIG_DIR_NAME = "toyedit"

ENV_TEMPLATE = """# Environment overrides for toyedit.
# Set to 1 to trace raw key codes into keytrace.log.
TOYEDIT_KEYTRACE=0
"""

# Mirrors config.toml at the project root; used when the user file is absent.
DEFAULT_CONFIG: Dict[str, Any] = {
    "colors": {
        "header": "#FFFFFF", "header_bg": "#1F4E99",
        "footer": "#FFFFFF", "footer_bg": "#1F4E99",
        "separator": "#8B949E",
        "status_error": "#FFFFFF", "status_error_bg": "#B62324",
        "body": "#7EE787", "comment": "#58A6FF", "keyword": "#F2CC60",
        "string": "#FFFFFF", "number": "#D2A8FF", "operator": "#FF7B72",
        "variable": "#FFFFFF", "error": "#FFFFFF", "error_bg": "#B62324",
    },
    "editor": {
        "tab_size": 4, "highlight_scope": "full", "default_encoding": "utf-8",
    },
    "ui": {
        "header_template": " File: {filename}",
        "footer_text": " Toy Editor  -  Ctrl-Q to quit  -  Ctrl-S to save",
    },
    "keybindings": {
        "save_file": "ctrl+s", "quit": "ctrl+q", "delete": "del",
        "tab": "tab", "handle_home": "home", "handle_end": "end",
        "handle_backspace": "backspace",
        "handle_up": ["up"], "handle_down": ["down"],
        "handle_left": ["left"], "handle_right": ["right"],
    },
    "logging": {
        "file": "toyedit.log", "file_level": "DEBUG",
        "console_level": "WARNING", "log_to_console": False,
        "separate_error_log": False,
    },
}


# --- Helper Functions ---

def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    return Path(__file__).resolve().parents[3]


def get_user_config_dir() -> Path:
    return Path.home() / ".config" / CONFIG_DIR_NAME


def ensure_user_config_exists() -> None:
    """Checks for user config files in `~/.config/toyedit` and creates them if missing."""
    try:
        config_dir = get_user_config_dir()
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except OSError as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config() -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists()

    user_config_path = get_user_config_dir() / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except (toml.TomlDecodeError, OSError) as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8: return 16
        if r > 248: return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )
