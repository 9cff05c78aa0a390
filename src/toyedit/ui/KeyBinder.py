# toyedit/ui/KeyBinder.py
"""KeyBinder.py
==================
Translates key presses into toyedit actions.

Key Features:
- Loads keybindings from the ``[keybindings]`` config section on top of
  built-in defaults; a binding may be a key string ("ctrl+s"), an integer
  key code, a list of either, or a "|"-separated string.
- Parses ESC-prefixed CSI/SS3 sequences into logical key names so arrow and
  Home/End keys work on terminals that do not deliver curses key codes.
- Treats any other printable character as text to insert.
- Traces every raw key code to the ``toyedit.keyevents`` logger.

One call to `handle_input` dispatches exactly one editor action.
"""

import curses
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from wcwidth import wcswidth

from toyedit.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from toyedit.core.Toyedit import Toyedit

logger = logging.getLogger("toyedit")


def _action_name(action: Callable[..., Any]) -> str:
    return getattr(action, "__name__", repr(action))


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Maps key codes to `Toyedit` action methods.

    Attributes:
        editor (Toyedit): The controller whose actions are dispatched.
        config (dict): Editor configuration.
        stdscr: The curses window keys are read from.
        keybindings (dict[str, list[int | str]]): Action name to decoded key codes.
        action_map (dict[int | str, Callable]): Decoded key code to bound method.
    """
    # Keys do NOT include the leading ESC, get_key_input() reads after it.
    ESCAPE_SEQUENCE_MAP: dict[str, str] = {
        # Arrows (CSI and SS3)
        "[A": "up", "[B": "down", "[C": "right", "[D": "left",
        "OA": "up", "OB": "down", "OC": "right", "OD": "left",

        # Home/End (CSI/SS3 and tilde variants)
        "[H": "home", "[F": "end", "OH": "home", "OF": "end",
        "[1~": "home", "[4~": "end", "[7~": "home", "[8~": "end",

        "[3~": "delete",
    }

    # Named keys understood in keybinding strings.
    NAMED_KEYS: dict[str, int] = {
        "left": curses.KEY_LEFT,
        "right": curses.KEY_RIGHT,
        "up": curses.KEY_UP,
        "down": curses.KEY_DOWN,
        "home": curses.KEY_HOME,
        "end": getattr(curses, "KEY_END", curses.KEY_LL),
        "delete": curses.KEY_DC,
        "del": curses.KEY_DC,
        "backspace": curses.KEY_BACKSPACE,
        "tab": 9,
        "enter": curses.KEY_ENTER,
        "return": curses.KEY_ENTER,
        "space": ord(" "),
        "esc": 27,
        "escape": 27,
    }

    def __init__(self, editor: "Toyedit") -> None:
        logger.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.stdscr = editor.stdscr
        # bytes read ahead while assembling a UTF-8 character
        self._pending_keys: list[int] = []

        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()

    def _handle_printable_character(self, key: str | int) -> bool:
        """Handles insertion of a printable character into the buffer."""
        char_to_insert = ""
        if isinstance(key, str) and len(key) == 1:
            if wcswidth(key) > 0:
                char_to_insert = key
        elif isinstance(key, int) and 32 <= key < 0x110000:
            # Function keys and other curses key codes are not text.
            if curses.KEY_MIN <= key <= curses.KEY_MAX:
                return False
            try:
                char_to_insert = chr(key)
            except ValueError:
                logger.warning(f"Invalid ordinal for chr(): {key}. Cannot convert.")
                return False
            if wcswidth(char_to_insert) <= 0:
                char_to_insert = ""

        if char_to_insert:
            logger.debug("handle_input: inserting printable character %r", char_to_insert)
            return self.editor.insert_text(char_to_insert)

        return False

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: str | int) -> bool:
        """Dispatch one key event to its editor action.

        Args:
            key (str | int): A curses key code, a logical key string, or a
                printable character.

        Returns:
            bool: True if the input caused a visual change, False otherwise.
        """
        logger.debug("handle_input: Received key event %r (type: %s)", key, type(key).__name__)
        original_status = self.editor.state.status_message

        if key in self.action_map:
            action = self.action_map[key]
            logger.debug("handle_input: Key %r calls %s", key, _action_name(action))
            changed = bool(action())
        elif self._handle_printable_character(key):
            changed = True
        else:
            logger.debug("Unhandled input: %r (type: %s)", key, type(key).__name__)
            changed = False

        return changed or self.editor.state.status_message != original_status

    def _load_keybindings(self) -> dict[str, list[int | str]]:
        """Return action name to key codes, defaults overridden by config."""
        default_keybindings: dict[str, list[int | str]] = {
            "save_file": ["ctrl+s", 19],
            "quit": ["ctrl+q", 17],
            "delete": ["del", curses.KEY_DC],
            "tab": ["tab", 9],
            "handle_home": ["home", curses.KEY_HOME, 262],
            "handle_end": ["end", getattr(curses, "KEY_END", curses.KEY_LL), 360],
            "handle_backspace": ["backspace", curses.KEY_BACKSPACE],
            "handle_up": ["up", curses.KEY_UP],
            "handle_down": ["down", curses.KEY_DOWN],
            "handle_left": ["left", curses.KEY_LEFT],
            "handle_right": ["right", curses.KEY_RIGHT],
        }

        user_keybindings_config: dict[str, object] = self.config.get("keybindings", {})
        parsed_keybindings: dict[str, list[int | str]] = {}

        for action, default_value_spec in default_keybindings.items():
            key_value_spec: object = user_keybindings_config.get(action, default_value_spec)

            if not key_value_spec:
                logger.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            specs_to_process: list[Any]
            if isinstance(key_value_spec, list):
                specs_to_process = key_value_spec
            elif isinstance(key_value_spec, str) and "|" in key_value_spec:
                specs_to_process = [s.strip() for s in key_value_spec.split("|")]
            else:
                specs_to_process = [key_value_spec]

            key_codes_for_action: list[int | str] = []
            for key_spec_item in specs_to_process:
                try:
                    key_code = self._decode_keystring(key_spec_item)
                except ValueError as e:
                    logger.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This binding will be ignored.",
                        key_spec_item, action, e,
                    )
                    continue
                if key_code not in key_codes_for_action:
                    key_codes_for_action.append(key_code)

            if key_codes_for_action:
                parsed_keybindings[action] = key_codes_for_action
            else:
                logger.warning("No valid key codes found for action %r. It will not be bound.", action)

        logger.debug("Loaded keybindings: %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int | str:
        """Decode a key specification ("ctrl+s", "home", "x", 19) into a key code.

        Raises:
            ValueError: If the key string is empty, unknown or carries an
                unsupported modifier.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (str, int)):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        if s in self.NAMED_KEYS:
            return self.NAMED_KEYS[s]

        parts = s.split("+")
        base_key_str = parts[-1].strip()
        modifiers = {p.strip() for p in parts[:-1]}

        if base_key_str in self.NAMED_KEYS:
            base_code = self.NAMED_KEYS[base_key_str]
        elif len(base_key_str) == 1:
            base_code = ord(base_key_str)
        else:
            raise ValueError(f"Unknown base key '{base_key_str}' in '{key_input}'")

        if "ctrl" in modifiers:
            modifiers.remove("ctrl")
            if len(base_key_str) == 1 and "a" <= base_key_str <= "z":
                base_code = ord(base_key_str) - ord("a") + 1
            else:
                raise ValueError(f"Unsupported ctrl combination '{key_input}'")

        if modifiers:
            raise ValueError(f"Unknown or unhandled modifiers {sorted(modifiers)} in '{key_input}'")

        return base_code

    def _setup_action_map(self) -> dict[int | str, Callable[[], bool]]:
        """Build the key code to action method mapping."""
        action_to_method_map: dict[str, Callable[[], bool]] = {
            "save_file": self.editor.save_file,
            "quit": self.editor.exit_editor,
            "delete": self.editor.handle_delete,
            "tab": self.editor.handle_tab,
            "handle_home": self.editor.handle_home,
            "handle_end": self.editor.handle_end,
            "handle_up": self.editor.handle_up,
            "handle_down": self.editor.handle_down,
            "handle_left": self.editor.handle_left,
            "handle_right": self.editor.handle_right,
            "handle_backspace": self.editor.handle_backspace,
            "handle_enter": self.editor.handle_enter,
        }

        final_key_action_map: dict[int | str, Callable[[], bool]] = {
            curses.KEY_RESIZE: self.editor.handle_resize,
            curses.KEY_ENTER: self.editor.handle_enter,
            10: self.editor.handle_enter,  # LF
            13: self.editor.handle_enter,  # CR
            8: self.editor.handle_backspace,  # ^H
            127: self.editor.handle_backspace,  # DEL sent by most terminals
        }

        for action_name, key_code_list in self.keybindings.items():
            method_callable = action_to_method_map.get(action_name)
            if not method_callable:
                logger.warning(f"Action '{action_name}' in keybindings but no corresponding method. Ignored.")
                continue
            for key_code in key_code_list:
                existing = final_key_action_map.get(key_code)
                if existing is not None and existing != method_callable:
                    logger.warning(
                        f"Keybinding for action '{action_name}' (key: {key_code}) overrides "
                        f"'{_action_name(existing)}'."
                    )
                final_key_action_map[key_code] = method_callable

        logger.debug("Final action map: %s", {k: _action_name(v) for k, v in final_key_action_map.items()})
        return final_key_action_map

    def get_key_input(self, window: Optional["curses.window"] = None) -> int | str:
        """Read one key or ESC sequence from the terminal.

        Returns:
            int | str:
            - the curses key code for ordinary and recognised keys,
            - a one-character string for multi-byte UTF-8 input,
            - 27 for a lone ESC or an unknown sequence,
            - curses.ERR on a curses error or timeout.
        """
        target = window or self.stdscr

        try:
            ch = self._pending_keys.pop(0) if self._pending_keys else target.getch()
            if ch == curses.ERR:
                return ch
            KEY_LOGGER.debug("getch -> %r", ch)
            if 0xC0 <= ch <= 0xF7:
                return self._read_utf8(target, ch)
            if ch != 27:
                return ch

            seq = ""
            target.nodelay(True)
            try:
                while True:
                    nx = target.getch()
                    if nx == curses.ERR:
                        break
                    if 0 <= nx <= 255:
                        seq += chr(nx)
                    else:
                        seq += f"<{nx}>"
            finally:
                target.nodelay(False)

            KEY_LOGGER.debug("ESC sequence -> %r", seq)
            if not seq:
                return 27

            mapped = self.ESCAPE_SEQUENCE_MAP.get(seq)
            if not mapped:
                cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
                mapped = self.ESCAPE_SEQUENCE_MAP.get(cleaned)

            if mapped:
                code = self._decode_keystring(mapped)
                logger.debug("get_key_input: ESC %r -> %r -> code %r", seq, mapped, code)
                return code

            logger.warning("get_key_input: unknown escape sequence: ESC + %r", seq)
            return 27

        except curses.error:
            return curses.ERR

    def _read_utf8(self, target: "curses.window", lead: int) -> str:
        """Collect the continuation bytes of a UTF-8 character started by `lead`.

        A byte that cannot continue the character is queued for the next
        `get_key_input` call, and U+FFFD stands in for the broken character.
        """
        if lead < 0xE0:
            length = 2
        elif lead < 0xF0:
            length = 3
        else:
            length = 4

        raw = bytearray([lead])
        for _ in range(length - 1):
            nx = target.getch()
            if not 0x80 <= nx <= 0xBF:
                if nx != curses.ERR:
                    self._pending_keys.append(nx)
                break
            raw.append(nx)

        text = raw.decode("utf-8", errors="replace")
        KEY_LOGGER.debug("UTF-8 bytes %r -> %r", bytes(raw), text)
        return text[:1]

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Return the action bound to `key_spec`, or None."""
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None

        for action_name, key_list in self.keybindings.items():
            if decoded_key in key_list:
                return action_name
        return None
