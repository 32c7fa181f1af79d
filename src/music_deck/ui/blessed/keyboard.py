"""Keyboard handling for the blessed UI.

Keys never act on the library or player directly: they produce an
InternalCommand that goes through the router, the same path the CLI uses.
While the search input has focus every printable key is search text, so
the transport shortcuts are ignored.

Key Functions:
    - parse_key: Normalize a blessed Keystroke into an event dict
    - handle_key: Update UI state and produce a command for a key press
"""

from typing import Optional, Sequence

from blessed.keyboard import Keystroke

from music_deck.core.config import PlayerConfig

from .state import (
    InternalCommand,
    UIState,
    append_search_char,
    blur_search,
    delete_search_char,
    focus_search,
    move_cursor,
)

_NAMED_KEYS = {
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "escape",
    "KEY_BACKSPACE": "backspace",
    "KEY_UP": "arrow_up",
    "KEY_DOWN": "arrow_down",
    "KEY_LEFT": "arrow_left",
    "KEY_RIGHT": "arrow_right",
    "KEY_SLEFT": "shift_arrow_left",
    "KEY_SRIGHT": "shift_arrow_right",
    "KEY_PGUP": "page_up",
    "KEY_PGDOWN": "page_down",
    "KEY_HOME": "home",
    "KEY_END": "end",
}

# Single-key shortcuts available outside the search input
_CHAR_COMMANDS = {
    " ": "toggle-play",
    "s": "cycle-sort",
    "r": "set-repeat",
    "z": "set-shuffle",
    "m": "toggle-mute",
    "R": "rescan",
    "q": "quit",
}


def parse_key(key: Keystroke) -> dict:
    """
    Parse keystroke into event dictionary.

    Args:
        key: blessed Keystroke

    Returns:
        Dict with "type" (enter, arrow_left, char, ...) and "char"
    """
    name = getattr(key, "name", None)
    text = str(key)
    event = {
        "type": "unknown",
        "name": name,
        "char": text if text and text.isprintable() else None,
    }

    if name in _NAMED_KEYS:
        event["type"] = _NAMED_KEYS[name]
    elif text == "\x7f":
        event["type"] = "backspace"
    elif text in ("\r", "\n"):
        event["type"] = "enter"
    elif text == "\x03":  # Ctrl+C
        event["type"] = "ctrl_c"
    elif event["char"]:
        event["type"] = "char"

    return event


def _handle_search_key(state: UIState, event: dict) -> tuple[UIState, Optional[InternalCommand]]:
    match event["type"]:
        case "enter" | "escape":
            return blur_search(state), None
        case "backspace":
            state = delete_search_char(state)
            return state, InternalCommand("set-search", [state.search_text])
        case "char":
            state = append_search_char(state, event["char"])
            return state, InternalCommand("set-search", [state.search_text])
    return state, None


def handle_key(
    state: UIState,
    key: Keystroke,
    visible_indices: Sequence[int],
    player_config: Optional[PlayerConfig] = None,
    page_size: int = 10,
) -> tuple[UIState, Optional[InternalCommand]]:
    """
    Handle a key press.

    Args:
        state: Current UI state
        key: Key pressed
        visible_indices: Collection index for each row of the visible view
        player_config: Seek and volume step sizes
        page_size: Rows moved by page up/down

    Returns:
        Tuple of (updated state, command to route or None)
    """
    event = parse_key(key)
    if event["type"] == "ctrl_c":
        return state, InternalCommand("quit")

    if state.search_focused:
        return _handle_search_key(state, event)

    config = player_config or PlayerConfig()
    total = len(visible_indices)

    match event["type"]:
        case "arrow_right":
            return state, InternalCommand("seek-relative", [str(config.seek_step)])
        case "arrow_left":
            return state, InternalCommand("seek-relative", [str(-config.seek_step)])
        case "shift_arrow_right":
            return state, InternalCommand("skip-next")
        case "shift_arrow_left":
            return state, InternalCommand("skip-previous")
        case "arrow_up":
            return state, InternalCommand("change-volume", [str(config.volume_step)])
        case "arrow_down":
            return state, InternalCommand("change-volume", [str(-config.volume_step)])
        case "page_up":
            return move_cursor(state, -page_size, total), None
        case "page_down":
            return move_cursor(state, page_size, total), None
        case "home":
            return move_cursor(state, -total, total), None
        case "end":
            return move_cursor(state, total, total), None
        case "enter":
            if 0 <= state.cursor < total:
                return state, InternalCommand("select-track", [str(visible_indices[state.cursor])])
            return state, None
        case "char":
            char = event["char"]
            if char == "/":
                return focus_search(state), None
            if char == "j":
                return move_cursor(state, 1, total), None
            if char == "k":
                return move_cursor(state, -1, total), None
            if char in _CHAR_COMMANDS:
                return state, InternalCommand(_CHAR_COMMANDS[char])

    return state, None
