"""UI state management - immutable state updates."""

from dataclasses import dataclass, field, replace
from time import time
from typing import Optional

from .helpers import calculate_scroll_offset, clamp_selection, move_selection

# Seconds a status message stays on screen
STATUS_DISPLAY_SECONDS = 4.0


@dataclass
class InternalCommand:
    """Routed command produced by the keyboard handler."""

    action: str  # Command name understood by the router
    args: list[str] = field(default_factory=list)


@dataclass
class UIState:
    """
    UI-specific state - immutable updates only.

    Library contents and playback state live in AppContext. This only holds
    what the terminal needs on top: the list cursor, scrolling, search input
    focus and the status line.
    """

    # Track list
    cursor: int = 0  # Position in the visible (filtered, sorted) view
    scroll_offset: int = 0

    # Search input
    search_focused: bool = False
    search_text: str = ""

    # Status line
    status_message: Optional[str] = None
    status_color: str = "white"
    status_time: Optional[float] = None


def create_initial_state() -> UIState:
    return UIState()


def focus_search(state: UIState) -> UIState:
    return replace(state, search_focused=True)


def blur_search(state: UIState) -> UIState:
    return replace(state, search_focused=False)


def append_search_char(state: UIState, char: str) -> UIState:
    """Append a character to the search text and jump to the top of the list."""
    return replace(state, search_text=state.search_text + char, cursor=0, scroll_offset=0)


def delete_search_char(state: UIState) -> UIState:
    if not state.search_text:
        return state
    return replace(state, search_text=state.search_text[:-1], cursor=0, scroll_offset=0)


def move_cursor(state: UIState, delta: int, total_items: int) -> UIState:
    """Move the list cursor without wrapping."""
    cursor = move_selection(state.cursor, delta, total_items, wrap=False)
    return replace(state, cursor=cursor)


def fit_view(state: UIState, total_items: int, visible_rows: int) -> UIState:
    """Clamp the cursor to the list and scroll it into view."""
    cursor = clamp_selection(state.cursor, total_items)
    scroll = calculate_scroll_offset(cursor, state.scroll_offset, max(1, visible_rows), total_items)
    if cursor == state.cursor and scroll == state.scroll_offset:
        return state
    return replace(state, cursor=cursor, scroll_offset=scroll)


def set_status(state: UIState, message: str, color: str = "white") -> UIState:
    return replace(state, status_message=message, status_color=color, status_time=time())


def should_show_status(state: UIState, now: Optional[float] = None) -> bool:
    """Check if the status message is still within its display window."""
    if not state.status_message or state.status_time is None:
        return False
    now = time() if now is None else now
    return (now - state.status_time) < STATUS_DISPLAY_SECONDS
