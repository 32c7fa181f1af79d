"""Pure helpers shared by the blessed UI."""

from .scrolling import calculate_scroll_offset, clamp_selection, move_selection
from .terminal import fit_text, progress_bar, write_at

__all__ = [
    "calculate_scroll_offset",
    "clamp_selection",
    "move_selection",
    "fit_text",
    "progress_bar",
    "write_at",
]
