"""Terminal output utilities."""

import sys

from blessed import Terminal

BAR_FILLED = "━"
BAR_EMPTY = "─"
BAR_HEAD = "●"


def write_at(term: Terminal, x: int, y: int, content: str, *, clear: bool = True) -> None:
    """Write content at a position, clearing the rest of the line by default.

    Clearing prevents leftovers when the new content is shorter than what was
    drawn there in the previous frame.
    """
    prefix = term.move_xy(x, y) + (term.clear_eol if clear else "")
    sys.stdout.write(prefix + content)


def fit_text(term: Terminal, text: str, width: int) -> str:
    """Truncate (escape-sequence aware) and left-justify text to `width` cells."""
    if width <= 0:
        return ""
    return term.ljust(term.truncate(text, width), width)


def progress_bar(progress: float, width: int) -> str:
    """Plain-text progress bar of `width` cells for a 0.0 - 1.0 fraction."""
    if width <= 0:
        return ""
    progress = max(0.0, min(1.0, progress))
    head = min(width - 1, int(progress * width))
    return BAR_FILLED * head + BAR_HEAD + BAR_EMPTY * (width - head - 1)
