"""Scrolling and selection arithmetic for the track list."""


def calculate_scroll_offset(
    selected: int,
    current_scroll: int,
    visible_items: int,
    total_items: int,
) -> int:
    """Scroll offset that keeps `selected` inside a viewport of `visible_items` rows.

    The offset only moves when the selection leaves the viewport, and never
    leaves empty rows below the last item.

    Examples:
        >>> calculate_scroll_offset(15, 0, 10, 20)
        6
        >>> calculate_scroll_offset(2, 10, 10, 20)
        2
        >>> calculate_scroll_offset(5, 0, 10, 20)
        0
    """
    if selected < current_scroll:
        offset = selected
    elif selected >= current_scroll + visible_items:
        offset = selected - visible_items + 1
    else:
        offset = current_scroll

    last_page_start = max(0, total_items - visible_items)
    return max(0, min(offset, last_page_start))


def move_selection(current: int, delta: int, total_items: int, wrap: bool = True) -> int:
    """Move a selection index by `delta`, wrapping or clamping at the ends."""
    if total_items <= 0:
        return 0
    target = current + delta
    if wrap:
        return target % total_items
    return clamp_selection(target, total_items)


def clamp_selection(selection: int, total_items: int) -> int:
    """Clamp to [0, total_items - 1]; 0 for an empty list."""
    if total_items <= 0:
        return 0
    return max(0, min(selection, total_items - 1))
