"""Screen rendering for the blessed UI.

Layout (top to bottom): header, search line, track list, now-playing line,
progress line, status line. Colors come from the current Theme.
"""

from typing import Sequence

from blessed import Terminal

from music_deck.context import AppContext
from music_deck.domain.library import (
    Track,
    format_time,
    format_track_count,
    get_display_name,
    sort_label,
)
from music_deck.domain.theming import Theme

from .helpers import fit_text, progress_bar, write_at
from .state import UIState, should_show_status

HEADER_ROWS = 3  # header, search, rule
FOOTER_ROWS = 4  # rule, now playing, progress, status
DURATION_WIDTH = 6


def list_height(term: Terminal) -> int:
    """Rows available to the track list."""
    return max(1, term.height - HEADER_ROWS - FOOTER_ROWS)


def _accent(term: Terminal, theme: Theme):
    return term.color_rgb(*theme.accent_rgb)


def _glow(term: Terminal, theme: Theme):
    """Color for the now-playing line: the most vibrant art color, else the accent."""
    if theme.glow_colors:
        return term.color_rgb(*theme.glow_colors[0])
    return _accent(term, theme)


def _cell(text: str, width: int) -> str:
    """Clip to width - 1 characters (one column gap) and pad to width."""
    if width <= 0:
        return ""
    return text[: width - 1].ljust(width)


def format_track_row(track: Track, width: int) -> str:
    """Plain 'Title - Artist  Album  M:SS' row text, fitted to width."""
    duration = format_time(track.duration).rjust(DURATION_WIDTH)
    body_width = max(0, width - DURATION_WIDTH - 1)
    title_width = body_width * 3 // 5
    album_width = body_width - title_width

    title = _cell(get_display_name(track), title_width)
    album = _cell(track.album, album_width)
    return f"{title}{album} {duration}"


def render_header(term: Terminal, ctx: AppContext, ui_state: UIState) -> None:
    accent = _accent(term, ctx.theme)
    library = ctx.library

    parts = [
        accent(term.bold("Music Deck")),
        format_track_count(len(library.tracks)),
        f"Sort: {sort_label(library.sort_key)}",
    ]
    if ctx.is_loading:
        parts.append(term.yellow("Scanning..."))
    write_at(term, 0, 0, fit_text(term, "  ·  ".join(parts), term.width))

    label = "Search: "
    if ui_state.search_focused:
        search = accent(label) + ui_state.search_text + term.reverse(" ")
    elif ui_state.search_text:
        search = term.dim(label) + ui_state.search_text
    else:
        search = term.dim(label + "press / to search")
    write_at(term, 0, 1, fit_text(term, search, term.width))
    write_at(term, 0, 2, term.dim("─" * term.width))


def render_track_list(
    term: Terminal,
    ctx: AppContext,
    ui_state: UIState,
    visible: Sequence[Track],
    top: int,
    height: int,
) -> None:
    accent = _accent(term, ctx.theme)
    current = ctx.player.current_track
    current_id = current.id if current else None
    width = term.width

    if not visible:
        write_at(term, 0, top, term.dim(ctx.library.empty_message()))
        for row in range(1, height):
            write_at(term, 0, top + row, "")
        return

    for row in range(height):
        pos = ui_state.scroll_offset + row
        if pos >= len(visible):
            write_at(term, 0, top + row, "")
            continue

        track = visible[pos]
        is_current = track.id == current_id
        marker = "▶ " if is_current else "  "
        text = marker + format_track_row(track, width - 2)

        if is_current:
            text = accent(text)
        if pos == ui_state.cursor:
            text = term.reverse(text)
        write_at(term, 0, top + row, text)


def render_now_playing(term: Terminal, ctx: AppContext, top: int) -> None:
    state = ctx.player.state
    track = ctx.player.current_track

    write_at(term, 0, top, term.dim("─" * term.width))

    if state.last_error is not None:
        line = term.red(f"Can't play this track: {state.last_error}")
    elif track is None:
        line = term.dim("Nothing playing")
    else:
        icon = "▶" if state.is_playing else "⏸"
        line = _glow(term, ctx.theme)(f"{icon} {get_display_name(track)} · {track.album}")
    write_at(term, 0, top + 1, fit_text(term, line, term.width))

    flags = []
    volume = "muted" if state.muted else f"vol {round(state.volume * 100)}%"
    flags.append(volume)
    if state.repeat:
        flags.append("repeat")
    if state.shuffle:
        flags.append("shuffle")
    suffix = "  " + " ".join(f"[{flag}]" for flag in flags)

    elapsed = format_time(state.current_time)
    total = format_time(state.duration)
    bar_width = max(0, term.width - len(elapsed) - len(total) - len(suffix) - 2)
    bar = _accent(term, ctx.theme)(progress_bar(state.progress, bar_width))
    write_at(term, 0, top + 2, f"{elapsed} {bar} {total}{term.dim(suffix)}")


def render_status(term: Terminal, ui_state: UIState, row: int) -> None:
    if not should_show_status(ui_state):
        write_at(term, 0, row, "")
        return
    color = getattr(term, ui_state.status_color, term.white)
    write_at(term, 0, row, fit_text(term, color(ui_state.status_message), term.width))


def render(term: Terminal, ctx: AppContext, ui_state: UIState, visible: Sequence[Track]) -> None:
    """Draw a full frame."""
    height = list_height(term)
    render_header(term, ctx, ui_state)
    render_track_list(term, ctx, ui_state, visible, HEADER_ROWS, height)
    render_now_playing(term, ctx, HEADER_ROWS + height)
    render_status(term, ui_state, term.height - 1)
