"""
Command routing for Music Deck.

Every input (keyboard, CLI) is turned into a named command and routed here,
so pointer-driven and keyboard-driven actions share the same controller
entry points.
"""

from typing import Callable, List, Optional, Tuple

from loguru import logger

from music_deck.context import AppContext
from music_deck.core.output import log
from music_deck.core.config import SORT_KEYS
from music_deck.domain.library import sort_label

Handler = Callable[[AppContext, List[str]], None]

_TRUE_WORDS = {"on", "true", "yes", "1"}
_FALSE_WORDS = {"off", "false", "no", "0"}


def parse_bool(args: List[str]) -> Optional[bool]:
    """Parse an on/off argument. Returns None if missing or unrecognized."""
    if not args:
        return None
    word = args[0].lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def parse_float(args: List[str]) -> Optional[float]:
    if not args:
        return None
    try:
        return float(args[0])
    except ValueError:
        return None


def parse_int(args: List[str]) -> Optional[int]:
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        return None


# Library commands


def handle_load_library(ctx: AppContext, args: List[str]) -> None:
    if not args:
        log("Usage: load-library PATH...", level="warning")
        return
    ctx.start_load(args)
    log(f"Loading {len(args)} path(s)...")


def handle_rescan(ctx: AppContext, args: List[str]) -> None:
    if ctx.start_rescan() is None:
        log("Nothing to rescan", level="warning")
        return
    log("Rescanning library...")


def handle_set_search(ctx: AppContext, args: List[str]) -> None:
    ctx.library.set_search_query(" ".join(args))


def handle_set_sort(ctx: AppContext, args: List[str]) -> None:
    if not args or args[0] not in SORT_KEYS:
        log(f"Unknown sort key. Choose one of: {', '.join(SORT_KEYS)}", level="warning")
        return
    ctx.library.set_sort_key(args[0])


def handle_cycle_sort(ctx: AppContext, args: List[str]) -> None:
    key = ctx.library.cycle_sort_key()
    log(f"Sort: {sort_label(key)}")


# Playback commands


def handle_select_track(ctx: AppContext, args: List[str]) -> None:
    index = parse_int(args)
    if index is None:
        log("Usage: select-track INDEX", level="warning")
        return
    ctx.player.select_track(index)


def handle_toggle_play(ctx: AppContext, args: List[str]) -> None:
    ctx.player.toggle_play_pause()


def handle_skip_next(ctx: AppContext, args: List[str]) -> None:
    ctx.player.play_next()


def handle_skip_previous(ctx: AppContext, args: List[str]) -> None:
    ctx.player.play_previous()


def handle_seek(ctx: AppContext, args: List[str]) -> None:
    seconds = parse_float(args)
    if seconds is None:
        log("Usage: seek SECONDS", level="warning")
        return
    ctx.player.seek(seconds)


def handle_seek_relative(ctx: AppContext, args: List[str]) -> None:
    delta = parse_float(args)
    if delta is None:
        return
    ctx.player.seek_relative(delta)


def handle_set_volume(ctx: AppContext, args: List[str]) -> None:
    volume = parse_float(args)
    if volume is None:
        log("Usage: set-volume 0..1", level="warning")
        return
    ctx.player.set_volume(volume)


def handle_change_volume(ctx: AppContext, args: List[str]) -> None:
    delta = parse_float(args)
    if delta is None:
        return
    ctx.player.change_volume(delta)


def handle_toggle_mute(ctx: AppContext, args: List[str]) -> None:
    ctx.player.toggle_mute()


def handle_set_repeat(ctx: AppContext, args: List[str]) -> None:
    enabled = parse_bool(args)
    if enabled is None:
        enabled = not ctx.player.state.repeat
    ctx.player.set_repeat(enabled)
    log(f"Repeat {'on' if enabled else 'off'}")


def handle_set_shuffle(ctx: AppContext, args: List[str]) -> None:
    enabled = parse_bool(args)
    if enabled is None:
        enabled = not ctx.player.state.shuffle
    ctx.player.set_shuffle(enabled)
    log(f"Shuffle {'on' if enabled else 'off'}")


# Theme commands


def handle_set_accent_color(ctx: AppContext, args: List[str]) -> None:
    if not args:
        log("Usage: set-accent-color #RRGGBB", level="warning")
        return
    ctx.set_accent_color(args[0])


COMMANDS: dict[str, Handler] = {
    "load-library": handle_load_library,
    "rescan": handle_rescan,
    "set-search": handle_set_search,
    "set-sort": handle_set_sort,
    "cycle-sort": handle_cycle_sort,
    "select-track": handle_select_track,
    "toggle-play": handle_toggle_play,
    "skip-next": handle_skip_next,
    "skip-previous": handle_skip_previous,
    "seek": handle_seek,
    "seek-relative": handle_seek_relative,
    "set-volume": handle_set_volume,
    "change-volume": handle_change_volume,
    "toggle-mute": handle_toggle_mute,
    "set-repeat": handle_set_repeat,
    "set-shuffle": handle_set_shuffle,
    "set-accent-color": handle_set_accent_color,
}


def handle_command(ctx: AppContext, command: str, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Route a command to its handler.

    Args:
        ctx: Application context
        command: Command name (e.g. "skip-next")
        args: Command arguments as strings

    Returns:
        Tuple of (updated AppContext, should_continue)
    """
    if command in ("quit", "exit"):
        return ctx, False

    handler = COMMANDS.get(command)
    if handler is None:
        logger.warning(f"Unknown command: {command}")
        return ctx, True

    logger.debug(f"Command: {command} {args}")
    handler(ctx, args)
    ctx.sync_theme()
    return ctx, True
