"""Main event loop and entry point for blessed UI."""

import sys
from typing import Optional, Sequence

from blessed import Terminal
from loguru import logger

from music_deck.context import AppContext
from music_deck.core.output import clear_blessed_mode, drain_pending_messages, set_blessed_mode
from music_deck.router import handle_command

from .keyboard import handle_key
from .render import list_height, render
from .state import UIState, create_initial_state, fit_view, set_status


def poll_background(ctx: AppContext, ui_state: UIState, last_error: Optional[str]) -> tuple[UIState, Optional[str]]:
    """
    Apply finished library loads and backend events, and surface messages.

    Returns:
        Tuple of (updated UI state, text of the last playback error shown)
    """
    committed = ctx.apply_pending_loads()
    if committed is not None:
        ui_state = set_status(ui_state, f"Loaded {committed} tracks", "green")

    ctx.player.poll_backend()
    ctx.sync_theme()

    for message, color in drain_pending_messages():
        ui_state = set_status(ui_state, message, color)

    error = ctx.player.state.last_error
    error_text = str(error) if error is not None else None
    if error_text and error_text != last_error:
        ui_state = set_status(ui_state, f"Playback error: {error_text}", "red")
    return ui_state, error_text


def main_loop(term: Terminal, ctx: AppContext) -> AppContext:
    """
    Run the UI until the user quits.

    Args:
        term: blessed Terminal instance
        ctx: Application context

    Returns:
        Final application context
    """
    ui_state = create_initial_state()
    frame_timeout = 1.0 / max(1, ctx.config.ui.refresh_rate)
    last_error: Optional[str] = None

    while True:
        ui_state, last_error = poll_background(ctx, ui_state, last_error)

        visible = ctx.library.visible_tracks()
        height = list_height(term)
        ui_state = fit_view(ui_state, len(visible), height)

        render(term, ctx, ui_state, visible)
        sys.stdout.flush()

        key = term.inkey(timeout=frame_timeout)
        if not key:
            continue

        visible_indices = ctx.library.visible_indices()
        ui_state, command = handle_key(
            ui_state, key, visible_indices, ctx.config.player, page_size=height
        )
        if command is None:
            continue

        try:
            ctx, should_continue = handle_command(ctx, command.action, command.args)
        except Exception as e:
            logger.exception(f"Command failed: {command.action}")
            ui_state = set_status(ui_state, f"Error: {e}", "red")
            continue

        if not should_continue:
            return ctx


def run_interactive_ui(ctx: AppContext, paths: Sequence[str] = ()) -> AppContext:
    """
    Run the fullscreen terminal UI.

    Args:
        ctx: Application context
        paths: Files or folders to load on start

    Returns:
        Final application context
    """
    term = Terminal()
    set_blessed_mode()

    if paths:
        ctx, _ = handle_command(ctx, "load-library", list(paths))

    try:
        with term.fullscreen(), term.cbreak(), term.hidden_cursor():
            sys.stdout.write(term.clear)
            ctx = main_loop(term, ctx)
    finally:
        clear_blessed_mode()

    return ctx
