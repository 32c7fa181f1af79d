"""
Music Deck - application startup for the terminal UI
"""

import locale
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from music_deck.context import AppContext
from music_deck.core import config as config_module
from music_deck.core.output import log, setup_from_config
from music_deck.domain.playback import AudioBackend, BackendUnavailable, MpvBackend, NullBackend


def init_locale() -> None:
    """Use the user's collation rules for title/artist/album sorting."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Could not set collation locale, using default ordering: {e}")


def start_backend(cfg: config_module.Config) -> AudioBackend:
    """Start MPV, or fall back to a silent backend when it is unavailable."""
    try:
        return MpvBackend(cfg.player).start()
    except BackendUnavailable as e:
        log(f"Audio disabled: {e}", level="warning")
        return NullBackend()


def load_app_config(
    config_path: Optional[Path] = None, log_level: Optional[str] = None
) -> config_module.Config:
    """Load configuration and set up logging from it."""
    cfg = config_module.load_config(config_path)
    if log_level:
        cfg.logging.level = log_level.upper()
    setup_from_config(cfg.logging)
    config_module.ensure_directories()
    return cfg


def interactive_mode(
    paths: Sequence[str],
    config_path: Optional[Path] = None,
    log_level: Optional[str] = None,
) -> int:
    """
    Load the library and run the terminal UI.

    Args:
        paths: Files or folders to load (config library_paths when empty)
        config_path: Explicit config file, or None for the search order
        log_level: Override for the configured log level

    Returns:
        Exit code
    """
    from music_deck.ui.blessed import run_interactive_ui

    init_locale()
    cfg = load_app_config(config_path, log_level)
    paths = list(paths) or list(cfg.music.library_paths)

    backend = start_backend(cfg)
    ctx = AppContext.create(cfg, backend)
    logger.info(f"Starting terminal UI with {len(paths)} library path(s)")

    try:
        run_interactive_ui(ctx, paths)
    finally:
        backend.close()
        logger.info("Music Deck stopped")
    return 0
