"""
Music Deck CLI - entry point

Subcommands:
    play    Start the terminal UI on a set of files/folders
    list    Ingest files and print the searched, sorted view as a table
    colors  Print the glow colors extracted from an image or a track's art
"""

import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger
from rich.table import Table

from music_deck import __version__
from music_deck.core.config import SORT_KEYS
from music_deck.core.console import get_console, print_error


def build_track_table(tracks: Iterable, title: Optional[str] = None) -> Table:
    """Tabulate tracks as rows of #, Title, Artist, Album and Time."""
    from music_deck.domain.library import format_time

    table = Table(title=title, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", overflow="fold")
    table.add_column("Artist", style="cyan")
    table.add_column("Album", style="magenta")
    table.add_column("Time", justify="right")

    for position, track in enumerate(tracks, start=1):
        table.add_row(str(position), track.title, track.artist, track.album, format_time(track.duration))
    return table


def run_play(args: argparse.Namespace) -> int:
    from music_deck.main import interactive_mode

    return interactive_mode(args.paths, args.config, args.log_level)


def run_list(args: argparse.Namespace) -> int:
    """Ingest the given paths and print the visible view."""
    from music_deck.context import AppContext
    from music_deck.domain.library import format_track_count, sort_label
    from music_deck.main import init_locale, load_app_config

    init_locale()
    cfg = load_app_config(args.config, args.log_level)
    ctx = AppContext.create(cfg)
    ctx.library.set_sort_key(args.sort or cfg.ui.default_sort)
    ctx.library.set_search_query(args.search or "")

    with get_console().status("Reading tags..."):
        ctx.load_library(args.paths)

    visible = ctx.library.visible_tracks()
    console = get_console()
    if not visible:
        console.print(ctx.library.empty_message(), style="dim")
        return 0

    title = f"{format_track_count(len(visible))} · {sort_label(ctx.library.sort_key)}"
    console.print(build_track_table(visible, title=title))
    return 0


def _read_art_or_image(path: Path) -> Optional[bytes]:
    """Embedded album art for an audio file, otherwise the file's own bytes."""
    from music_deck.core.config import MusicConfig
    from music_deck.domain.library import MetadataUnavailable, is_supported_format, read_tags

    if is_supported_format(path, MusicConfig().supported_formats):
        try:
            return read_tags(path).album_art
        except MetadataUnavailable as e:
            logger.warning(f"No tags in {path}: {e}")
            return None
    return path.read_bytes()


def run_colors(args: argparse.Namespace) -> int:
    """Print the glow colors and accent variables for an image file."""
    from music_deck.domain.theming import build_theme, rgb_to_hex

    path = Path(args.image).expanduser()
    if not path.is_file():
        print_error(f"Not a file: {path}")
        return 1

    theme = build_theme(args.accent, _read_art_or_image(path))
    console = get_console()

    if not theme.glow_colors:
        console.print("No vibrant colors found", style="dim")
    for rgb in theme.glow_colors:
        hex_color = rgb_to_hex(rgb)
        console.print(f"[on {hex_color}]      [/] {hex_color}  rgb{rgb}", highlight=False)

    shadow = theme.glow_shadow()
    if shadow:
        console.print(f"box-shadow: {shadow}", highlight=False)
    for name, value in theme.variables.items():
        console.print(f"{name}: {value}", highlight=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-deck",
        description="Music Deck - local music library player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Start the terminal player")
    play_parser.add_argument("paths", nargs="*", help="Audio files or folders (default: library_paths)")
    play_parser.set_defaults(func=run_play)

    list_parser = subparsers.add_parser("list", help="Print tracks as a table")
    list_parser.add_argument("paths", nargs="+", help="Audio files or folders")
    list_parser.add_argument("--search", help="Case-insensitive title/artist/album filter")
    list_parser.add_argument("--sort", choices=SORT_KEYS, help="Sort key")
    list_parser.set_defaults(func=run_list)

    colors_parser = subparsers.add_parser("colors", help="Show glow colors for an image")
    colors_parser.add_argument("image", help="Image file, or audio file with embedded art")
    colors_parser.add_argument("--accent", default="#6ee7b7", help="Accent color (#RRGGBB)")
    colors_parser.set_defaults(func=run_colors)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the music-deck command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        # No subcommand: start the player on the configured library
        args.paths = []
        args.func = run_play

    try:
        code = args.func(args)
    except KeyboardInterrupt:
        code = 130
    except Exception as e:
        logger.exception("Fatal error")
        print_error(str(e))
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
