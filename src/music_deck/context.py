"""Application context for explicit state passing.

AppContext bundles configuration, the library store, the playback controller
and the current theme. Library loads can run in the background: the worker
only ingests, and the resulting table swap happens on the owner thread in
`apply_pending_loads`, where results from superseded loads are discarded.
"""

import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from music_deck.core.config import Config
from music_deck.domain.library import LibraryStore, Track, collect_audio_files
from music_deck.domain.playback import AudioBackend, NullBackend, PlaybackController
from music_deck.domain.theming import Theme, build_theme


@dataclass
class LoadResult:
    """Tracks ingested by a background load, tagged with its generation."""

    generation: int
    files: list[str]
    tracks: list[Track]


@dataclass
class AppContext:
    """Application state passed to command handlers and the UI loop.

    Attributes:
        config: Application configuration
        library: Track collection and search/sort view
        player: Playback state machine
        theme: Current presentation colors
    """

    config: Config
    library: LibraryStore
    player: PlaybackController
    theme: Theme

    _theme_track_id: Optional[str] = None
    _load_generation: int = 0
    _load_results: "queue.Queue[LoadResult]" = field(default_factory=queue.Queue)

    @classmethod
    def create(cls, config: Config, backend: Optional[AudioBackend] = None) -> "AppContext":
        """Create the initial context with an empty library.

        Args:
            config: Application configuration
            backend: Audio backend (NullBackend when omitted)
        """
        library = LibraryStore(config.music, sort_key=config.ui.default_sort)
        player = PlaybackController(library, backend or NullBackend(), config.player)
        return cls(
            config=config,
            library=library,
            player=player,
            theme=build_theme(config.ui.accent_color),
        )

    # Library loading

    def resolve_files(self, paths: Iterable[str | Path]) -> list[Path]:
        """Expand a file/folder selection into audio files."""
        return collect_audio_files(paths, self.config.music)

    def load_library(self, paths: Iterable[str | Path]) -> int:
        """Load synchronously. Supersedes any background load still running."""
        self._load_generation += 1
        count = self.library.load(self.resolve_files(paths))
        self.sync_theme()
        return count

    def start_load(self, paths: Iterable[str | Path]) -> int:
        """Ingest in a background thread; commit later via apply_pending_loads.

        Returns:
            Generation number of the started load
        """
        self._load_generation += 1
        generation = self._load_generation
        paths = list(paths)

        def _worker() -> None:
            try:
                files = [str(f) for f in self.resolve_files(paths)]
                tracks = self.library.ingest(files)
            except Exception:
                logger.exception("Background library load failed")
                files, tracks = [], []
            self._load_results.put(LoadResult(generation, files, tracks))

        thread = threading.Thread(target=_worker, name=f"MusicDeckLoad-{generation}", daemon=True)
        thread.silent_logging = True
        thread.start()
        logger.info(f"Started library load #{generation} for {len(paths)} paths")
        return generation

    def start_rescan(self) -> Optional[int]:
        """Background re-ingest of the loaded files, or None if nothing is loaded."""
        if not self.library.loaded_files:
            return None
        return self.start_load(self.library.loaded_files)

    @property
    def is_loading(self) -> bool:
        return self.library.is_scanning

    def apply_pending_loads(self) -> Optional[int]:
        """Commit the newest finished background load, dropping stale ones.

        Returns:
            Number of tracks committed, or None if nothing was committed
        """
        committed = None
        while True:
            try:
                result = self._load_results.get_nowait()
            except queue.Empty:
                break

            if result.generation != self._load_generation:
                logger.info(f"Discarding superseded library load #{result.generation}")
                continue

            self.library.replace_tracks(result.files, result.tracks)
            committed = len(result.tracks)

        if committed is not None:
            self.sync_theme()
        return committed

    # Theme

    def set_accent_color(self, accent_hex: str) -> None:
        self.theme = self.theme.with_accent(accent_hex)

    def sync_theme(self) -> None:
        """Recompute glow colors when the current track changed."""
        track = self.player.current_track
        track_id = track.id if track else None
        if track_id == self._theme_track_id:
            return
        self._theme_track_id = track_id
        self.theme = self.theme.with_album_art(track.album_art if track else None)
