"""
Library store: the ingested track collection plus its search/sort view.

The collection is kept in ingestion order. Display order is derived on read
by filtering on the search query and stable-sorting on the sort key, so
positions in `tracks` stay valid while the view changes.
"""

import locale
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from music_deck.core.config import SORT_KEYS, MusicConfig

from .ingest import ProbeDuration, ReadTags, ingest_batch
from .metadata import probe_duration, read_tags
from .models import Track

DEFAULT_SORT_KEY = "dateAdded"

SORT_OPTIONS: list[tuple[str, str]] = [
    ("dateAdded", "Recently Added"),
    ("title", "Title (A-Z)"),
    ("artist", "Artist (A-Z)"),
    ("album", "Album (A-Z)"),
    ("duration", "Duration"),
]

LibraryListener = Callable[[Sequence[Track]], None]


def matches_query(track: Track, query: str) -> bool:
    """Case-insensitive substring match against title, artist or album."""
    if not query:
        return True
    needle = query.casefold()
    return (
        needle in track.title.casefold()
        or needle in track.artist.casefold()
        or needle in track.album.casefold()
    )


def _text_key(value: str) -> str:
    return locale.strxfrm(value.casefold())


def sort_tracks(tracks: Iterable[Track], sort_key: str) -> list[Track]:
    """Stable sort by key. `dateAdded` is newest first, every other key ascending.

    Raises:
        ValueError: If sort_key is not a known key
    """
    match sort_key:
        case "title" | "artist" | "album":
            return sorted(tracks, key=lambda t: _text_key(getattr(t, sort_key)))
        case "duration":
            return sorted(tracks, key=lambda t: t.duration)
        case "dateAdded":
            # reverse=True keeps equal stamps in their original order
            return sorted(tracks, key=lambda t: t.added_at, reverse=True)
        case _:
            raise ValueError(
                f"Unknown sort key: {sort_key!r}. Valid keys are: {', '.join(SORT_KEYS)}"
            )


def filter_tracks(tracks: Iterable[Track], query: str) -> list[Track]:
    """Keep tracks matching the search query."""
    return [t for t in tracks if matches_query(t, query)]


class LibraryStore:
    """Owns the track collection, search query and sort key.

    Listeners registered with `add_listener` are called with the new
    collection immediately after every swap, before `load` returns, so
    dependants (the playback controller) never observe the new table with
    stale pointers into the old one.
    """

    def __init__(
        self,
        config: Optional[MusicConfig] = None,
        sort_key: str = DEFAULT_SORT_KEY,
        tag_reader: ReadTags = read_tags,
        duration_probe: ProbeDuration = probe_duration,
    ):
        if sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_key!r}")

        self.config = config or MusicConfig()
        self._tag_reader = tag_reader
        self._duration_probe = duration_probe

        self._tracks: tuple[Track, ...] = ()
        self._loaded_files: tuple[str, ...] = ()
        self._listeners: list[LibraryListener] = []

        self.search_query = ""
        self.sort_key = sort_key
        self._scans_in_flight = 0
        self._scan_lock = threading.Lock()

    # Collection

    @property
    def tracks(self) -> tuple[Track, ...]:
        """All tracks in ingestion order."""
        return self._tracks

    @property
    def loaded_files(self) -> tuple[str, ...]:
        return self._loaded_files

    @property
    def is_scanning(self) -> bool:
        """True while any ingestion is in flight, including overlapping ones."""
        with self._scan_lock:
            return self._scans_in_flight > 0

    def __len__(self) -> int:
        return len(self._tracks)

    def add_listener(self, listener: LibraryListener) -> None:
        self._listeners.append(listener)

    def ingest(self, files: Iterable[str | Path]) -> list[Track]:
        """Ingest files without touching the collection.

        Safe to call from a background thread; hand the result to
        `replace_tracks` on the owner thread.
        """
        with self._scan_lock:
            self._scans_in_flight += 1
        try:
            return ingest_batch(
                files,
                self._tag_reader,
                self._duration_probe,
                max_workers=self.config.ingest_workers,
            )
        finally:
            with self._scan_lock:
                self._scans_in_flight -= 1

    def replace_tracks(self, files: Iterable[str | Path], tracks: Sequence[Track]) -> None:
        """Swap in a freshly ingested collection and notify listeners."""
        self._loaded_files = tuple(str(f) for f in files)
        self._tracks = tuple(tracks)
        logger.info(f"Library replaced: {len(self._tracks)} tracks")

        for listener in self._listeners:
            listener(self._tracks)

    def load(self, files: Iterable[str | Path]) -> int:
        """Replace the collection with freshly ingested tracks.

        Returns:
            Number of tracks loaded
        """
        files = [str(f) for f in files]
        tracks = self.ingest(files)
        self.replace_tracks(files, tracks)
        return len(tracks)

    def rescan(self) -> int:
        """Re-ingest the most recently loaded files.

        Returns:
            Number of tracks loaded, 0 when nothing was loaded before
        """
        if not self._loaded_files:
            logger.info("Rescan requested with no loaded files")
            return 0
        return self.load(self._loaded_files)

    # View

    def set_search_query(self, query: str) -> None:
        self.search_query = query or ""

    def set_sort_key(self, sort_key: str) -> None:
        """Set the sort key.

        Raises:
            ValueError: If sort_key is not a known key
        """
        if sort_key not in SORT_KEYS:
            raise ValueError(
                f"Unknown sort key: {sort_key!r}. Valid keys are: {', '.join(SORT_KEYS)}"
            )
        self.sort_key = sort_key

    def cycle_sort_key(self) -> str:
        """Advance to the next entry of SORT_OPTIONS and return it."""
        keys = [key for key, _ in SORT_OPTIONS]
        self.sort_key = keys[(keys.index(self.sort_key) + 1) % len(keys)]
        return self.sort_key

    def visible_tracks(self) -> list[Track]:
        """Filtered and sorted view of the collection."""
        return sort_tracks(filter_tracks(self._tracks, self.search_query), self.sort_key)

    def visible_indices(self) -> list[int]:
        """Positions in `tracks` of the visible view, in display order."""
        positions = {track.id: i for i, track in enumerate(self._tracks)}
        return [positions[track.id] for track in self.visible_tracks()]

    def index_of(self, track_id: str) -> Optional[int]:
        """Position of a track in the unfiltered collection."""
        for i, track in enumerate(self._tracks):
            if track.id == track_id:
                return i
        return None

    def empty_message(self) -> str:
        """Placeholder shown when the visible view is empty."""
        return "No tracks found" if self.search_query else "No tracks loaded"


def sort_label(sort_key: str) -> str:
    """Display label for a sort key."""
    return dict(SORT_OPTIONS).get(sort_key, sort_key)
