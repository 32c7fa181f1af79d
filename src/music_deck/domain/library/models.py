"""
Music library domain models.

Contains data structures for representing ingested tracks.
"""

from typing import NamedTuple, Optional

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


class Track(NamedTuple):
    """An ingested audio item with resolved display metadata.

    Tracks are immutable: a library reload builds new Track objects rather
    than updating existing ones. `source` is a non-owning reference to the
    file the track was ingested from.
    """

    id: str  # Opaque, unique for the lifetime of the process
    source: str  # Local file path
    title: str
    artist: str = UNKNOWN_ARTIST
    album: str = UNKNOWN_ALBUM
    duration: float = 0.0  # in seconds, 0 while unknown
    album_art: Optional[bytes] = None  # Embedded image bytes
    added_at: int = 0  # Monotonic ingestion stamp (sort key only)


class TagMetadata(NamedTuple):
    """Tag fields returned by the metadata reader; any field may be missing."""

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_art: Optional[bytes] = None
