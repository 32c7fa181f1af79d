"""Library domain - audio file ingestion and the searchable track collection.

This domain handles:
- Track data models
- Tag metadata and duration extraction from audio files
- Concurrent batch ingestion with fallback fields
- Library search, sorting and reloads
"""

# Models
from .models import UNKNOWN_ALBUM, UNKNOWN_ARTIST, TagMetadata, Track

# Metadata extraction and display
from .metadata import (
    MetadataUnavailable,
    format_time,
    format_track_count,
    get_display_name,
    probe_duration,
    read_tags,
    title_from_filename,
)

# Ingestion
from .ingest import build_track, ingest_batch, ingest_file

# File discovery
from .scanner import collect_audio_files, is_supported_format, scan_directory

# Store
from .store import (
    DEFAULT_SORT_KEY,
    SORT_OPTIONS,
    LibraryStore,
    filter_tracks,
    matches_query,
    sort_label,
    sort_tracks,
)

__all__ = [
    # Models
    "UNKNOWN_ALBUM",
    "UNKNOWN_ARTIST",
    "TagMetadata",
    "Track",
    # Metadata
    "MetadataUnavailable",
    "format_time",
    "format_track_count",
    "get_display_name",
    "probe_duration",
    "read_tags",
    "title_from_filename",
    # Ingestion
    "build_track",
    "ingest_batch",
    "ingest_file",
    # Scanner
    "collect_audio_files",
    "is_supported_format",
    "scan_directory",
    # Store
    "DEFAULT_SORT_KEY",
    "SORT_OPTIONS",
    "LibraryStore",
    "filter_tracks",
    "matches_query",
    "sort_label",
    "sort_tracks",
]
