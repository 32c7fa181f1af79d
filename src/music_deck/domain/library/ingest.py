"""
Track ingestion: turn audio files plus decoded metadata into Track records.

Each file needs two independent lookups (duration from the stream header and
tag metadata). Both run concurrently on a worker pool, and a batch returns
its tracks in input order. A file whose lookups fail still produces a Track
with fallback fields, so a batch never fails as a whole.
"""

import concurrent.futures
import math
import threading
import time
import uuid
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from .metadata import MetadataUnavailable, probe_duration, read_tags, title_from_filename
from .models import UNKNOWN_ALBUM, UNKNOWN_ARTIST, TagMetadata, Track

ReadTags = Callable[[str], TagMetadata]
ProbeDuration = Callable[[str], float]
ProgressCallback = Callable[[str, Track], None]

DEFAULT_WORKERS = 8

_stamp_lock = threading.Lock()
_last_stamp = 0


def next_added_at() -> int:
    """Strictly increasing monotonic ingestion stamp (nanoseconds)."""
    global _last_stamp
    with _stamp_lock:
        _last_stamp = max(_last_stamp + 1, time.monotonic_ns())
        return _last_stamp


def new_track_id() -> str:
    """Opaque identifier, never reused within a process."""
    return uuid.uuid4().hex


def _field(value: Optional[str], fallback: str) -> str:
    if value is None:
        return fallback
    value = value.strip()
    return value or fallback


def build_track(
    source: str,
    tags: Optional[TagMetadata],
    duration: float,
    added_at: int,
) -> Track:
    """Assemble a Track, applying per-field fallbacks.

    Args:
        source: Path of the ingested file
        tags: Tag metadata, or None when extraction failed
        duration: Probed duration in seconds (0 when unknown)
        added_at: Ingestion stamp
    """
    if tags is None:
        tags = TagMetadata()

    if duration is None or not math.isfinite(duration) or duration < 0:
        duration = 0.0

    return Track(
        id=new_track_id(),
        source=source,
        title=_field(tags.title, title_from_filename(source)),
        artist=_field(tags.artist, UNKNOWN_ARTIST),
        album=_field(tags.album, UNKNOWN_ALBUM),
        duration=float(duration),
        album_art=tags.album_art or None,
        added_at=added_at,
    )


def _resolve_tags(source: str, future: Future) -> Optional[TagMetadata]:
    try:
        return future.result()
    except MetadataUnavailable as e:
        logger.debug(f"Metadata unavailable, using filename: {e}")
    except Exception:
        logger.exception(f"Metadata reader failed for {source}")
    return None


def _resolve_duration(source: str, future: Future) -> float:
    try:
        return future.result()
    except Exception:
        logger.exception(f"Duration probe failed for {source}")
    return 0.0


def ingest_file(
    source: str | Path,
    tag_reader: ReadTags = read_tags,
    duration_probe: ProbeDuration = probe_duration,
) -> Track:
    """Ingest a single file. Never raises for unreadable metadata."""
    return ingest_batch([source], tag_reader, duration_probe, max_workers=2)[0]


def ingest_batch(
    sources: Iterable[str | Path],
    tag_reader: ReadTags = read_tags,
    duration_probe: ProbeDuration = probe_duration,
    max_workers: int = DEFAULT_WORKERS,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[Track]:
    """Ingest files concurrently, preserving input order.

    Args:
        sources: Audio file paths
        tag_reader: Metadata collaborator (raises MetadataUnavailable on failure)
        duration_probe: Returns the decoded duration in seconds
        max_workers: Worker pool size
        progress_callback: Optional callback(source, track), called in input order

    Returns:
        One Track per source, in input order
    """
    sources = [str(s) for s in sources]
    if not sources:
        return []

    # Stamps follow input order regardless of which lookup finishes first
    stamps = [next_added_at() for _ in sources]

    logger.info(f"Ingesting {len(sources)} files with {max_workers} workers")
    started = time.perf_counter()

    tracks: list[Track] = []
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="MusicDeckIngest"
    ) as pool:
        pending = [
            (
                source,
                pool.submit(duration_probe, source),
                pool.submit(tag_reader, source),
            )
            for source in sources
        ]

        for (source, duration_future, tags_future), stamp in zip(pending, stamps):
            track = build_track(
                source,
                _resolve_tags(source, tags_future),
                _resolve_duration(source, duration_future),
                stamp,
            )
            tracks.append(track)
            if progress_callback:
                progress_callback(source, track)

    logger.info(
        f"Ingested {len(tracks)} tracks in {time.perf_counter() - started:.2f}s"
    )
    return tracks
