"""
Audio metadata extraction and track display utilities.

Reads tag metadata and durations from audio files using Mutagen, and
provides helpers for displaying track information.
"""

import base64
import math
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen.flac import Picture

from .models import TagMetadata, Track

TITLE_TAGS = ["TIT2", "\xa9nam", "TITLE", "title"]
ARTIST_TAGS = ["TPE1", "\xa9ART", "ARTIST", "artist"]
ALBUM_TAGS = ["TALB", "\xa9alb", "ALBUM", "album"]


class MetadataUnavailable(Exception):
    """Tag metadata could not be read from a file.

    Non-fatal: ingestion falls back to filename-derived fields.
    """


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                # Handle different formats
                if isinstance(value, list) and value:
                    value = value[0]
                text = str(value).strip()
                if text:
                    return text
        except (KeyError, ValueError):
            # Some formats (like Vorbis) raise ValueError for non-existent keys
            continue
    return None


def get_album_art(audio_file: Any) -> Optional[bytes]:
    """Return the first embedded picture of an opened Mutagen file, if any."""
    tags = getattr(audio_file, "tags", None)

    # MP3 (ID3)
    if tags is not None and hasattr(tags, "getall"):
        frames = tags.getall("APIC")
        if frames:
            return bytes(frames[0].data)

    # FLAC
    pictures = getattr(audio_file, "pictures", None)
    if pictures:
        return bytes(pictures[0].data)

    if tags is None:
        return None

    # MP4/M4A
    try:
        covers = audio_file.get("covr")
    except (KeyError, ValueError):
        covers = None
    if covers:
        return bytes(covers[0])

    # OGG Vorbis / Opus
    try:
        blocks = audio_file.get("metadata_block_picture")
    except (KeyError, ValueError):
        blocks = None
    if blocks:
        try:
            return bytes(Picture(base64.b64decode(blocks[0])).data)
        except Exception as e:
            logger.debug(f"Unreadable embedded picture block: {e}")

    return None


def read_tags(local_path: str) -> TagMetadata:
    """Read title, artist, album and embedded art from an audio file.

    Args:
        local_path: Path to the audio file

    Returns:
        TagMetadata with missing fields left as None

    Raises:
        MetadataUnavailable: If the file cannot be parsed at all
    """
    try:
        audio_file = MutagenFile(local_path)
    except Exception as e:
        raise MetadataUnavailable(f"Could not read tags from {local_path}: {e}") from e

    if audio_file is None:
        raise MetadataUnavailable(f"Unrecognized audio format: {local_path}")

    return TagMetadata(
        title=get_tag_value(audio_file, TITLE_TAGS),
        artist=get_tag_value(audio_file, ARTIST_TAGS),
        album=get_tag_value(audio_file, ALBUM_TAGS),
        album_art=get_album_art(audio_file),
    )


def probe_duration(local_path: str) -> float:
    """Decode the stream header and return the duration in seconds.

    Returns 0.0 when the duration cannot be determined; the audio backend
    reports the real value once the track is loaded.
    """
    try:
        audio_file = MutagenFile(local_path)
    except Exception as e:
        logger.debug(f"Duration probe failed for {local_path}: {e}")
        return 0.0

    if audio_file is None or not hasattr(audio_file, "info"):
        return 0.0

    length = getattr(audio_file.info, "length", None)
    if length is None or not math.isfinite(length) or length < 0:
        return 0.0
    return float(length)


def title_from_filename(local_path: str) -> str:
    """Filename with its extension stripped."""
    return Path(local_path).stem


def get_display_name(track: Track) -> str:
    """Get a display-friendly name for the track."""
    return f"{track.title} - {track.artist}"


def format_time(seconds: float) -> str:
    """Format time in seconds to M:SS format."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "0:00"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def format_track_count(count: int) -> str:
    """Track count label for list headers."""
    return f"{count} {'track' if count == 1 else 'tracks'}"
