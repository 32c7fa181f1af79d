"""
Audio file discovery.

Expands the user's file/folder selection into the ordered list of audio
files handed to ingestion.
"""

from pathlib import Path
from typing import Iterable

from loguru import logger

from music_deck.core.config import MusicConfig


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return local_path.suffix.lower() in supported_formats


def scan_directory(directory: Path, config: MusicConfig) -> list[Path]:
    """Find the audio files inside a directory.

    Args:
        directory: Directory to scan
        config: Music configuration (formats, recursion)

    Returns:
        Sorted list of audio file paths
    """
    pattern = "**/*" if config.scan_recursive else "*"
    try:
        return sorted(
            path
            for path in directory.glob(pattern)
            if path.is_file() and is_supported_format(path, config.supported_formats)
        )
    except PermissionError:
        logger.warning(f"Permission denied accessing: {directory}")
        return []


def collect_audio_files(paths: Iterable[str | Path], config: MusicConfig) -> list[Path]:
    """Expand files and folders into a de-duplicated list of audio files.

    Order follows the input: explicit files in place, folders expanded
    in sorted order. Non-audio files and missing paths are skipped.
    """
    files: list[Path] = []
    seen: set[Path] = set()

    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir():
            candidates = scan_directory(path, config)
        elif path.is_file():
            if not is_supported_format(path, config.supported_formats):
                logger.debug(f"Skipping non-audio file: {path}")
                continue
            candidates = [path]
        else:
            logger.warning(f"Path does not exist: {path}")
            continue

        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                files.append(candidate)

    logger.info(f"Collected {len(files)} audio files")
    return files
