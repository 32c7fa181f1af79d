"""
Playback state for Music Deck

Holds the mutable playback state owned by the controller, and the pure
index arithmetic used for next/previous navigation.
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from .backend import DecodeError


@dataclass
class PlaybackState:
    """Playback state. Written only by PlaybackController.

    `current_index` is a position in the unfiltered library collection,
    never a rank in the visible (filtered/sorted) view.
    """

    current_index: Optional[int] = None
    is_playing: bool = False
    current_time: float = 0.0  # mirrors the backend position
    duration: float = 0.0  # mirrors the backend duration
    volume: float = 0.7
    muted: bool = False  # independent of volume
    repeat: bool = False
    shuffle: bool = False
    history: list[int] = field(default_factory=list)
    last_error: Optional[DecodeError] = None  # set when the backend fails on the current track

    @property
    def progress(self) -> float:
        """Fraction of the current track played, 0.0 - 1.0."""
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.current_time / self.duration))

    @property
    def effective_volume(self) -> float:
        """Volume actually heard (0 while muted)."""
        return 0.0 if self.muted else self.volume


def clamp_volume(volume: float) -> float:
    """Clamp a volume level to 0.0 - 1.0."""
    return max(0.0, min(1.0, volume))


def next_sequential_index(current: Optional[int], track_count: int) -> Optional[int]:
    """
    Index after `current`, wrapping at the end.

    Args:
        current: Current index, or None to start from the beginning
        track_count: Number of tracks in the library

    Returns:
        Next index, or None if the library is empty
    """
    if track_count <= 0:
        return None
    if current is None:
        current = -1
    return (current + 1) % track_count


def previous_sequential_index(current: Optional[int], track_count: int) -> Optional[int]:
    """
    Index before `current`, wrapping at the start.

    With no current track the first track is chosen.
    """
    if track_count <= 0:
        return None
    if current is None:
        return 0
    return (current - 1 + track_count) % track_count


def random_index(track_count: int, rng: random.Random) -> Optional[int]:
    """Uniformly random index in [0, track_count). May equal the current index."""
    if track_count <= 0:
        return None
    return rng.randrange(track_count)
