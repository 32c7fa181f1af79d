"""Music Deck - local media-library playback controller."""

__version__ = "0.1.0"
