"""Shared fixtures: a recording audio backend and track builders."""

import pytest

from music_deck.core.config import MusicConfig, PlayerConfig
from music_deck.domain.library import LibraryStore, Track
from music_deck.domain.playback import PlaybackController


class FakeBackend:
    """Audio backend that records every command and replays queued events."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.events: list = []
        self.closed = False

    def load_source(self, source, token):
        self.calls.append(("load_source", source, token))

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))

    def stop(self):
        self.calls.append(("stop",))

    def seek(self, seconds):
        self.calls.append(("seek", seconds))

    def set_volume(self, volume):
        self.calls.append(("set_volume", volume))

    def set_muted(self, muted):
        self.calls.append(("set_muted", muted))

    def poll(self):
        events, self.events = self.events, []
        return events

    def close(self):
        self.closed = True

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def loaded_sources(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "load_source"]


def build_track(
    n: int,
    title: str | None = None,
    artist: str = "Artist",
    album: str = "Album",
    duration: float = 180.0,
    added_at: int | None = None,
) -> Track:
    return Track(
        id=f"track-{n}",
        source=f"/music/{n:02d}.mp3",
        title=title or f"Song {n}",
        artist=artist,
        album=album,
        duration=duration,
        album_art=None,
        added_at=n if added_at is None else added_at,
    )


@pytest.fixture
def make_track():
    """Factory fixture: make_track(n, title=..., artist=..., ...)."""
    return build_track


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def library():
    return LibraryStore(MusicConfig(ingest_workers=2))


@pytest.fixture
def four_tracks():
    return [build_track(n) for n in range(1, 5)]


@pytest.fixture
def controller(library, backend, four_tracks):
    """Controller over a library of four 180 s tracks, track 0 loaded and paused."""
    player = PlaybackController(library, backend, PlayerConfig())
    library.replace_tracks([t.source for t in four_tracks], four_tracks)
    backend.calls.clear()
    return player
