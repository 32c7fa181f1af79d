"""
Playback controller - the single writer of PlaybackState.

Every user command (keyboard, CLI or otherwise) and every backend event goes
through the methods of PlaybackController. Operations on an empty library or
without a current track are logged no-ops, never errors.
"""

import random
from typing import Iterable, Optional, Sequence

from loguru import logger

from music_deck.core.config import PlayerConfig
from music_deck.domain.library.models import Track
from music_deck.domain.library.store import LibraryStore

from .backend import AudioBackend, DecodeError, EventKind, PlayerEvent
from .state import (
    PlaybackState,
    clamp_volume,
    next_sequential_index,
    previous_sequential_index,
    random_index,
)


class PlaybackController:
    """Playback state machine over the tracks of a LibraryStore."""

    def __init__(
        self,
        library: LibraryStore,
        backend: AudioBackend,
        config: Optional[PlayerConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.library = library
        self.backend = backend
        self.config = config or PlayerConfig()
        self.state = PlaybackState(
            volume=clamp_volume(self.config.volume),
            repeat=self.config.repeat_on_start,
            shuffle=self.config.shuffle_on_start,
        )
        self._rng = rng or random.Random()
        # Identifies the source currently loaded in the backend
        self._token = 0

        library.add_listener(self._on_library_replaced)
        backend.set_volume(self.state.volume)

    # Accessors

    @property
    def track_count(self) -> int:
        return len(self.library.tracks)

    @property
    def current_track(self) -> Optional[Track]:
        index = self.state.current_index
        if index is None or not 0 <= index < self.track_count:
            return None
        return self.library.tracks[index]

    @property
    def source_token(self) -> int:
        return self._token

    # Internal transitions

    def _switch_to(self, index: int) -> None:
        """Make `index` current, load its source and start playing."""
        track = self.library.tracks[index]
        self._token += 1

        self.state.current_index = index
        self.state.current_time = 0.0
        self.state.duration = track.duration
        self.state.last_error = None
        self.state.is_playing = True

        logger.info(f"Now playing [{index}] {track.artist} - {track.title}")
        self.backend.load_source(track.source, self._token)
        self.backend.play()

    def _push_history(self) -> None:
        if self.state.current_index is not None:
            self.state.history.append(self.state.current_index)

    def _on_library_replaced(self, tracks: Sequence[Track]) -> None:
        """Reset pointer and history in the same step as the table swap."""
        self.backend.stop()
        self._token += 1

        self.state.history.clear()
        self.state.is_playing = False
        self.state.current_time = 0.0
        self.state.last_error = None

        if tracks:
            self.state.current_index = 0
            self.state.duration = tracks[0].duration
            self.backend.load_source(tracks[0].source, self._token)
        else:
            self.state.current_index = None
            self.state.duration = 0.0

        logger.debug(f"Playback reset for library of {len(tracks)} tracks")

    # Transport

    def toggle_play_pause(self) -> None:
        if self.current_track is None:
            logger.debug("toggle_play_pause ignored: no current track")
            return

        self.state.is_playing = not self.state.is_playing
        if self.state.is_playing:
            self.backend.play()
        else:
            self.backend.pause()

    def select_track(self, index: int) -> None:
        """Play the track at `index` (a position in the unfiltered collection)."""
        if not 0 <= index < self.track_count:
            logger.warning(f"select_track ignored: index {index} out of range")
            return

        if index == self.state.current_index:
            if not self.state.is_playing:
                self.state.is_playing = True
                self.backend.play()
            return

        self._push_history()
        self._switch_to(index)

    def play_next(self) -> None:
        count = self.track_count
        if count == 0:
            logger.debug("play_next ignored: library is empty")
            return

        if self.state.shuffle:
            index = random_index(count, self._rng)
        else:
            index = next_sequential_index(self.state.current_index, count)

        self._push_history()
        self._switch_to(index)

    def play_previous(self) -> None:
        """Restart, step back through history, or go to the previous track.

        1. More than `restart_threshold` seconds in: restart the current track.
        2. History available: return to the most recent entry (consumes it).
        3. Otherwise: previous track in collection order, wrapping.
        """
        count = self.track_count
        if count == 0:
            logger.debug("play_previous ignored: library is empty")
            return

        if self.state.current_time > self.config.restart_threshold:
            self.seek(0.0)
            return

        if self.state.history:
            index = self.state.history.pop()
            if not 0 <= index < count:
                logger.warning(f"Dropping stale history entry {index}")
                index = previous_sequential_index(self.state.current_index, count)
        else:
            index = previous_sequential_index(self.state.current_index, count)

        self._switch_to(index)

    def on_playback_ended(self) -> None:
        """Natural end of the current track: repeat it or advance."""
        if self.current_track is None:
            return

        if self.state.repeat:
            self.backend.seek(0.0)
            self.state.current_time = 0.0
            self.state.is_playing = True
            self.backend.play()
            return

        self.play_next()

    def seek(self, seconds: float) -> None:
        if self.current_track is None:
            return

        seconds = max(0.0, seconds)
        if self.state.duration > 0:
            seconds = min(seconds, self.state.duration)

        self.backend.seek(seconds)
        self.state.current_time = seconds

    def seek_relative(self, delta: float) -> None:
        self.seek(self.state.current_time + delta)

    # Volume

    def set_volume(self, volume: float) -> None:
        volume = clamp_volume(volume)
        self.state.volume = volume
        self.backend.set_volume(volume)

        if volume > 0 and self.state.muted:
            self.state.muted = False
            self.backend.set_muted(False)

    def change_volume(self, delta: float) -> None:
        # Rounded so repeated 0.1 steps land exactly on 0 and 1
        self.set_volume(round(self.state.volume + delta, 4))

    def toggle_mute(self) -> None:
        self.state.muted = not self.state.muted
        self.backend.set_muted(self.state.muted)

    # Modes

    def set_repeat(self, enabled: bool) -> None:
        self.state.repeat = bool(enabled)

    def set_shuffle(self, enabled: bool) -> None:
        self.state.shuffle = bool(enabled)

    # Backend events

    def handle_event(self, event: PlayerEvent) -> None:
        """Apply one backend event. Events for a previous source are dropped."""
        if event.token != self._token:
            logger.debug(f"Dropping stale {event.kind.value} event (token {event.token})")
            return

        match event.kind:
            case EventKind.TIME_UPDATED:
                self.state.current_time = max(0.0, event.value)
            case EventKind.DURATION_KNOWN:
                self.state.duration = max(0.0, event.value)
            case EventKind.ENDED:
                self.on_playback_ended()
            case EventKind.ERROR:
                track = self.current_track
                name = track.source if track else "<none>"
                logger.error(f"Playback error for {name}: {event.message}")
                self.state.last_error = DecodeError(event.message or "Playback failed")
                self.state.is_playing = False

    def handle_events(self, events: Iterable[PlayerEvent]) -> None:
        for event in events:
            self.handle_event(event)

    def poll_backend(self) -> None:
        """Pull pending events from the backend and apply them."""
        self.handle_events(self.backend.poll())
