"""Tests for the playback state machine."""

import random

import pytest

from music_deck.core.config import PlayerConfig
from music_deck.domain.library import LibraryStore
from music_deck.domain.playback import (
    DecodeError,
    EventKind,
    PlaybackController,
    PlayerEvent,
)


def event(controller, kind, value=0.0, message="", token=None):
    return PlayerEvent(kind, controller.source_token if token is None else token, value, message)


class TestInitialState:
    """Test the controller before and right after a library load."""

    def test_empty_library_starts_with_nothing_current(self, library, backend):
        """A fresh controller has no current track and is not playing."""
        player = PlaybackController(library, backend)
        assert player.state.current_index is None
        assert player.state.is_playing is False
        assert player.current_track is None

    def test_initial_volume_pushed_to_backend(self, library, backend):
        """The configured volume is applied to the backend on creation."""
        PlaybackController(library, backend, PlayerConfig(volume=0.4))
        assert ("set_volume", 0.4) in backend.calls

    def test_load_selects_first_track_paused(self, controller):
        """After a load the first track is current but not playing."""
        assert controller.state.current_index == 0
        assert controller.state.is_playing is False
        assert controller.state.duration == 180.0


class TestEmptyLibrary:
    """Navigation on an empty library is a no-op, never an error."""

    @pytest.fixture
    def player(self, library, backend):
        return PlaybackController(library, backend)

    def test_play_next_noop(self, player, backend):
        """play_next does nothing without tracks."""
        backend.calls.clear()
        player.play_next()
        assert player.state.current_index is None
        assert backend.calls == []

    def test_play_previous_noop(self, player):
        """play_previous does nothing without tracks."""
        player.play_previous()
        assert player.state.current_index is None

    def test_toggle_play_noop(self, player):
        """toggle_play_pause does nothing without a current track."""
        player.toggle_play_pause()
        assert player.state.is_playing is False

    def test_select_out_of_range_ignored(self, player):
        """Out-of-range selection is ignored."""
        player.select_track(3)
        assert player.state.current_index is None


class TestTogglePlayPause:
    """Test play/pause toggling."""

    def test_toggle_starts_and_pauses(self, controller, backend):
        """Toggling flips is_playing and issues play then pause."""
        controller.toggle_play_pause()
        assert controller.state.is_playing is True
        controller.toggle_play_pause()
        assert controller.state.is_playing is False
        assert backend.names() == ["play", "pause"]


class TestSelectTrack:
    """Test direct track selection."""

    def test_select_plays_and_records_history(self, controller, backend):
        """Selecting another track pushes the old index and starts playing it."""
        controller.select_track(2)
        assert controller.state.current_index == 2
        assert controller.state.is_playing is True
        assert controller.state.history == [0]
        assert backend.loaded_sources() == ["/music/03.mp3"]

    def test_reselect_current_does_not_touch_history(self, controller, backend):
        """Re-selecting the current track only resumes playback."""
        controller.select_track(0)
        assert controller.state.history == []
        assert controller.state.is_playing is True
        assert backend.loaded_sources() == []

    def test_select_resets_position_mirrors(self, controller, four_tracks):
        """Switching tracks resets current_time and seeds duration from the track."""
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 42.0))
        controller.select_track(1)
        assert controller.state.current_time == 0.0
        assert controller.state.duration == four_tracks[1].duration

    def test_select_out_of_range_ignored(self, controller):
        """Indices outside the collection are ignored."""
        controller.select_track(9)
        controller.select_track(-1)
        assert controller.state.current_index == 0


class TestPlayNext:
    """Test sequential and shuffled advancing."""

    def test_sequential_advance(self, controller):
        """2 -> 3 on four tracks."""
        controller.select_track(2)
        controller.play_next()
        assert controller.state.current_index == 3

    def test_sequential_wraps(self, controller):
        """3 -> 0 on four tracks."""
        controller.select_track(3)
        controller.play_next()
        assert controller.state.current_index == 0

    def test_pushes_history_and_plays(self, controller):
        """The prior index is pushed and playback starts."""
        controller.play_next()
        assert controller.state.history == [0]
        assert controller.state.is_playing is True

    def test_none_current_starts_at_zero(self, library, backend, four_tracks):
        """With no current track, play_next selects index 0."""
        player = PlaybackController(library, backend)
        library.replace_tracks([], four_tracks)
        player.state.current_index = None
        player.play_next()
        assert player.state.current_index == 0
        assert player.state.history == []

    def test_shuffle_uses_random_index(self, library, backend, four_tracks):
        """Shuffle picks the index from the injected random source."""
        rng = random.Random(7)
        expected = random.Random(7).randrange(4)
        player = PlaybackController(library, backend, rng=rng)
        library.replace_tracks([], four_tracks)
        player.set_shuffle(True)
        player.play_next()
        assert player.state.current_index == expected

    def test_shuffle_stays_in_range(self, controller):
        """Shuffled indices are always inside the collection."""
        controller.set_shuffle(True)
        for _ in range(50):
            controller.play_next()
            assert 0 <= controller.state.current_index < 4


class TestPlayPrevious:
    """Test the three play_previous branches."""

    def test_restarts_when_past_threshold(self, controller, backend):
        """More than 3 s in: seek to 0, same index, playing state preserved."""
        controller.select_track(1)
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 5.0))
        backend.calls.clear()

        controller.play_previous()

        assert controller.state.current_index == 1
        assert controller.state.current_time == 0.0
        assert controller.state.is_playing is True
        assert controller.state.history == [0]
        assert backend.calls == [("seek", 0.0)]

    def test_restart_keeps_paused_state(self, controller):
        """Restarting a paused track leaves it paused."""
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 10.0))
        controller.play_previous()
        assert controller.state.is_playing is False
        assert controller.state.current_index == 0

    def test_returns_through_history(self, controller):
        """From 0, select_track(2) then play_previous returns to 0."""
        controller.select_track(2)
        controller.play_previous()
        assert controller.state.current_index == 0
        assert controller.state.history == []
        assert controller.state.is_playing is True

    def test_history_is_a_stack(self, controller):
        """Entries are consumed most recent first."""
        controller.select_track(1)
        controller.select_track(3)
        controller.play_previous()
        assert controller.state.current_index == 1
        controller.play_previous()
        assert controller.state.current_index == 0

    def test_wraps_without_history(self, controller):
        """Empty history at index 0 on four tracks yields 3."""
        controller.play_previous()
        assert controller.state.current_index == 3
        assert controller.state.is_playing is True

    def test_exactly_threshold_does_not_restart(self, controller):
        """At exactly 3 s the track changes instead of restarting."""
        controller.select_track(2)
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 3.0))
        controller.play_previous()
        assert controller.state.current_index == 0


class TestPlaybackEnded:
    """Test natural end-of-track handling."""

    def test_advances_without_repeat(self, controller):
        """End of track behaves exactly like play_next."""
        controller.select_track(1)
        controller.handle_event(event(controller, EventKind.ENDED))
        assert controller.state.current_index == 2
        assert controller.state.history == [0, 1]

    def test_repeat_restarts_same_track(self, controller, backend):
        """Repeat seeks to 0 and keeps playing the same track."""
        controller.select_track(1)
        controller.set_repeat(True)
        backend.calls.clear()

        controller.handle_event(event(controller, EventKind.ENDED))

        assert controller.state.current_index == 1
        assert controller.state.is_playing is True
        assert backend.calls == [("seek", 0.0), ("play",)]

    def test_repeat_wins_over_shuffle(self, controller):
        """With both modes on, the current track repeats."""
        controller.select_track(2)
        controller.set_shuffle(True)
        controller.set_repeat(True)
        controller.on_playback_ended()
        assert controller.state.current_index == 2
        assert controller.state.history == [0]


class TestSeek:
    """Test seeking and its clamping."""

    def test_seek_clamps_to_duration(self, controller, backend):
        """Seeking past the end clamps to the duration."""
        controller.seek(500.0)
        assert controller.state.current_time == 180.0
        assert backend.calls == [("seek", 180.0)]

    def test_seek_clamps_to_zero(self, controller):
        """Negative positions clamp to 0."""
        controller.seek(-4.0)
        assert controller.state.current_time == 0.0

    def test_seek_relative(self, controller):
        """Relative seeks move from the mirrored position."""
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 10.0))
        controller.seek_relative(5.0)
        assert controller.state.current_time == 15.0
        controller.seek_relative(-30.0)
        assert controller.state.current_time == 0.0

    def test_seek_without_track_is_noop(self, library, backend):
        """Seeking with nothing current sends nothing."""
        player = PlaybackController(library, backend)
        backend.calls.clear()
        player.seek(10.0)
        assert backend.calls == []


class TestVolume:
    """Test volume and mute."""

    def test_set_volume_clamps(self, controller):
        """Volume is clamped to 0..1."""
        controller.set_volume(1.5)
        assert controller.state.volume == 1.0
        controller.set_volume(-0.2)
        assert controller.state.volume == 0.0

    def test_positive_volume_unmutes(self, controller, backend):
        """set_volume(0.5) while muted clears muted."""
        controller.toggle_mute()
        controller.set_volume(0.5)
        assert controller.state.muted is False
        assert ("set_muted", False) in backend.calls

    def test_zero_volume_keeps_mute(self, controller):
        """set_volume(0) while muted stays muted."""
        controller.toggle_mute()
        controller.set_volume(0)
        assert controller.state.muted is True

    def test_toggle_mute_keeps_volume(self, controller):
        """Muting does not change the volume level."""
        controller.set_volume(0.3)
        controller.toggle_mute()
        assert controller.state.volume == 0.3
        assert controller.state.effective_volume == 0.0
        controller.toggle_mute()
        assert controller.state.effective_volume == 0.3

    def test_change_volume_steps(self, controller):
        """Relative changes clamp at the bounds."""
        controller.set_volume(0.95)
        controller.change_volume(0.1)
        assert controller.state.volume == 1.0

    def test_repeated_steps_reach_exact_zero(self, controller):
        """Seven -0.1 steps from 0.7 land on 0 and keep the player muted."""
        controller.set_volume(0.7)
        controller.toggle_mute()
        for _ in range(7):
            controller.change_volume(-0.1)
        assert controller.state.volume == 0.0
        assert controller.state.muted is True

    def test_repeated_steps_reach_exact_one(self, controller):
        controller.set_volume(0.0)
        for _ in range(10):
            controller.change_volume(0.1)
        assert controller.state.volume == 1.0


class TestBackendEvents:
    """Test the event channel from the backend."""

    def test_time_and_duration_mirrors(self, controller):
        """Time and duration events update the mirrors."""
        controller.handle_event(event(controller, EventKind.DURATION_KNOWN, 200.0))
        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 12.5))
        assert controller.state.duration == 200.0
        assert controller.state.current_time == 12.5
        assert controller.state.progress == pytest.approx(12.5 / 200.0)

    def test_stale_events_are_dropped(self, controller):
        """Events for a previously loaded source do not touch state."""
        old_token = controller.source_token
        controller.select_track(2)

        controller.handle_event(event(controller, EventKind.TIME_UPDATED, 99.0, token=old_token))
        controller.handle_event(event(controller, EventKind.ENDED, token=old_token))

        assert controller.state.current_index == 2
        assert controller.state.current_time == 0.0

    def test_error_stops_and_records(self, controller):
        """A decode error stops playback and is kept for display."""
        controller.select_track(1)
        controller.handle_event(event(controller, EventKind.ERROR, message="bad frame"))

        assert controller.state.is_playing is False
        assert isinstance(controller.state.last_error, DecodeError)
        assert str(controller.state.last_error) == "bad frame"
        assert controller.state.current_index == 1

    def test_skip_after_error_clears_it(self, controller):
        """skip-next still works after an error and clears it."""
        controller.select_track(1)
        controller.handle_event(event(controller, EventKind.ERROR, message="boom"))
        controller.play_next()
        assert controller.state.current_index == 2
        assert controller.state.last_error is None
        assert controller.state.is_playing is True

    def test_poll_backend_applies_queued_events(self, controller, backend):
        """poll_backend drains events from the backend."""
        backend.events = [event(controller, EventKind.TIME_UPDATED, 7.0)]
        controller.poll_backend()
        assert controller.state.current_time == 7.0
        assert backend.events == []


class TestLibraryReload:
    """Test that reloads reset playback atomically."""

    def test_reload_stops_and_resets(self, controller, backend, make_track):
        """A new collection stops playback and clears history and pointer."""
        controller.select_track(2)
        controller.select_track(3)
        backend.calls.clear()

        new_tracks = [make_track(10), make_track(11)]
        controller.library.replace_tracks([t.source for t in new_tracks], new_tracks)

        assert backend.calls[0] == ("stop",)
        assert controller.state.current_index == 0
        assert controller.state.history == []
        assert controller.state.is_playing is False
        assert controller.current_track == new_tracks[0]

    def test_reload_to_empty_clears_pointer(self, controller):
        """An empty reload leaves nothing current."""
        controller.library.replace_tracks([], [])
        assert controller.state.current_index is None
        assert controller.current_track is None

    def test_reload_invalidates_pending_events(self, controller, make_track):
        """Events issued before the reload are stale afterwards."""
        old_token = controller.source_token
        controller.library.replace_tracks([], [make_track(20)])
        controller.handle_event(event(controller, EventKind.ENDED, token=old_token))
        assert controller.state.current_index == 0
        assert controller.state.is_playing is False

    def test_rescan_resets_pointer(self, backend, four_tracks):
        """A rescan is a reload and resets the pointer."""
        store = LibraryStore(tag_reader=lambda path: None, duration_probe=lambda path: 60.0)
        player = PlaybackController(store, backend)
        store.load(["/music/a.mp3", "/music/b.mp3"])
        player.select_track(1)

        assert store.rescan() == 2
        assert player.state.current_index == 0
        assert player.state.history == []
