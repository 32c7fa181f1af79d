"""Tests for the MPV backend's event reporting (no MPV process needed)."""

from unittest.mock import patch

import pytest

from music_deck.core.config import PlayerConfig
from music_deck.domain.playback import EventKind, MpvBackend
from music_deck.domain.playback import mpv


@pytest.fixture
def properties():
    """Property values returned by the patched get_mpv_property."""
    return {"time-pos": None, "duration": None, "eof-reached": False, "idle-active": False}


@pytest.fixture
def backend(properties):
    player = MpvBackend(PlayerConfig())
    with (
        patch.object(mpv, "send_mpv_command", return_value=True) as send,
        patch.object(mpv, "get_mpv_property", side_effect=lambda sock, name: properties.get(name)),
        patch.object(MpvBackend, "is_running", return_value=True),
    ):
        player.sent = send
        yield player


def kinds(events):
    return [e.kind for e in events]


class TestCommands:
    """Test commands sent over JSON IPC."""

    def test_load_source_loads_paused(self, backend):
        backend.load_source("/m/a.mp3", 3)
        commands = [call.args[1]["command"] for call in backend.sent.call_args_list]
        assert commands == [["set_property", "pause", True], ["loadfile", "/m/a.mp3", "replace"]]

    def test_volume_is_scaled(self, backend):
        backend.set_volume(0.55)
        assert backend.sent.call_args.args[1] == {"command": ["set_property", "volume", 55]}

    def test_failed_load_reports_error(self, backend):
        backend.sent.side_effect = lambda sock, cmd: cmd["command"][0] != "loadfile"
        backend.load_source("/m/missing.mp3", 4)
        events = backend.poll()
        assert events[0].kind == EventKind.ERROR
        assert events[0].token == 4


class TestPoll:
    """Test event generation from polled properties."""

    def test_no_events_without_source(self, backend, properties):
        properties["time-pos"] = 12.0
        assert backend.poll() == []

    def test_duration_reported_once(self, backend, properties):
        backend.load_source("/m/a.mp3", 1)
        properties.update({"duration": 200.0, "time-pos": 1.0})

        assert kinds(backend.poll()) == [EventKind.DURATION_KNOWN, EventKind.TIME_UPDATED]
        assert kinds(backend.poll()) == [EventKind.TIME_UPDATED]

    def test_events_carry_token(self, backend, properties):
        backend.load_source("/m/a.mp3", 9)
        properties.update({"duration": 200.0, "time-pos": 1.0})
        assert {e.token for e in backend.poll()} == {9}

    def test_ended_after_position_reaches_end(self, backend, properties):
        backend.load_source("/m/a.mp3", 1)
        backend.play()
        backend._playing_since -= 10
        properties.update({"duration": 200.0, "time-pos": 199.8})

        events = backend.poll()
        assert EventKind.ENDED in kinds(events)
        assert EventKind.ENDED not in kinds(backend.poll())

    def test_no_ended_right_after_start(self, backend, properties):
        """The minimum playback time guards against bogus end detection."""
        backend.load_source("/m/a.mp3", 1)
        backend.play()
        properties.update({"duration": 200.0, "time-pos": 199.9, "eof-reached": True})
        assert EventKind.ENDED not in kinds(backend.poll())

    def test_short_duration_needs_eof(self, backend, properties):
        """Durations under 10 s only end on eof with the position at the end."""
        backend.load_source("/m/a.mp3", 1)
        backend.play()
        backend._playing_since -= 10
        properties.update({"duration": 5.0, "time-pos": 4.95, "eof-reached": False})
        assert EventKind.ENDED not in kinds(backend.poll())

        properties["eof-reached"] = True
        assert EventKind.ENDED in kinds(backend.poll())

    def test_undecodable_track_reports_error(self, backend, properties):
        backend.load_source("/m/broken.mp3", 2)
        backend._loaded_at -= mpv.LOAD_TIMEOUT + 1
        properties["idle-active"] = True

        events = backend.poll()
        assert kinds(events) == [EventKind.ERROR]
        assert backend.poll() == []

    def test_stop_silences_events(self, backend, properties):
        backend.load_source("/m/a.mp3", 1)
        backend.stop()
        properties.update({"duration": 200.0, "time-pos": 3.0})
        assert backend.poll() == []
