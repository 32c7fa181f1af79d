"""Playback domain - transport state machine and audio backends.

This domain handles:
- The playback state machine (play/pause, next/previous, history)
- Shuffle, repeat, volume and mute
- The event channel between audio backend and controller
- MPV integration via JSON IPC
"""

# Backend interface and events
from .backend import (
    AudioBackend,
    DecodeError,
    EventKind,
    NullBackend,
    PlayerEvent,
)

# State
from .state import (
    PlaybackState,
    clamp_volume,
    next_sequential_index,
    previous_sequential_index,
    random_index,
)

# Controller
from .controller import PlaybackController

# MPV backend
from .mpv import BackendUnavailable, MpvBackend, check_mpv_available

__all__ = [
    # Backend
    "AudioBackend",
    "DecodeError",
    "EventKind",
    "NullBackend",
    "PlayerEvent",
    # State
    "PlaybackState",
    "clamp_volume",
    "next_sequential_index",
    "previous_sequential_index",
    "random_index",
    # Controller
    "PlaybackController",
    # MPV
    "BackendUnavailable",
    "MpvBackend",
    "check_mpv_available",
]
