"""
Audio backend interface and the event channel back to the controller.

The backend renders audio; the controller owns playback state. Commands go
from controller to backend, and the backend reports what happened as
PlayerEvent values returned from `poll()`. Every event carries the source
token passed to `load_source`, so events produced for a track that is no
longer current can be recognized and dropped.
"""

from enum import Enum
from typing import NamedTuple, Protocol


class DecodeError(Exception):
    """The backend could not decode or render the current source."""


class EventKind(str, Enum):
    TIME_UPDATED = "time_updated"
    DURATION_KNOWN = "duration_known"
    ENDED = "ended"
    ERROR = "error"


class PlayerEvent(NamedTuple):
    """Something the backend observed for the source loaded with `token`."""

    kind: EventKind
    token: int
    value: float = 0.0  # position or duration in seconds
    message: str = ""  # error description


class AudioBackend(Protocol):
    """Transport commands accepted by an audio backend."""

    def load_source(self, source: str, token: int) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_muted(self, muted: bool) -> None: ...

    def poll(self) -> list[PlayerEvent]: ...

    def close(self) -> None: ...


class NullBackend:
    """Backend that accepts every command and never produces sound.

    Used when no audio output is available so the library can still be
    browsed and the controller still tracks state.
    """

    def load_source(self, source: str, token: int) -> None:
        pass

    def play(self) -> None:
        pass

    def pause(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def seek(self, seconds: float) -> None:
        pass

    def set_volume(self, volume: float) -> None:
        pass

    def set_muted(self, muted: bool) -> None:
        pass

    def poll(self) -> list[PlayerEvent]:
        return []

    def close(self) -> None:
        pass
