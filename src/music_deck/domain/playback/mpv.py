"""
MPV audio backend using JSON IPC.

MPV runs as an idle child process; transport commands are sent over its IPC
socket and `poll()` turns property reads into PlayerEvent values.
"""

import json
import os
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from music_deck.core.config import PlayerConfig

from .backend import EventKind, PlayerEvent

# Minimum valid duration (seconds) - durations below this indicate metadata errors
MIN_VALID_DURATION = 10.0

# Minimum playback time before allowing "track finished" (seconds)
MIN_PLAYBACK_TIME = 3.0

# Time allowed for a loaded file to report a duration before it counts as undecodable
LOAD_TIMEOUT = 5.0


class BackendUnavailable(Exception):
    """MPV is not installed or did not start."""


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC request and return the decoded response."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)
            sock.sendall((json.dumps(command) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8").strip()
    except (socket.error, OSError):
        return None

    # MPV may interleave event lines; the reply is the line carrying "error"
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    response = _request(socket_path, command)
    return response is not None and response.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    response = _request(socket_path, {"command": ["get_property", property_name]})
    if response and response.get("error") == "success":
        return response.get("data")
    return None


class MpvBackend:
    """Audio backend driving an MPV child process."""

    def __init__(self, config: PlayerConfig):
        self.config = config
        self.socket_path: Optional[str] = None
        self.process: Optional[subprocess.Popen] = None

        self._token: Optional[int] = None
        self._pending: list[PlayerEvent] = []
        self._last_duration: Optional[float] = None
        self._loaded_at: Optional[float] = None
        self._playing_since: Optional[float] = None
        self._ended_reported = False
        self._exit_reported = False

    # Process lifecycle

    def start(self) -> "MpvBackend":
        """Start MPV with JSON IPC.

        Raises:
            BackendUnavailable: If MPV cannot be started
        """
        if self.config.mpv_socket_path:
            socket_path = self.config.mpv_socket_path
        else:
            socket_path = str(Path(tempfile.gettempdir()) / f"music-deck-mpv-{os.getpid()}")

        logger.info(f"Starting MPV player with socket: {socket_path}")

        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            f"--volume={round(self.config.volume * 100)}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise BackendUnavailable(f"Failed to start MPV: {e}") from e

        timeout = 5.0
        start_time = time.time()
        while not os.path.exists(socket_path):
            if time.time() - start_time > timeout:
                process.kill()
                raise BackendUnavailable(f"MPV socket creation timeout after {timeout}s")
            time.sleep(0.1)

        if not send_mpv_command(socket_path, {"command": ["get_property", "idle-active"]}):
            process.kill()
            raise BackendUnavailable("MPV socket connection test failed")

        self.socket_path = socket_path
        self.process = process
        logger.info("MPV started successfully")
        return self

    def is_running(self) -> bool:
        """Check if the MPV process is alive and its socket exists."""
        if not self.process or self.process.poll() is not None:
            return False
        return bool(self.socket_path and os.path.exists(self.socket_path))

    def close(self) -> None:
        """Stop MPV process and cleanup."""
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                pass  # Process already terminated or couldn't be killed

        if self.socket_path and os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

        self.process = None
        self._token = None

    # Transport commands

    def _send(self, *command: Any) -> bool:
        ok = send_mpv_command(self.socket_path, {"command": list(command)})
        if not ok:
            logger.warning(f"MPV command failed: {list(command)}")
        return ok

    def load_source(self, source: str, token: int) -> None:
        self._token = token
        self._last_duration = None
        self._ended_reported = False
        self._loaded_at = time.time()
        self._playing_since = None

        # Load paused; the controller decides whether to start playback
        self._send("set_property", "pause", True)
        if not self._send("loadfile", source, "replace"):
            self._pending.append(
                PlayerEvent(EventKind.ERROR, token, message=f"MPV could not load {source}")
            )

    def play(self) -> None:
        if self._send("set_property", "pause", False):
            self._playing_since = time.time()

    def pause(self) -> None:
        self._send("set_property", "pause", True)
        self._playing_since = None

    def stop(self) -> None:
        self._send("stop")
        self._token = None
        self._playing_since = None

    def seek(self, seconds: float) -> None:
        self._ended_reported = False
        self._send("seek", seconds, "absolute")

    def set_volume(self, volume: float) -> None:
        self._send("set_property", "volume", round(max(0.0, min(1.0, volume)) * 100))

    def set_muted(self, muted: bool) -> None:
        self._send("set_property", "mute", muted)

    # Events

    def poll(self) -> list[PlayerEvent]:
        """Read MPV properties and report what changed since the last poll."""
        events, self._pending = self._pending, []
        token = self._token
        if token is None:
            return events

        if not self.is_running():
            if not self._exit_reported:
                self._exit_reported = True
                events.append(PlayerEvent(EventKind.ERROR, token, message="MPV exited"))
            return events

        position = get_mpv_property(self.socket_path, "time-pos")
        duration = get_mpv_property(self.socket_path, "duration")

        if duration and duration > 0 and duration != self._last_duration:
            self._last_duration = duration
            events.append(PlayerEvent(EventKind.DURATION_KNOWN, token, float(duration)))

        if position is not None:
            events.append(PlayerEvent(EventKind.TIME_UPDATED, token, float(position)))

        if self._last_duration is None:
            if self._loaded_at and time.time() - self._loaded_at > LOAD_TIMEOUT:
                if get_mpv_property(self.socket_path, "idle-active"):
                    self._loaded_at = None
                    events.append(
                        PlayerEvent(EventKind.ERROR, token, message="Could not decode track")
                    )
            return events

        if not self._ended_reported and self._is_finished(position or 0.0):
            self._ended_reported = True
            events.append(PlayerEvent(EventKind.ENDED, token))

        return events

    def _is_finished(self, position: float) -> bool:
        """Check if track finished with multiple validation layers.

        Safeguards:
        1. Minimum playback time (prevents incomplete metadata issues)
        2. Duration sanity check (detects corrupted/incomplete metadata)
        3. Position-based completion check
        4. EOF flag validation (with position confirmation)
        """
        if self._playing_since is None:
            return False
        if time.time() - self._playing_since < MIN_PLAYBACK_TIME:
            return False

        duration = self._last_duration or 0.0
        eof = get_mpv_property(self.socket_path, "eof-reached")

        if 0 < duration < MIN_VALID_DURATION:
            # Only trust eof when position is very close
            return eof is True and position >= duration - 0.1

        finished_by_position = duration > 0 and position >= duration - 0.5
        finished_by_eof = eof is True and duration > 0 and position >= duration - 1.0
        return finished_by_position or finished_by_eof
