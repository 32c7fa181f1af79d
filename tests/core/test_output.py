"""Tests for the loguru setup and the UI message queue."""

import threading

from loguru import logger

from music_deck.core import output


class TestLog:
    """Test log() routing between stdout and the UI queue."""

    def setup_method(self):
        output.clear_blessed_mode()
        output.drain_pending_messages()

    def teardown_method(self):
        output.clear_blessed_mode()
        output.drain_pending_messages()

    def test_prints_outside_ui(self, capsys):
        output.log("Loaded 3 tracks")
        assert "Loaded 3 tracks" in capsys.readouterr().out

    def test_debug_not_printed(self, capsys):
        output.log("internal detail", level="debug")
        assert capsys.readouterr().out == ""

    def test_queued_in_blessed_mode(self, capsys):
        output.set_blessed_mode()
        output.log("Shuffle on")
        output.log("Bad file", level="error")

        assert capsys.readouterr().out == ""
        assert output.drain_pending_messages() == [("Shuffle on", "white"), ("Bad file", "red")]
        assert output.drain_pending_messages() == []

    def test_silent_threads_not_queued(self):
        output.set_blessed_mode()

        def worker():
            threading.current_thread().silent_logging = True
            output.log("background detail")

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        assert output.drain_pending_messages() == []


class TestSetupLoguru:
    """Test the file sink."""

    def test_writes_to_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "deck.log"
        try:
            assert output.setup_loguru(log_file, level="DEBUG") == log_file
            logger.debug("hello from test")
            logger.complete()
            assert "hello from test" in log_file.read_text()
        finally:
            logger.remove()
