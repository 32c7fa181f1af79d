"""Tests for UI state updates and list helpers."""

from music_deck.ui.blessed.helpers import (
    calculate_scroll_offset,
    clamp_selection,
    move_selection,
    progress_bar,
)
from music_deck.ui.blessed.render import format_track_row
from music_deck.ui.blessed.state import (
    UIState,
    append_search_char,
    fit_view,
    set_status,
    should_show_status,
)


class TestScrollOffset:
    """Test keeping the cursor inside the viewport."""

    def test_scrolls_down(self):
        assert calculate_scroll_offset(15, 0, 10, 20) == 6

    def test_scrolls_up(self):
        assert calculate_scroll_offset(2, 10, 10, 20) == 2

    def test_no_change_inside_viewport(self):
        assert calculate_scroll_offset(5, 0, 10, 20) == 0

    def test_never_scrolls_past_last_page(self):
        """After the list shrinks the offset snaps back."""
        assert calculate_scroll_offset(3, 8, 10, 4) == 0


class TestSelection:
    """Test selection movement."""

    def test_wrap_and_clamp(self):
        assert move_selection(9, 1, 10, wrap=True) == 0
        assert move_selection(9, 1, 10, wrap=False) == 9
        assert move_selection(0, -1, 10, wrap=True) == 9

    def test_empty_list(self):
        assert move_selection(3, 1, 0) == 0
        assert clamp_selection(5, 0) == 0


class TestUIState:
    """Test immutable UI state updates."""

    def test_fit_view_clamps_cursor_after_filtering(self):
        state = fit_view(UIState(cursor=12, scroll_offset=5), total_items=3, visible_rows=10)
        assert state.cursor == 2
        assert state.scroll_offset == 0

    def test_fit_view_returns_same_state_when_unchanged(self):
        state = UIState(cursor=1)
        assert fit_view(state, 5, 10) is state

    def test_typing_resets_cursor(self):
        state = append_search_char(UIState(cursor=4, scroll_offset=2), "x")
        assert state.search_text == "x"
        assert state.cursor == 0
        assert state.scroll_offset == 0

    def test_status_expires(self):
        state = set_status(UIState(), "Loaded 3 tracks", "green")
        assert should_show_status(state, now=state.status_time + 1)
        assert not should_show_status(state, now=state.status_time + 10)
        assert not should_show_status(UIState())


class TestRenderHelpers:
    """Test pure text layout helpers."""

    def test_progress_bar_width(self):
        assert len(progress_bar(0.0, 20)) == 20
        assert len(progress_bar(1.0, 20)) == 20
        assert progress_bar(0.5, 0) == ""

    def test_progress_bar_head_position(self):
        assert progress_bar(0.5, 10).index("●") == 5
        assert progress_bar(1.0, 10).endswith("●")

    def test_track_row_fits_width(self, make_track):
        row = format_track_row(make_track(1, title="A very long title " * 5, duration=125), 60)
        assert len(row) == 60
        assert row.endswith("2:05")

    def test_track_row_narrow_terminal(self, make_track):
        row = format_track_row(make_track(1), 4)
        assert row.strip().endswith("3:00")
