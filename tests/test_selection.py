"""Tests for the result selection state machine."""

import io

import pytest
from rich.console import Console

from cmdfy.core.errors import SelectionError
from cmdfy.core.selection import (
    SelectionEvent,
    SelectionView,
    event_for_key,
    initial_state,
    run_selection,
    transition,
)


def apply(state, *events):
    for event in events:
        state = transition(state, event)
    return state


class TestTransitions:
    """Pure transitions, no terminal involved."""

    def test_initial_state(self, entries):
        state = initial_state(entries)

        assert state.cursor == 0
        assert not state.quitting
        assert state.chosen is None

    def test_empty_entries_rejected(self):
        with pytest.raises(SelectionError):
            initial_state([])

    @pytest.mark.parametrize("start", [0, 1, 2])
    @pytest.mark.parametrize("steps", [0, 1, 2, 3, 7])
    def test_move_right_wraps(self, entries, start, steps):
        state = initial_state(entries)
        state = apply(state, *[SelectionEvent.MOVE_RIGHT] * start)
        state = apply(state, *[SelectionEvent.MOVE_RIGHT] * steps)

        assert state.cursor == (start + steps) % len(entries)

    @pytest.mark.parametrize("start", [0, 1, 2])
    @pytest.mark.parametrize("steps", [0, 1, 2, 3, 7])
    def test_move_left_wraps(self, entries, start, steps):
        m = len(entries)
        state = initial_state(entries)
        state = apply(state, *[SelectionEvent.MOVE_RIGHT] * start)
        state = apply(state, *[SelectionEvent.MOVE_LEFT] * steps)

        assert state.cursor == (start - steps % m + m) % m

    def test_confirm_chooses_current_entry(self, entries):
        state = apply(initial_state(entries), SelectionEvent.MOVE_RIGHT, SelectionEvent.MOVE_RIGHT)
        state = transition(state, SelectionEvent.CONFIRM)

        assert state.quitting
        assert state.chosen is entries[2]

    def test_confirm_on_error_entry_is_ignored(self, entries):
        state = transition(initial_state(entries), SelectionEvent.MOVE_RIGHT)
        after = transition(state, SelectionEvent.CONFIRM)

        assert after == state
        assert not after.quitting

    def test_quit(self, entries):
        state = transition(initial_state(entries), SelectionEvent.QUIT)

        assert state.quitting
        assert state.chosen is None

    def test_resize_changes_nothing(self, entries):
        state = transition(initial_state(entries), SelectionEvent.MOVE_RIGHT)
        assert transition(state, SelectionEvent.RESIZE) == state

    @pytest.mark.parametrize("event", list(SelectionEvent))
    def test_no_transition_after_quitting(self, entries, event):
        state = transition(initial_state(entries), SelectionEvent.QUIT)
        with pytest.raises(SelectionError):
            transition(state, event)

    def test_transitions_do_not_mutate(self, entries):
        state = initial_state(entries)
        transition(state, SelectionEvent.MOVE_RIGHT)
        assert state.cursor == 0


class TestKeys:
    """Key bindings."""

    @pytest.mark.parametrize("key, event", [
        ("q", SelectionEvent.QUIT),
        ("\x1b[C", SelectionEvent.MOVE_RIGHT),
        ("l", SelectionEvent.MOVE_RIGHT),
        ("\t", SelectionEvent.MOVE_RIGHT),
        ("\x1b[D", SelectionEvent.MOVE_LEFT),
        ("h", SelectionEvent.MOVE_LEFT),
        ("\x1b[Z", SelectionEvent.MOVE_LEFT),
        ("\r", SelectionEvent.CONFIRM),
    ])
    def test_bindings(self, key, event):
        assert event_for_key(key) == event

    def test_unknown_key(self):
        assert event_for_key("x") is None


class TestRunSelection:
    """The interactive loop driven by scripted keys."""

    def _console(self):
        return Console(file=io.StringIO(), width=140)

    def test_select_second_success(self, entries):
        keys = iter(["x", "l", "l", "\r"])
        chosen = run_selection(entries, lambda: next(keys), self._console())

        assert chosen is entries[2]

    def test_enter_on_error_then_move(self, entries):
        keys = iter(["l", "\r", "h", "\r"])
        chosen = run_selection(entries, lambda: next(keys), self._console())

        assert chosen is entries[0]

    def test_quit_returns_none(self, entries):
        keys = iter(["q"])
        assert run_selection(entries, lambda: next(keys), self._console()) is None

    def test_ctrl_c_quits(self, entries):
        def read_key():
            raise KeyboardInterrupt

        assert run_selection(entries, read_key, self._console()) is None


def test_view_renders_every_entry(entries):
    console = Console(file=io.StringIO(), width=140)
    console.print(SelectionView().render(initial_state(entries)))
    output = console.file.getvalue()

    assert "ANTHROPIC" in output
    assert "GEMINI" in output
    assert "boom" in output
    assert "git status && ls -la" in output
