import numpy as np

from fmforge.grid import (
    COL_INSTRUMENT,
    COL_VOLUME,
    EMPTY,
    MAX_ROWS,
    NOTE_OFF,
    PatternGrid,
    effect_col,
    effect_value_col,
    format_note,
)


def test_new_grid_is_empty() -> None:
    grid = PatternGrid(rows=32)
    assert len(grid) == 32
    assert np.all(grid.data == EMPTY)
    assert grid.events() == []


def test_rows_are_capped() -> None:
    assert PatternGrid(rows=1000).rows == MAX_ROWS
    assert PatternGrid(rows=-4).rows == 0


def test_format_note() -> None:
    assert format_note(60) == "C-0"
    assert format_note(61) == "C#0"
    assert format_note(117) == "A-4"
    assert format_note(NOTE_OFF) == "OFF"
    assert format_note(EMPTY) == "..."
    assert format_note(200) == "???"


def test_set_event_and_effect() -> None:
    grid = PatternGrid(rows=16, effect_columns=2)
    grid.set_event(3, 100, 2, 0x40)
    grid.set_effect(3, 0x04, 0x32, column=1)
    assert grid.note(3) == 100
    assert grid.get(3, COL_INSTRUMENT) == 2
    assert grid.get(3, COL_VOLUME) == 0x40
    assert grid.get(3, effect_col(1)) == 0x04
    assert grid.get(3, effect_value_col(1)) == 0x32
    assert grid.get(3, effect_col(0)) == EMPTY


def test_note_off_is_not_a_note() -> None:
    grid = PatternGrid(rows=8)
    grid.set_event(1, 72, 0, 0x60)
    grid.set_event(2, NOTE_OFF, 0)
    assert grid.has_note(1)
    assert not grid.has_note(2)
    assert not grid.is_empty(2)
    assert grid.note_rows() == [1]
    assert grid.note_rows(2, 8) == []


def test_events_and_clear() -> None:
    grid = PatternGrid(rows=8)
    grid.set_event(4, 72, 1, 0x50)
    grid.set_effect(4, 0x03, 0x20)
    events = grid.events()
    assert len(events) == 1
    assert events[0]["row"] == 4
    assert events[0]["note_name"] == "C-1"
    assert events[0]["effects"] == [(0x03, 0x20)]
    grid.clear()
    assert grid.events() == []
