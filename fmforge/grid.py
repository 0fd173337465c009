"""Fixed-capacity tracker grid the pattern pipeline writes into."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from .theory import NOTE_MAX, NOTE_MIN, NOTE_NAMES, OCTAVE_BIAS, SEMITONES_PER_OCTAVE

MAX_ROWS = 256
MAX_EFFECT_COLUMNS = 8

EMPTY = -1
NOTE_OFF = 253

VOLUME_MIN = 0x10
VOLUME_MAX = 0x7F

INSTRUMENT_MAX = 0xFF

COL_NOTE = 0
COL_INSTRUMENT = 1
COL_VOLUME = 2
_FIRST_EFFECT_COL = 3


def effect_col(index: int) -> int:
    return _FIRST_EFFECT_COL + 2 * index


def effect_value_col(index: int) -> int:
    return _FIRST_EFFECT_COL + 2 * index + 1


def is_note_value(value: int) -> bool:
    return NOTE_MIN <= value <= NOTE_MAX


def format_note(value: int) -> str:
    """Tracker-style note text: ``C-4``, ``C#4``, ``OFF`` or ``...``."""
    if value == EMPTY:
        return "..."
    if value == NOTE_OFF:
        return "OFF"
    if not is_note_value(value):
        return "???"
    octave, pitch_class = divmod(value, SEMITONES_PER_OCTAVE)
    octave -= OCTAVE_BIAS
    name = NOTE_NAMES[pitch_class]
    if len(name) == 1:
        name += "-"
    return f"{name}{octave}"


class PatternGrid:
    """Rows of note/instrument/volume/effect cells, ``EMPTY`` where unused."""

    def __init__(self, rows: int = MAX_ROWS, effect_columns: int = 1) -> None:
        self.rows = max(0, min(MAX_ROWS, int(rows)))
        self.effect_columns = max(1, min(MAX_EFFECT_COLUMNS, int(effect_columns)))
        width = _FIRST_EFFECT_COL + 2 * self.effect_columns
        self.data: NDArray[np.int16] = np.full((self.rows, width), EMPTY, dtype=np.int16)

    def __len__(self) -> int:
        return self.rows

    def in_bounds(self, row: int) -> bool:
        return 0 <= row < self.rows

    def get(self, row: int, col: int) -> int:
        return int(self.data[row, col])

    def set(self, row: int, col: int, value: int) -> None:
        self.data[row, col] = value

    def note(self, row: int) -> int:
        return int(self.data[row, COL_NOTE])

    def has_note(self, row: int) -> bool:
        """True when the row holds a playable note (not empty, not note-off)."""
        return is_note_value(self.note(row))

    def is_empty(self, row: int) -> bool:
        return self.note(row) == EMPTY

    def set_event(self, row: int, note: int, instrument: int, volume: int | None = None) -> None:
        self.data[row, COL_NOTE] = note
        self.data[row, COL_INSTRUMENT] = instrument
        if volume is not None:
            self.data[row, COL_VOLUME] = volume

    def set_effect(self, row: int, command: int, value: int, column: int = 0) -> None:
        self.data[row, effect_col(column)] = command
        self.data[row, effect_value_col(column)] = value

    def clear(self) -> None:
        self.data.fill(EMPTY)

    def note_rows(self, start: int = 0, end: int | None = None) -> list[int]:
        stop = self.rows if end is None else min(self.rows, end)
        notes = self.data[max(0, start):stop, COL_NOTE]
        hits = np.flatnonzero((notes >= NOTE_MIN) & (notes <= NOTE_MAX))
        return [int(i) + max(0, start) for i in hits]

    def events(self) -> list[dict[str, Any]]:
        """Non-empty rows as plain dicts, for JSON and table output."""
        out: list[dict[str, Any]] = []
        for row in range(self.rows):
            cells = self.data[row]
            if np.all(cells == EMPTY):
                continue
            event: dict[str, Any] = {
                "row": row,
                "note": int(cells[COL_NOTE]),
                "note_name": format_note(int(cells[COL_NOTE])),
                "instrument": int(cells[COL_INSTRUMENT]),
                "volume": int(cells[COL_VOLUME]),
                "effects": [
                    (int(cells[effect_col(i)]), int(cells[effect_value_col(i)]))
                    for i in range(self.effect_columns)
                    if cells[effect_col(i)] != EMPTY
                ],
            }
            out.append(event)
        return out
