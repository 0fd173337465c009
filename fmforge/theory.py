"""Scales, degree arithmetic and the small enumerations shared by the generators.

Pitches live on a 180-value note space: 0 is C five octaves below C-0,
60 is C-0 and 179 is B-9. Values outside are clamped, never wrapped.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import TypeVar

E = TypeVar("E", bound=Enum)

NOTE_MIN = 0
NOTE_MAX = 179
SEMITONES_PER_OCTAVE = 12
OCTAVE_BIAS = 5  # note 0 sits five octaves below C-0

NOTE_NAMES: tuple[str, ...] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)


# -----------------------------------------------------------------------------
# Enumerations
# -----------------------------------------------------------------------------


class ScaleId(IntEnum):
    MINOR = 0
    HARMONIC_MINOR = 1
    MELODIC_MINOR = 2
    PHRYGIAN = 3
    PHRYGIAN_DOMINANT = 4
    DORIAN = 5
    MIXOLYDIAN = 6
    MAJOR = 7
    PENTATONIC_MINOR = 8
    PENTATONIC_MAJOR = 9
    CHROMATIC = 10
    LOCRIAN = 11
    BLUES = 12


class Contour(IntEnum):
    ARCH = 0
    INVERTED_ARCH = 1
    ASCENDING = 2
    DESCENDING = 3
    FLAT = 4
    RANDOM = 5


class PhraseForm(IntEnum):
    AABA = 0
    ABAB = 1
    AAAB = 2
    ABAC = 3
    RANDOM = 4


class GrooveType(IntEnum):
    STRAIGHT = 0
    SHUFFLE = 1
    FUNK = 2
    DRIVING = 3
    HALF_TIME = 4


SCALE_NAMES: Mapping[ScaleId, str] = MappingProxyType(
    {
        ScaleId.MINOR: "Minor (Natural)",
        ScaleId.HARMONIC_MINOR: "Harmonic Minor",
        ScaleId.MELODIC_MINOR: "Melodic Minor",
        ScaleId.PHRYGIAN: "Phrygian",
        ScaleId.PHRYGIAN_DOMINANT: "Phrygian Dominant",
        ScaleId.DORIAN: "Dorian",
        ScaleId.MIXOLYDIAN: "Mixolydian",
        ScaleId.MAJOR: "Major",
        ScaleId.PENTATONIC_MINOR: "Pentatonic Minor",
        ScaleId.PENTATONIC_MAJOR: "Pentatonic Major",
        ScaleId.CHROMATIC: "Chromatic",
        ScaleId.LOCRIAN: "Locrian",
        ScaleId.BLUES: "Blues",
    }
)

CONTOUR_NAMES: Mapping[Contour, str] = MappingProxyType(
    {
        Contour.ARCH: "Arch",
        Contour.INVERTED_ARCH: "Valley",
        Contour.ASCENDING: "Ascending",
        Contour.DESCENDING: "Descending",
        Contour.FLAT: "Flat",
        Contour.RANDOM: "Random",
    }
)

PHRASE_FORM_NAMES: Mapping[PhraseForm, str] = MappingProxyType(
    {
        PhraseForm.AABA: "AABA",
        PhraseForm.ABAB: "ABAB",
        PhraseForm.AAAB: "AAAB",
        PhraseForm.ABAC: "ABAC",
        PhraseForm.RANDOM: "Random",
    }
)

GROOVE_NAMES: Mapping[GrooveType, str] = MappingProxyType(
    {
        GrooveType.STRAIGHT: "Straight",
        GrooveType.SHUFFLE: "Shuffle",
        GrooveType.FUNK: "Funk",
        GrooveType.DRIVING: "Driving",
        GrooveType.HALF_TIME: "Half-time",
    }
)


def coerce_enum(enum_cls: type[E], value: object, default: E) -> E:
    """Map an int, name or member onto ``enum_cls``; unknown values give ``default``."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return coerce_enum(enum_cls, int(text), default)
        key = text.upper().replace("-", "_").replace(" ", "_")
        member = enum_cls.__members__.get(key)
        return member if member is not None else default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        try:
            return enum_cls(value)
        except ValueError:
            return default
    return default


# -----------------------------------------------------------------------------
# Scale tables
# -----------------------------------------------------------------------------

SCALE_INTERVALS: Mapping[ScaleId, tuple[int, ...]] = MappingProxyType(
    {
        ScaleId.MINOR: (0, 2, 3, 5, 7, 8, 10),
        ScaleId.HARMONIC_MINOR: (0, 2, 3, 5, 7, 8, 11),
        ScaleId.MELODIC_MINOR: (0, 2, 3, 5, 7, 9, 11),
        ScaleId.PHRYGIAN: (0, 1, 3, 5, 7, 8, 10),
        ScaleId.PHRYGIAN_DOMINANT: (0, 1, 4, 5, 7, 8, 10),
        ScaleId.DORIAN: (0, 2, 3, 5, 7, 9, 10),
        ScaleId.MIXOLYDIAN: (0, 2, 4, 5, 7, 9, 10),
        ScaleId.MAJOR: (0, 2, 4, 5, 7, 9, 11),
        ScaleId.PENTATONIC_MINOR: (0, 3, 5, 7, 10),
        ScaleId.PENTATONIC_MAJOR: (0, 2, 4, 7, 9),
        ScaleId.CHROMATIC: tuple(range(12)),
        ScaleId.LOCRIAN: (0, 1, 3, 5, 6, 8, 10),
        ScaleId.BLUES: (0, 3, 5, 6, 7, 10),
    }
)

_MINOR_FAMILY: frozenset[ScaleId] = frozenset(
    {
        ScaleId.MINOR,
        ScaleId.HARMONIC_MINOR,
        ScaleId.MELODIC_MINOR,
        ScaleId.PHRYGIAN,
        ScaleId.PHRYGIAN_DOMINANT,
        ScaleId.DORIAN,
        ScaleId.LOCRIAN,
        ScaleId.BLUES,
        ScaleId.PENTATONIC_MINOR,
    }
)


def _as_scale(scale: int) -> ScaleId | None:
    try:
        return ScaleId(scale)
    except ValueError:
        return None


def scale_name(scale: int) -> str:
    known = _as_scale(scale)
    if known is None:
        return "Unknown"
    return SCALE_NAMES[known]


def scale_intervals(scale: int) -> tuple[int, ...]:
    """Semitone offsets from the root; natural minor for unknown scales."""
    known = _as_scale(scale)
    if known is None:
        return SCALE_INTERVALS[ScaleId.MINOR]
    return SCALE_INTERVALS[known]


def is_minor_family(scale: int) -> bool:
    return _as_scale(scale) in _MINOR_FAMILY


def root_name(root: int) -> str:
    return NOTE_NAMES[int(root) % SEMITONES_PER_OCTAVE]


# -----------------------------------------------------------------------------
# Degree arithmetic
# -----------------------------------------------------------------------------


def clamp(value: int, lo: int, hi: int) -> int:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def wrap_degree(degree: int, scale_len: int) -> tuple[int, int]:
    """Split a degree into (octave shift, index into the scale)."""
    return divmod(int(degree), scale_len)


def degree_to_semitones(degree: int, scale: int) -> int:
    """Semitone offset of a scale degree; ``d + len`` is always 12 above ``d``."""
    intervals = scale_intervals(scale)
    octave_shift, index = wrap_degree(degree, len(intervals))
    return intervals[index] + octave_shift * SEMITONES_PER_OCTAVE


def note_from_degree(root: int, scale: int, degree: int, octave: int) -> int:
    """Compose root, wrapped degree and octave into a clamped note value."""
    intervals = scale_intervals(scale)
    octave_shift, index = wrap_degree(degree, len(intervals))
    note = root + intervals[index] + (octave + octave_shift + OCTAVE_BIAS) * SEMITONES_PER_OCTAVE
    return clamp(note, NOTE_MIN, NOTE_MAX)


def bpm_to_hz(bpm: int, speed: int) -> float:
    """Approximate tick rate for a tempo at the given ticks-per-row speed."""
    if speed <= 0:
        speed = 6
    return (bpm * speed) / 150.0
