"""Pattern generation pipeline.

Turns a role, scale, style and density/complexity pair into tracker events
in a caller-owned grid region. The stages run in a fixed order and all draw
from one generator, so a given seed always reproduces the same pattern.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np

from .config import PatternParams
from .grid import COL_NOTE, NOTE_OFF, VOLUME_MAX, VOLUME_MIN, PatternGrid
from .motifs import Motif, generate_role_motif
from .rng import GenRng
from .style import Role, StylePreset
from .theory import (
    NOTE_MAX,
    NOTE_MIN,
    OCTAVE_BIAS,
    SEMITONES_PER_OCTAVE,
    Contour,
    GrooveType,
    PhraseForm,
    clamp,
    is_minor_family,
    scale_intervals,
)

_LOGGER = logging.getLogger("fmforge.pattern")

MAX_BARS = 16
MAX_PLACEMENTS = 16
GROOVE_STEPS = 16

DEFAULT_ROWS_PER_BAR = 16
DEFAULT_ROWS_PER_BEAT = 4

FX_PITCH_SLIDE = 0x02
FX_PORTAMENTO = 0x03
FX_VIBRATO = 0x04
FX_VOLUME_SLIDE = 0x0A

LARGE_INTERVAL = 4  # semitones
PASSING_MIN_DISTANCE = 2
PASSING_MAX_DISTANCE = 6


# -----------------------------------------------------------------------------
# Harmony and groove tables
# -----------------------------------------------------------------------------

# Per-bar chord roots as scale degrees, simplest first.
MINOR_PROGRESSIONS: tuple[tuple[int, int, int, int], ...] = (
    (0, 3, 4, 0),  # i-iv-v-i
    (0, 5, 2, 6),  # i-VI-III-VII
    (0, 3, 6, 2),  # i-iv-VII-III
    (0, 4, 5, 4),  # i-v-VI-v
    (0, 3, 4, 3),  # i-iv-v-iv
)

MAJOR_PROGRESSIONS: tuple[tuple[int, int, int, int], ...] = (
    (0, 3, 4, 0),  # I-IV-V-I
    (0, 5, 3, 4),  # I-vi-IV-V
    (0, 2, 5, 1),  # I-iii-vi-ii
    (0, 3, 1, 4),  # I-IV-ii-V
    (0, 4, 3, 4),  # I-V-IV-V
)

TRIAD: tuple[int, ...] = (0, 2, 4)
SEVENTH: tuple[int, ...] = (0, 2, 4, 6)

GROOVES: Mapping[GrooveType, tuple[int, ...]] = MappingProxyType(
    {
        GrooveType.STRAIGHT: (
            0x7F, 0x50, 0x58, 0x48, 0x6C, 0x50, 0x58, 0x48,
            0x74, 0x50, 0x58, 0x48, 0x6C, 0x50, 0x58, 0x48,
        ),
        GrooveType.SHUFFLE: (
            0x7F, 0x40, 0x68, 0x38, 0x6C, 0x40, 0x68, 0x38,
            0x74, 0x40, 0x68, 0x38, 0x6C, 0x40, 0x68, 0x38,
        ),
        GrooveType.FUNK: (
            0x7F, 0x30, 0x58, 0x30, 0x60, 0x30, 0x6A, 0x30,
            0x70, 0x30, 0x58, 0x30, 0x60, 0x30, 0x6A, 0x30,
        ),
        GrooveType.DRIVING: (
            0x7F, 0x55, 0x60, 0x55, 0x70, 0x55, 0x60, 0x55,
            0x7A, 0x55, 0x60, 0x55, 0x70, 0x55, 0x60, 0x55,
        ),
        GrooveType.HALF_TIME: (
            0x7F, 0x48, 0x50, 0x48, 0x58, 0x48, 0x50, 0x48,
            0x78, 0x48, 0x50, 0x48, 0x58, 0x48, 0x50, 0x48,
        ),
    }
)

_DEFAULT_GROOVE: tuple[int, ...] = tuple(
    {0: 0x7F, 4: 0x70, 8: 0x74, 12: 0x70}.get(step, 0x68) for step in range(GROOVE_STEPS)
)

# Motif index per bar for each form, repeating every four bars. -1 is motif
# A lifted two degrees (the "C" of ABAC).
_FORM_MAP: Mapping[PhraseForm, tuple[int, int, int, int]] = MappingProxyType(
    {
        PhraseForm.AABA: (0, 0, 1, 0),
        PhraseForm.ABAB: (0, 1, 0, 1),
        PhraseForm.AAAB: (0, 0, 0, 1),
        PhraseForm.ABAC: (0, 1, 0, -1),
    }
)
_VARIATION_LIFT = 2


# -----------------------------------------------------------------------------
# Types
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GrooveTemplate:
    velocities: tuple[int, ...] = _DEFAULT_GROOVE

    def velocity(self, row_offset: int) -> int:
        return self.velocities[row_offset % GROOVE_STEPS]


@dataclass(frozen=True, slots=True)
class BarChord:
    """Chord of one bar: a root scale degree plus stacked-third tones."""

    root_degree: int = 0
    tones: tuple[int, ...] = TRIAD

    def is_chord_tone(self, degree: int, scale_len: int) -> bool:
        if scale_len <= 0:
            scale_len = 7
        wanted = degree % scale_len
        return any((self.root_degree + tone) % scale_len == wanted for tone in self.tones)


@dataclass(slots=True)
class MotifPlacement:
    bar_index: int
    motif_index: int = 0
    transpose_degrees: int = 0
    invert_contour: bool = False


@dataclass(slots=True)
class Phrase:
    total_bars: int = 0
    placements: list[MotifPlacement] = field(default_factory=list)

    def add(self, placement: MotifPlacement) -> bool:
        if len(self.placements) >= MAX_PLACEMENTS:
            return False
        self.placements.append(placement)
        return True


# -----------------------------------------------------------------------------
# Stages
# -----------------------------------------------------------------------------


def compute_bar_count(pattern_length: int, rows_per_bar: int) -> int:
    """Whole bars in the region, at least one and at most sixteen."""
    if rows_per_bar <= 0:
        rows_per_bar = DEFAULT_ROWS_PER_BAR
    return clamp(pattern_length // rows_per_bar, 1, MAX_BARS)


def build_chord_progression(
    rng: GenRng, bar_count: int, scale: int, complexity: int
) -> list[BarChord]:
    """Pick a progression, simpler ones favoured at low complexity, and tile it."""
    progressions = MINOR_PROGRESSIONS if is_minor_family(scale) else MAJOR_PROGRESSIONS
    cf = complexity / 100.0
    weights = [max(0.1, 1.0 - i * (1.0 - cf) * 0.25) for i in range(len(progressions))]
    chosen = progressions[rng.weighted_pick(weights)]

    chords: list[BarChord] = []
    for bar in range(bar_count):
        tones = TRIAD
        if cf > 0.6 and rng.rand_float() < cf * 0.4:
            tones = SEVENTH
        chords.append(BarChord(root_degree=chosen[bar % 4], tones=tones))
    return chords


def groove_template(groove: int) -> GrooveTemplate:
    try:
        return GrooveTemplate(GROOVES[GrooveType(groove)])
    except (KeyError, ValueError):
        return GrooveTemplate()


def build_phrase(rng: GenRng, form: int, bar_count: int, motif_count: int = 2) -> Phrase:
    """Assign a motif and transposition to every bar following ``form``."""
    if form == PhraseForm.RANDOM:
        form = rng.rand_int(0, PhraseForm.ABAC)
    try:
        template = _FORM_MAP[PhraseForm(form)]
    except (KeyError, ValueError):
        template = _FORM_MAP[PhraseForm.AABA]

    phrase = Phrase(total_bars=bar_count)
    for bar in range(bar_count):
        slot = template[bar % 4]
        if slot == -1:
            placement = MotifPlacement(bar, motif_index=0, transpose_degrees=_VARIATION_LIFT)
        else:
            placement = MotifPlacement(bar, motif_index=slot % max(1, motif_count))
        if bar >= 4:
            placement.transpose_degrees += (bar // 4) * rng.rand_int(-1, 2)
        if not phrase.add(placement):
            break
    return phrase


def resolve_contour(rng: GenRng, contour: int) -> Contour:
    if contour == Contour.RANDOM:
        return Contour(rng.rand_int(0, Contour.FLAT))
    try:
        return Contour(contour)
    except ValueError:
        return Contour.FLAT


def apply_melodic_contour(rng: GenRng, motif: Motif, contour: int, complexity: int) -> None:
    """Offset each note's degree by its position along the contour curve.

    Rests are skipped but still count toward a note's position.
    """
    count = len(motif)
    if count < 2:
        return
    amplitude = 2 + int(complexity / 100.0 * 5.0)
    for i, note in enumerate(motif.notes):
        if note.is_rest:
            continue
        position = i / (count - 1)
        if contour == Contour.ARCH:
            offset = int(np.sin(np.pi * position) * amplitude)
        elif contour == Contour.INVERTED_ARCH:
            offset = -int(np.sin(np.pi * position) * amplitude)
        elif contour == Contour.ASCENDING:
            offset = int(position * amplitude)
        elif contour == Contour.DESCENDING:
            offset = int((1.0 - position) * amplitude)
        elif contour == Contour.FLAT:
            offset = rng.rand_int(-1, 1)
        else:
            offset = 0
        note.relative_degree += offset


def apply_chord_tone_gravity(
    rng: GenRng,
    motif: Motif,
    chord: BarChord,
    scale_len: int,
    rows_per_beat: int,
    emphasis: float,
) -> None:
    """Pull strong-beat notes onto the nearest tone of ``chord``."""
    if scale_len <= 0:
        scale_len = 7
    if rows_per_beat <= 0:
        rows_per_beat = DEFAULT_ROWS_PER_BEAT
    for note in motif.notes:
        if note.is_rest or note.row_offset % rows_per_beat != 0:
            continue
        if rng.rand_float() >= emphasis:
            continue
        degree = note.relative_degree
        if chord.is_chord_tone(degree, scale_len):
            continue
        best_distance = None
        best_degree = degree
        for tone in chord.tones:
            for octave in (-1, 0, 1):
                candidate = chord.root_degree + tone + octave * scale_len
                distance = abs(candidate - degree)
                if best_distance is None or distance < best_distance:
                    best_distance = distance
                    best_degree = candidate
        note.relative_degree = best_degree


def _octave_window(params: PatternParams) -> tuple[int, int]:
    octave_min = clamp(params.octave_min, 0, 9)
    octave_max = clamp(params.octave_max, 0, 9)
    return octave_min, max(octave_min, octave_max)


def degree_to_note(
    degree: int, octave_min: int, scale_root: int, intervals: tuple[int, ...]
) -> int:
    """Note value for a folded degree above ``octave_min``."""
    scale_len = len(intervals)
    octave = octave_min + degree // scale_len
    semitone = scale_root + intervals[degree % scale_len]
    carry, semitone = divmod(semitone, SEMITONES_PER_OCTAVE)
    octave = clamp(octave + carry, 0, 9)
    return clamp((octave + OCTAVE_BIAS) * SEMITONES_PER_OCTAVE + semitone, NOTE_MIN, NOTE_MAX)


def _motif_offsets(motif: Motif, rows_per_bar: int) -> list[int]:
    """Bar-relative starts of each repetition of a motif shorter than the bar."""
    span = motif.length_in_rows
    if span <= 0 or span >= rows_per_bar:
        return [0]
    return list(range(0, rows_per_bar, span))


def write_motif(
    grid: PatternGrid,
    motif: Motif,
    placement: MotifPlacement,
    chord: BarChord,
    groove: GrooveTemplate,
    params: PatternParams,
    intervals: tuple[int, ...],
    bar_start: int,
    region_end: int,
    rows_per_bar: int,
) -> int:
    """Render one placed motif into the grid; returns the number of notes written."""
    scale_len = len(intervals)
    octave_min, octave_max = _octave_window(params)
    degree_range = (octave_max - octave_min + 1) * scale_len
    base = degree_range // 2

    written = 0
    for offset in _motif_offsets(motif, rows_per_bar):
        for note in motif.notes:
            if note.is_rest:
                continue
            row_offset = offset + note.row_offset
            if row_offset >= rows_per_bar:
                continue
            row = bar_start + row_offset
            if row >= region_end or not grid.in_bounds(row):
                continue

            shifted = note.relative_degree + placement.transpose_degrees
            degree = base - shifted + base if placement.invert_contour else base + shifted
            degree += chord.root_degree
            if degree < 0:
                degree %= scale_len
            elif degree >= degree_range:
                degree -= ((degree - degree_range) // scale_len + 1) * scale_len

            volume = clamp(groove.velocity(row_offset) + note.velocity_offset, VOLUME_MIN, VOLUME_MAX)
            grid.set_event(
                row,
                degree_to_note(degree, octave_min, params.scale_root, intervals),
                params.instrument,
                volume,
            )
            written += 1
    return written


def _previous_note_row(grid: PatternGrid, row: int, start: int) -> int | None:
    for r in range(row - 1, max(start, 0) - 1, -1):
        if grid.has_note(r):
            return r
    return None


def _next_note_row(grid: PatternGrid, row: int, end: int) -> int | None:
    for r in range(row + 1, min(end, grid.rows)):
        if grid.has_note(r):
            return r
    return None


def apply_effects(
    rng: GenRng,
    grid: PatternGrid,
    params: PatternParams,
    start: int,
    end: int,
    rows_per_bar: int,
    rows_per_beat: int,
) -> None:
    """Role-flavoured effect commands on written notes."""
    cf = params.complexity / 100.0
    role = params.role

    for row in range(start, end):
        if not grid.in_bounds(row) or not grid.has_note(row):
            continue

        large_interval = False
        prev_row = _previous_note_row(grid, row, start)
        if prev_row is not None:
            large_interval = abs(grid.note(row) - grid.note(prev_row)) > LARGE_INTERVAL

        long_note = all(
            grid.is_empty(r) for r in range(row + 1, min(row + 3, end)) if grid.in_bounds(r)
        )

        if role == Role.LEAD:
            if large_interval and rng.rand_float() < 0.4 * cf:
                grid.set_effect(row, FX_PORTAMENTO, rng.rand_int(0x10, 0x30))
            elif long_note and rng.rand_float() < 0.3 * cf:
                speed = rng.rand_int(3, 5)
                depth = rng.rand_int(2, 4)
                grid.set_effect(row, FX_VIBRATO, (speed << 4) | depth)
        elif role in (Role.BASS, Role.SLAP_BASS):
            if (row - start) % rows_per_bar == 0 and rng.rand_float() < 0.2 * cf:
                grid.set_effect(row, FX_PITCH_SLIDE, rng.rand_int(0x08, 0x18))
        elif role == Role.PAD:
            if rng.rand_float() < 0.5:
                speed = rng.rand_int(2, 3)
                depth = rng.rand_int(1, 3)
                grid.set_effect(row, FX_VIBRATO, (speed << 4) | depth)
        elif role == Role.DIST_GUITAR:
            if (row - start) % rows_per_beat != 0 and rng.rand_float() < 0.3 * cf:
                grid.set_effect(row, FX_VOLUME_SLIDE, 0x08)
        elif large_interval and rng.rand_float() < 0.15 * cf:
            grid.set_effect(row, FX_PORTAMENTO, rng.rand_int(0x10, 0x28))


def apply_note_offs(grid: PatternGrid, start: int, end: int, gap: int) -> None:
    """Cut each note ``gap`` rows before whatever follows it; 0 leaves notes legato."""
    if gap <= 0:
        return
    for row in range(start, end):
        if not grid.in_bounds(row) or not grid.has_note(row):
            continue
        following = end
        for r in range(row + 1, min(end, grid.rows)):
            if not grid.is_empty(r):
                following = r
                break
        off_row = following - gap
        if off_row <= row or off_row >= end or not grid.in_bounds(off_row):
            continue
        if grid.is_empty(off_row):
            grid.set(off_row, COL_NOTE, NOTE_OFF)


def apply_chromatic_passing(
    rng: GenRng,
    grid: PatternGrid,
    params: PatternParams,
    chromaticism: float,
    start: int,
    end: int,
    skip_interval: int,
) -> None:
    """Fill empty rows between nearby notes with a semitone approach."""
    for i in range(1, end - start - 1):
        row = start + i
        if not grid.in_bounds(row) or not grid.is_empty(row):
            continue
        if skip_interval > 0 and i % skip_interval == 0:
            continue

        prev_row = _previous_note_row(grid, row, start)
        next_row = _next_note_row(grid, row, end)
        if prev_row is None or next_row is None:
            continue
        if rng.rand_float() >= chromaticism * 0.25:
            continue

        target = grid.note(next_row)
        diff = target - grid.note(prev_row)
        if not PASSING_MIN_DISTANCE < abs(diff) <= PASSING_MAX_DISTANCE:
            continue
        passing = clamp(target + (-1 if diff > 0 else 1), NOTE_MIN, NOTE_MAX)
        grid.set_event(row, passing, params.instrument, rng.rand_int(0x30, 0x50))


# -----------------------------------------------------------------------------
# Pipeline
# -----------------------------------------------------------------------------


class PatternGenerator:
    """Runs the full pattern pipeline with its own random stream."""

    def __init__(self, rng: GenRng | None = None) -> None:
        self.rng = rng or GenRng()

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def generate(
        self, grid: PatternGrid | None, params: PatternParams, style: StylePreset
    ) -> bool:
        """Fill rows ``[0, pattern_length)``; see :meth:`generate_fill`."""
        return self.generate_fill(grid, params, style, 0, params.pattern_length)

    def generate_fill(
        self,
        grid: PatternGrid | None,
        params: PatternParams,
        style: StylePreset,
        start: int,
        end: int,
    ) -> bool:
        """Generate into ``[start, end)``.

        Returns False without touching the grid when the region is empty or
        longer than the grid. Existing events in the region are overwritten
        only where a new note lands.
        """
        length = end - start
        if grid is None or length <= 0 or length > grid.rows:
            _LOGGER.debug("Skipping generation for region [%d, %d)", start, end)
            return False

        rng = self.rng
        rows_per_bar = params.rows_per_bar if params.rows_per_bar > 0 else DEFAULT_ROWS_PER_BAR
        rows_per_beat = params.rows_per_beat if params.rows_per_beat > 0 else DEFAULT_ROWS_PER_BEAT

        bar_count = compute_bar_count(length, rows_per_bar)
        intervals = scale_intervals(params.scale)
        scale_len = len(intervals)

        chords = build_chord_progression(rng, bar_count, params.scale, params.complexity)
        groove = groove_template(params.groove)

        motifs = [
            generate_role_motif(
                rng,
                params.role,
                params.density,
                params.complexity,
                style.syncopation,
                rows_per_bar,
                params.motif_length_hint,
                scale_len,
                rows_per_beat=rows_per_beat,
            )
            for _ in range(2)
        ]
        contours = [resolve_contour(rng, params.contour) for _ in motifs]
        for motif, contour in zip(motifs, contours):
            apply_melodic_contour(rng, motif, contour, params.complexity)

        phrase = build_phrase(rng, params.phrase_form, bar_count, len(motifs))

        written = 0
        for placement in phrase.placements:
            bar_start = start + placement.bar_index * rows_per_bar
            if bar_start >= end:
                continue
            chord = chords[placement.bar_index]
            motif = motifs[placement.motif_index % len(motifs)].copy()
            apply_chord_tone_gravity(
                rng, motif, chord, scale_len, rows_per_beat, params.chord_tone_emphasis
            )
            written += write_motif(
                grid, motif, placement, chord, groove, params, intervals, bar_start, end, rows_per_bar
            )

        if params.allow_effects:
            apply_effects(rng, grid, params, start, end, rows_per_bar, rows_per_beat)

        gap = params.articulation_gap
        if gap is None:
            gap = style.articulation_gap_for(params.role)
        apply_note_offs(grid, start, end, gap)

        if style.chromaticism > 0.0:
            apply_chromatic_passing(
                rng, grid, params, style.chromaticism, start, end, style.passing_skip_interval
            )

        _LOGGER.debug(
            "Generated %d notes over %d bars (rows %d-%d, contours %s)",
            written,
            bar_count,
            start,
            end,
            "/".join(contour.name for contour in contours),
        )
        return True
