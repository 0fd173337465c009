"""Motif types and the role-specific motif generators.

A motif is a short idea in scale degrees relative to an implicit root,
placed once per bar by the phrase plan. Every role generator branches on a
complexity tier and reads its rhythm from the metric grid it is given.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, TypeAlias

from .rng import GenRng
from .style import Role
from .theory import clamp

MAX_MOTIF_NOTES = 8
VELOCITY_OFFSET_LIMIT = 20
HINT_UNITS_PER_BAR = 16


@dataclass(slots=True)
class MotifNote:
    relative_degree: int = 0
    row_offset: int = 0
    duration: int = 0  # rows; 0 sustains until the next event
    velocity_offset: int = 0
    is_rest: bool = False

    def __post_init__(self) -> None:
        self.velocity_offset = clamp(
            self.velocity_offset, -VELOCITY_OFFSET_LIMIT, VELOCITY_OFFSET_LIMIT
        )


@dataclass(slots=True)
class Motif:
    """Up to eight notes spanning ``length_in_rows`` rows."""

    length_in_rows: int = 16
    notes: list[MotifNote] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[MotifNote]:
        return iter(self.notes)

    @property
    def is_full(self) -> bool:
        return len(self.notes) >= MAX_MOTIF_NOTES

    def add(self, note: MotifNote) -> bool:
        """Append ``note``; returns False and drops it when the motif is full."""
        if self.is_full:
            return False
        self.notes.append(note)
        return True

    def clear(self) -> None:
        self.notes.clear()

    def copy(self) -> Motif:
        return Motif(self.length_in_rows, [replace(note) for note in self.notes])


MotifFn: TypeAlias = Callable[[GenRng, int, int, float, int, int], Motif]


# -----------------------------------------------------------------------------
# BASS
# -----------------------------------------------------------------------------


def bass_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Root-fifth ostinato, walking line, or syncopated funk figure."""
    motif = Motif(rows)
    cf = complexity / 100.0
    beat = max(1, rows // 4)

    if cf < 0.34:
        motif.add(MotifNote(relative_degree=0, row_offset=0, velocity_offset=10))
        fifth_row = rows // 2
        if syncopation > 0.3 and rng.rand_float() < syncopation:
            fifth_row += -1 if rng.rand_float() < 0.5 else 1
        motif.add(MotifNote(relative_degree=4, row_offset=fifth_row))
        if syncopation > 0.5 and rng.rand_float() < 0.5:
            motif.add(
                MotifNote(relative_degree=scale_len, row_offset=rows * 3 // 4, velocity_offset=-5)
            )
    elif cf < 0.67:
        approach = -1 if rng.rand_float() < 0.5 else scale_len - 1
        motif.add(MotifNote(relative_degree=0, row_offset=0, velocity_offset=8))
        motif.add(MotifNote(relative_degree=2, row_offset=beat))
        motif.add(MotifNote(relative_degree=4, row_offset=beat * 2))
        motif.add(MotifNote(relative_degree=approach, row_offset=beat * 3, velocity_offset=-3))
    else:
        df = density / 100.0
        for index, step in enumerate((0, 3, 6, 8, 11, 14)):
            if motif.is_full:
                break
            if rng.rand_float() >= df:
                continue
            row = step * rows // 16
            degree = 0 if index % 2 == 0 else 4
            if rng.rand_float() < 0.2:
                degree -= scale_len
            velocity = -15 if row % beat != 0 else 5
            motif.add(MotifNote(relative_degree=degree, row_offset=row, velocity_offset=velocity))
        if len(motif) < 2:
            motif.clear()
            motif.add(MotifNote(relative_degree=0, row_offset=0, velocity_offset=8))
            motif.add(MotifNote(relative_degree=4, row_offset=rows // 2))
    return motif


# -----------------------------------------------------------------------------
# LEAD
# -----------------------------------------------------------------------------


def lead_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Stepwise melody, sequenced three-note kernel, or rising arpeggio run."""
    motif = Motif(rows)
    cf = complexity / 100.0

    if cf < 0.34:
        beat = max(1, rows // 4)
        positions = (0, beat, beat * 2, beat * 3, beat * 3 + beat // 2)
        count = 3 + rng.rand_int(0, 2)
        degree = 0
        for i in range(count):
            row = positions[i % len(positions)]
            if syncopation > 0.2 and rng.rand_float() < syncopation and i > 0:
                row += -1 if rng.rand_float() < 0.5 else 1
                row = clamp(row, 0, rows - 1)
            if i == count // 2:
                leap = rng.rand_int(1, 2)
                degree += leap if rng.rand_float() < 0.5 else -leap
            else:
                degree += 1 if rng.rand_float() < 0.5 else -1
            motif.add(MotifNote(relative_degree=degree, row_offset=row))
    elif cf < 0.67:
        kernel = (0, rng.rand_int(1, 2), rng.rand_int(-1, 1))
        step = max(1, rows // 8)
        half_bar = rows // 2
        for start, lift in ((0, 0), (half_bar, 2)):
            for i, degree in enumerate(kernel):
                motif.add(
                    MotifNote(
                        relative_degree=degree + lift,
                        row_offset=start + i * step,
                        velocity_offset=5 if i == 0 else 0,
                    )
                )
    else:
        count = min(MAX_MOTIF_NOTES, 5 + rng.rand_int(0, 3))
        start = 0 if rng.rand_float() < 0.5 else rows // 2
        for i in range(count):
            motif.add(
                MotifNote(
                    relative_degree=i,
                    row_offset=min(start + i, rows - 1),
                    velocity_offset=5 if i == 0 else -5,
                )
            )
    return motif


# -----------------------------------------------------------------------------
# PAD
# -----------------------------------------------------------------------------


def pad_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Sustained root; busier styles add a third and a fifth."""
    motif = Motif(rows)
    cf = complexity / 100.0
    motif.add(MotifNote(relative_degree=0, row_offset=0, velocity_offset=5))
    if cf > 0.3 and rng.rand_float() < cf:
        motif.add(MotifNote(relative_degree=2, row_offset=rows // 2))
    if cf > 0.6 and rng.rand_float() < cf * 0.5:
        motif.add(MotifNote(relative_degree=4, row_offset=rows // 4, velocity_offset=-5))
    return motif


# -----------------------------------------------------------------------------
# RHYTHM
# -----------------------------------------------------------------------------


def rhythm_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Repeated root hits on a density-chosen subdivision."""
    motif = Motif(rows)
    df = density / 100.0
    if df < 0.33:
        subdivision = 4
    elif df < 0.66:
        subdivision = 8
    else:
        subdivision = 16
    step = max(1, rows // subdivision)
    beat = max(1, rows // 4)

    for s in range(subdivision):
        if motif.is_full:
            break
        row = s * step
        if syncopation > 0.3 and rng.rand_float() < syncopation * 0.3:
            if row % beat == 0 and row != 0:
                continue
        if row == 0:
            velocity = 15
        elif row == rows // 2:
            velocity = 8
        elif row % beat == 0:
            velocity = 3
        else:
            velocity = -10
        motif.add(
            MotifNote(
                relative_degree=0,
                row_offset=row,
                duration=step - 1 if step > 1 else 1,
                velocity_offset=velocity,
            )
        )
    return motif


# -----------------------------------------------------------------------------
# SFX
# -----------------------------------------------------------------------------


def sfx_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Short burst of random degrees at the start or end of the bar."""
    motif = Motif(rows)
    burst_start = 0 if rng.rand_float() < 0.5 else max(0, rows - 4)
    count = min(MAX_MOTIF_NOTES, rng.rand_int(2, 4))
    for i in range(count):
        motif.add(
            MotifNote(
                relative_degree=rng.rand_int(-3, 3),
                row_offset=min(burst_start + i, rows - 1),
                duration=1,
                velocity_offset=10 - i * 5,
            )
        )
    return motif


# -----------------------------------------------------------------------------
# SLAP BASS
# -----------------------------------------------------------------------------


def slap_bass_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Thumbed root, quiet ghost notes and an octave pop."""
    motif = Motif(rows)
    df = density / 100.0
    motif.add(MotifNote(relative_degree=0, row_offset=0, duration=2, velocity_offset=15))

    for ghost in (3, 5, 7, 11, 13, 15):
        if len(motif) >= MAX_MOTIF_NOTES - 1:
            break
        if rng.rand_float() < df * 0.7:
            row = ghost * rows // 16
            if syncopation > 0.3:
                row += -1 if rng.rand_float() < 0.5 else 0
            row = clamp(row, 1, rows - 1)
            motif.add(MotifNote(relative_degree=0, row_offset=row, duration=1, velocity_offset=-20))

    if rng.rand_float() < 0.7 and not motif.is_full:
        pop_row = rows * 3 // 8 if rng.rand_float() < 0.5 else rows * 5 // 8
        motif.add(
            MotifNote(relative_degree=scale_len, row_offset=pop_row, duration=2, velocity_offset=5)
        )
    return motif


# -----------------------------------------------------------------------------
# DISTORTED GUITAR
# -----------------------------------------------------------------------------


def dist_guitar_motif(
    rng: GenRng, density: int, complexity: int, syncopation: float, rows: int, scale_len: int
) -> Motif:
    """Palm-muted eighth chug, or a root/fifth power-chord riff."""
    motif = Motif(rows)
    cf = complexity / 100.0

    if cf < 0.5:
        step = max(1, rows // 8)
        half_bar = max(1, rows // 2)
        for row in range(0, rows, step):
            if motif.is_full:
                break
            motif.add(
                MotifNote(
                    relative_degree=0,
                    row_offset=row,
                    duration=1,
                    velocity_offset=10 if row % half_bar == 0 else -5,
                )
            )
    else:
        for step, degree in ((0, 0), (3, 4), (6, 0), (8, 4), (11, 0)):
            if rng.rand_float() < 0.7:
                motif.add(
                    MotifNote(
                        relative_degree=degree,
                        row_offset=step * rows // 16,
                        duration=1,
                        velocity_offset=5 if step % 4 != 0 else -3,
                    )
                )
        if len(motif) < 2:
            motif.clear()
            motif.add(MotifNote(relative_degree=0, row_offset=0, velocity_offset=10))
            motif.add(MotifNote(relative_degree=0, row_offset=rows // 2, velocity_offset=5))
    return motif


ROLE_MOTIFS: Mapping[Role, MotifFn] = MappingProxyType(
    {
        Role.LEAD: lead_motif,
        Role.BASS: bass_motif,
        Role.PAD: pad_motif,
        Role.RHYTHM: rhythm_motif,
        Role.SFX: sfx_motif,
        Role.SLAP_BASS: slap_bass_motif,
        Role.DIST_GUITAR: dist_guitar_motif,
    }
)


def motif_rows(rows_per_bar: int, length_hint: int, rows_per_beat: int = 0) -> int:
    """Rows a motif spans.

    ``length_hint`` counts sixteenths of a bar: 0 or at least 16 spans the
    whole bar, 8 half of it. The result is scaled to ``rows_per_bar`` and,
    when ``rows_per_beat`` is positive, rounded down to whole beats so motif
    offsets stay beat-aligned.
    """
    if length_hint <= 0 or length_hint >= HINT_UNITS_PER_BAR:
        return rows_per_bar
    rows = length_hint * rows_per_bar // HINT_UNITS_PER_BAR
    if 0 < rows_per_beat < rows_per_bar:
        rows -= rows % rows_per_beat
        rows = max(rows, rows_per_beat)
    return max(1, rows)


def generate_role_motif(
    rng: GenRng,
    role: int,
    density: int,
    complexity: int,
    syncopation: float,
    rows_per_bar: int,
    length_hint: int,
    scale_len: int,
    *,
    rows_per_beat: int = 0,
) -> Motif:
    """Dispatch to the role's generator; unknown roles use the lead generator."""
    try:
        fn = ROLE_MOTIFS[Role(role)]
    except ValueError:
        fn = lead_motif
    rows = motif_rows(rows_per_bar, length_hint, rows_per_beat)
    return fn(rng, density, complexity, syncopation, rows, scale_len)
