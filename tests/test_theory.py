import pytest

from fmforge.theory import (
    NOTE_MAX,
    SCALE_INTERVALS,
    Contour,
    GrooveType,
    ScaleId,
    bpm_to_hz,
    clamp,
    coerce_enum,
    degree_to_semitones,
    is_minor_family,
    note_from_degree,
    root_name,
    scale_intervals,
    scale_name,
    wrap_degree,
)


def test_scale_lengths() -> None:
    assert len(scale_intervals(ScaleId.MAJOR)) == 7
    assert len(scale_intervals(ScaleId.PENTATONIC_MINOR)) == 5
    assert len(scale_intervals(ScaleId.BLUES)) == 6
    assert scale_intervals(ScaleId.CHROMATIC) == tuple(range(12))


def test_unknown_scale_falls_back_to_minor() -> None:
    assert scale_intervals(99) == SCALE_INTERVALS[ScaleId.MINOR]
    assert scale_name(99) == "Unknown"


@pytest.mark.parametrize("scale", list(ScaleId))
def test_degree_wraps_by_octave(scale: ScaleId) -> None:
    size = len(scale_intervals(scale))
    for degree in range(-12, 12):
        assert degree_to_semitones(degree + size, scale) == degree_to_semitones(degree, scale) + 12


def test_wrap_degree_negative() -> None:
    assert wrap_degree(-1, 7) == (-1, 6)
    assert wrap_degree(7, 7) == (1, 0)


def test_minor_family() -> None:
    assert is_minor_family(ScaleId.DORIAN)
    assert is_minor_family(ScaleId.BLUES)
    assert not is_minor_family(ScaleId.MAJOR)
    assert not is_minor_family(ScaleId.MIXOLYDIAN)
    assert not is_minor_family(99)


def test_clamp() -> None:
    assert clamp(-4, 0, 9) == 0
    assert clamp(12, 0, 9) == 9
    assert clamp(5, 0, 9) == 5


def test_note_from_degree() -> None:
    # A root, degree 0 at octave 0 is A-0.
    assert note_from_degree(9, ScaleId.MINOR, 0, 0) == 69
    assert note_from_degree(0, ScaleId.MAJOR, 7, 0) == 72
    assert note_from_degree(11, ScaleId.MAJOR, 40, 9) == NOTE_MAX


def test_root_name() -> None:
    assert root_name(9) == "A"
    assert root_name(13) == "C#"


def test_bpm_to_hz() -> None:
    assert bpm_to_hz(150, 6) == pytest.approx(6.0)
    assert bpm_to_hz(150, 0) == bpm_to_hz(150, 6)


class TestCoerceEnum:
    def test_members_and_ints(self) -> None:
        assert coerce_enum(GrooveType, GrooveType.FUNK, GrooveType.STRAIGHT) is GrooveType.FUNK
        assert coerce_enum(GrooveType, 3, GrooveType.STRAIGHT) is GrooveType.DRIVING

    def test_names(self) -> None:
        assert coerce_enum(GrooveType, "half-time", GrooveType.STRAIGHT) is GrooveType.HALF_TIME
        assert coerce_enum(Contour, "inverted arch", Contour.RANDOM) is Contour.INVERTED_ARCH
        assert coerce_enum(ScaleId, "2", ScaleId.MINOR) is ScaleId.MELODIC_MINOR

    def test_unknown_values_use_default(self) -> None:
        assert coerce_enum(GrooveType, 42, GrooveType.SHUFFLE) is GrooveType.SHUFFLE
        assert coerce_enum(GrooveType, "bogus", GrooveType.SHUFFLE) is GrooveType.SHUFFLE
        assert coerce_enum(GrooveType, True, GrooveType.SHUFFLE) is GrooveType.SHUFFLE
        assert coerce_enum(GrooveType, None, GrooveType.SHUFFLE) is GrooveType.SHUFFLE
